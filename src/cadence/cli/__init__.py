"""
CLI layer for cadence.

Runs a single worker against an importable work function, for jobs that
are deployed as their own process.

Entry point::

    cadence --help
"""

from cadence.cli.app import app

__all__ = ["app"]
