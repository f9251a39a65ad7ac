"""
CLI utility helpers — consoles and work-function resolution.
"""

from __future__ import annotations

import importlib
from collections.abc import Callable
from typing import Any

from rich.console import Console

from cadence.core.errors import InvalidTargetError

console = Console()
err_console = Console(stderr=True)


def resolve_target(target: str) -> Callable[..., Any]:
    """Import ``package.module:function`` and return the callable.

    Dotted attribute paths after the colon are followed, so
    ``jobs.billing:Syncer.run`` resolves a class attribute.

    Raises:
        InvalidTargetError: If the target is malformed, missing or not callable
    """
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise InvalidTargetError(target, "expected 'package.module:function'")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise InvalidTargetError(target, f"cannot import module '{module_name}'", cause=exc) from exc

    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as exc:
            raise InvalidTargetError(target, f"'{attr}' not found", cause=exc) from exc

    if not callable(obj):
        raise InvalidTargetError(target, "target is not callable")
    return obj
