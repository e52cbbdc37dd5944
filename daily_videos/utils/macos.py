"""macOS-specific helpers."""

from __future__ import annotations

import importlib.util
import logging
import platform
from typing import Optional


def is_macos() -> bool:
    return platform.system() == "Darwin"


def photokit_available() -> bool:
    """True when PyObjC and the Photos framework bindings can be imported."""
    if not is_macos():
        return False
    return all(
        importlib.util.find_spec(module) is not None
        for module in ("objc", "Photos", "Foundation")
    )


def set_process_name(name: str, logger: Optional[logging.Logger] = None) -> bool:
    """Set the process name shown in the Photos permission prompt."""
    if not is_macos():
        return False

    try:
        from Foundation import NSProcessInfo  # type: ignore
    except ImportError:
        if logger:
            logger.debug("PyObjC not installed; cannot set process name")
        return False

    try:
        process_info = NSProcessInfo.processInfo()
        if process_info.processName() != name:
            process_info.setProcessName_(name)
        return True
    except Exception as exc:  # pragma: no cover - depends on PyObjC runtime
        if logger:
            logger.warning("Failed to set process name: %s", exc)
        return False
