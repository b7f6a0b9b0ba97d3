"""
HTML sanitizing for user-supplied strings.
"""

from __future__ import annotations

from typing import Any, Callable

import nh3


def sanitize_text(value: str) -> str:
    # nh3 keeps a safe tag allowlist and drops scripts, handlers and styles.
    return nh3.clean(value)


def sanitize_value(value: Any, sanitize: Callable[[str], str] = sanitize_text) -> Any:
    """
    Sanitize a string, or every string inside a list. Other values pass through.
    """
    if isinstance(value, str):
        return sanitize(value)
    if isinstance(value, list):
        return [sanitize(v) if isinstance(v, str) else v for v in value]
    return value
