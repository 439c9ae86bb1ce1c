"""Category-filtered debug output controlled by the ``PYNES_DEBUG`` variable.

``PYNES_DEBUG`` holds a comma-separated list of categories (``cpu``, ``cart``,
``ppu``, ``system``, ``perf``, ``trace``); ``all`` turns every category on.
The variable is read once and cached until :func:`reload_categories`.
"""

from __future__ import annotations

import os
from typing import FrozenSet, Optional

ENV_VAR = "PYNES_DEBUG"
ALL_CATEGORIES = "all"

_categories: Optional[FrozenSet[str]] = None


def _parse(value: str) -> FrozenSet[str]:
    return frozenset(part.strip().lower() for part in value.split(",") if part.strip())


def enabled_categories() -> FrozenSet[str]:
    global _categories
    if _categories is None:
        _categories = _parse(os.environ.get(ENV_VAR, ""))
    return _categories


def reload_categories() -> None:
    """Drop the cache so the next lookup re-reads the environment."""

    global _categories
    _categories = None


def debug_enabled(category: str | None = None) -> bool:
    """True if ``category`` is enabled, or if any category is when it is ``None``."""

    categories = enabled_categories()
    if not categories:
        return False
    if category is None or ALL_CATEGORIES in categories:
        return True
    return category.lower() in categories


def debug_log(category: str, message: str, *args) -> None:
    if not debug_enabled(category):
        return
    if args:
        try:
            message = message % args
        except (TypeError, ValueError):
            message = f"{message} {args!r}"
    print(f"[NES][{category}] {message}")
