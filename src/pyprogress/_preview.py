"""Helpers for compact diagnostic logging.

Stored payloads and producer results can be arbitrarily large (or
arbitrarily broken).  This module shortens them before they are emitted
in DEBUG/WARNING logs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence, Set
from typing import Any

_MAX_ITEMS = 20


def preview_for_log(value: Any, *, max_string: int = 256, _depth: int = 0) -> Any:
    """Return a shortened copy of *value* suitable for log messages."""
    if _depth > 10:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated {len(value) - max_string} chars>"
        return value

    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        items = list(value.items())
        preview: dict[str, Any] = {
            str(k): preview_for_log(v, max_string=max_string, _depth=_depth + 1) for k, v in items[:_MAX_ITEMS]
        }
        if len(items) > _MAX_ITEMS:
            preview["…"] = f"<{len(items) - _MAX_ITEMS} more keys>"
        return preview

    if isinstance(value, (Sequence, Set)):
        seq = sorted(value, key=repr) if isinstance(value, Set) else list(value)
        shortened = [preview_for_log(v, max_string=max_string, _depth=_depth + 1) for v in seq[:_MAX_ITEMS]]
        if len(seq) > _MAX_ITEMS:
            shortened.append(f"<{len(seq) - _MAX_ITEMS} more items>")
        return shortened

    # Fallback: represent unknown objects without dumping internals.
    return preview_for_log(repr(value), max_string=max_string, _depth=_depth + 1)
