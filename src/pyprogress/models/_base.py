"""Base model and lenient coercers for progress records.

Every progress model inherits from :class:`ProgressBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase storage keys map
  automatically to snake_case fields.
* ``extra="ignore"`` so unknown keys written by newer versions are
  tolerated.
* ``frozen=True`` so records handed to observers are snapshots.

The ``coerce_*`` helpers never raise.  Stored records and producer
results are external input; a bad field falls back to its default
instead of failing the whole model.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer, model_validator
from pydantic.alias_generators import to_camel

from pyprogress._constants import MAX_STARS, MIN_LEVEL, MIN_STARS

_TRUE_STRINGS = frozenset({"1", "true", "yes", "y", "on"})


def coerce_non_negative_int(value: Any, default: int = 0) -> int:
    """Coerce *value* to an ``int >= 0``.

    Integers and whole-number strings are kept exact at any size.
    Floats and other numeric strings are truncated toward zero,
    negatives become ``0`` and anything non-numeric becomes *default*.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
        try:
            return max(0, int(value))
        except ValueError:
            pass
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return max(0, int(number))


def coerce_level(value: Any) -> int:
    """Coerce a stored level; anything below the first level becomes it."""
    return max(MIN_LEVEL, coerce_non_negative_int(value, MIN_LEVEL))


def clamp_stars(value: Any) -> int:
    """Coerce a star rating into ``[0, 3]``."""
    return min(MAX_STARS, max(MIN_STARS, coerce_non_negative_int(value)))


def coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def coerce_badges(value: Any) -> frozenset[str]:
    """Deduplicate badge names into a set.

    A bare string is a single badge.  Non-string and blank entries are
    dropped.
    """
    if value is None:
        return frozenset()
    if isinstance(value, str):
        name = value.strip()
        return frozenset({name}) if name else frozenset()
    if isinstance(value, Mapping) or not isinstance(value, Iterable):
        return frozenset()
    return frozenset(item.strip() for item in value if isinstance(item, str) and item.strip())


def _sorted_badges(value: frozenset[str]) -> list[str]:
    return sorted(value)


NonNegativeInt = Annotated[int, BeforeValidator(coerce_non_negative_int)]
"""Annotated ``int`` that coerces garbage to ``0`` instead of failing."""

Level = Annotated[int, BeforeValidator(coerce_level)]

Stars = Annotated[int, BeforeValidator(clamp_stars)]
"""Annotated ``int`` clamped to the ``[0, 3]`` star range."""

Flag = Annotated[bool, BeforeValidator(coerce_bool)]

BadgeSet = Annotated[
    frozenset[str],
    BeforeValidator(coerce_badges),
    PlainSerializer(_sorted_badges, return_type=list[str]),
]
"""Badge names as a set, stored as a sorted JSON list."""


class ProgressBaseModel(BaseModel):
    """Base for stored and producer-supplied progress models.

    Subclasses may declare ``_KEY_ALIASES`` (``{"oldKey": "newKey"}``)
    to accept payloads written under a legacy key name.
    """

    _KEY_ALIASES: ClassVar[dict[str, str]] = {}

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @model_validator(mode="before")
    @classmethod
    def _apply_key_aliases(cls, values: Any) -> Any:
        if not isinstance(values, dict) or not cls._KEY_ALIASES:
            return values
        working = dict(values)
        for old_key, new_key in cls._KEY_ALIASES.items():
            if old_key in working and new_key not in working:
                working[new_key] = working.pop(old_key)
        return working

    def to_storage(self) -> dict[str, Any]:
        """Return the camelCase JSON-compatible dict used for persistence."""
        return self.model_dump(mode="json", by_alias=True)
