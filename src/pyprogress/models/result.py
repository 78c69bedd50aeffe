"""Activity results as reported by activity modules."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Annotated, Any

from pydantic import BeforeValidator, Field, model_validator

from pyprogress._preview import preview_for_log
from pyprogress.models._base import (
    BadgeSet,
    Flag,
    NonNegativeInt,
    ProgressBaseModel,
    Stars,
    clamp_stars,
    coerce_badges,
    coerce_bool,
    coerce_non_negative_int,
)

_logger = logging.getLogger(__name__)


def _coerce_activity_id(value: Any) -> str | None:
    if value is None:
        return None
    return str(value).strip() or None


_COERCERS = {
    "completed": coerce_bool,
    "score": coerce_non_negative_int,
    "stars": clamp_stars,
    "badges": coerce_badges,
}


class ActivityResult(ProgressBaseModel):
    """One activity's outcome, validated at the reporting boundary.

    Producers are untrusted UI code, so every field is coerced rather
    than rejected: ``stars`` is clamped to ``[0, 3]``, ``score`` becomes a
    non-negative integer and ``badges`` is deduplicated into a set.
    """

    activity_id: Annotated[str | None, BeforeValidator(_coerce_activity_id)] = None
    completed: Flag = False
    score: NonNegativeInt = 0
    stars: Stars = 0
    badges: BadgeSet = Field(default_factory=frozenset)

    @model_validator(mode="before")
    @classmethod
    def _log_malformed_fields(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        if isinstance(values.get("badges"), Iterator):
            # One-shot iterables are materialized once so the check below
            # and the field validator see the same badges.
            values = {**values, "badges": list(values["badges"])}
        for name, coerce in _COERCERS.items():
            if name not in values:
                continue
            raw = values[name]
            fixed = coerce(raw)
            if name == "badges":
                malformed = not isinstance(raw, (list, tuple, set, frozenset)) or any(
                    not isinstance(item, str) or not item.strip() for item in raw
                )
            else:
                malformed = fixed != raw or type(fixed) is not type(raw)
            if malformed:
                _logger.debug(
                    "Coerced malformed %s=%s to %s",
                    name,
                    preview_for_log(raw),
                    preview_for_log(fixed),
                )
        return values

    @classmethod
    def coerce(cls, value: ActivityResult | dict[str, Any]) -> ActivityResult:
        """Return *value* as an :class:`ActivityResult`.

        Accepts an existing instance or a mapping with camelCase or
        snake_case keys.
        """
        if isinstance(value, cls):
            return value
        return cls.model_validate(value)
