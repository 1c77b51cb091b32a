"""Base model for telemetry API payloads.

Every wire model inherits from :class:`EcoCarBaseModel`, which is frozen and
ignores unknown members so newer servers can add fields without breaking
older dashboards.
"""

from __future__ import annotations

import math
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict


def coerce_reading(value: Any) -> float:
    """Accept a finite JSON number as a float reading.

    Booleans, strings and non-finite values (``NaN``/``Infinity`` are accepted
    by Python's JSON parser) are rejected so a reading never compares unequal
    to itself.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number, got {type(value).__name__}")
    try:
        result = float(value)
    except OverflowError as exc:
        raise ValueError(f"number out of float range: {exc}") from exc
    if not math.isfinite(result):
        raise ValueError(f"expected a finite number, got {value!r}")
    return result


Reading = Annotated[float, BeforeValidator(coerce_reading)]
"""Annotated type for a finite numeric sensor reading."""


class EcoCarBaseModel(BaseModel):
    """Base for telemetry API models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
    )
