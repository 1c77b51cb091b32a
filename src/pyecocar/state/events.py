"""Change notifications emitted by the reconciler."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from pyecocar.models.telemetry import FieldId


class ChangeEvent(BaseModel):
    """A field's stored value changed."""

    model_config = ConfigDict(frozen=True)

    field: FieldId
    new_value: bool | float
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
