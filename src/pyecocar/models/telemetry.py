"""Telemetry payload models for ``GET /can/latest``."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any

from pydantic import ValidationError

from pyecocar.models._base import EcoCarBaseModel, Reading

_logger = logging.getLogger(__name__)


class FieldId(StrEnum):
    """Observed dashboard fields.

    Telemetry members carry the key used in the ``messages`` mapping.
    """

    SPEED = "speed"
    BATTERY_VOLTAGE = "battery_voltage"
    MOTOR_TEMP = "motor_temp"
    CONNECTION_STATUS = "connected"


TELEMETRY_FIELDS: tuple[FieldId, ...] = (
    FieldId.SPEED,
    FieldId.BATTERY_VOLTAGE,
    FieldId.MOTOR_TEMP,
)


class TelemetryMessage(EcoCarBaseModel):
    """A decoded field reading."""

    name: FieldId
    value: Reading


class _MessageEntry(EcoCarBaseModel):
    value: Reading


class LatestResponse(EcoCarBaseModel):
    """Body of ``GET /can/latest``.

    Only the envelope is validated here. Individual entries are decoded by
    :meth:`telemetry` so that one bad entry does not reject its siblings.
    """

    messages: dict[str, Any]

    def telemetry(self) -> dict[FieldId, TelemetryMessage]:
        """Decode the known fields present in ``messages``.

        Unknown keys are ignored. A known key whose entry is not an object,
        lacks ``value``, or holds a non-numeric ``value`` is dropped.
        """
        result: dict[FieldId, TelemetryMessage] = {}
        for field in TELEMETRY_FIELDS:
            if field.value not in self.messages:
                continue
            try:
                entry = _MessageEntry.model_validate(self.messages[field.value])
            except ValidationError as exc:
                _logger.debug("Dropping malformed %s entry: %s", field.value, exc.errors(include_url=False))
                continue
            result[field] = TelemetryMessage(name=field, value=entry.value)
        return result
