"""Typed models for telemetry API payloads."""

from pyecocar.models.status import StatusMessage
from pyecocar.models.telemetry import TELEMETRY_FIELDS, FieldId, LatestResponse, TelemetryMessage

__all__ = [
    "FieldId",
    "LatestResponse",
    "StatusMessage",
    "TELEMETRY_FIELDS",
    "TelemetryMessage",
]
