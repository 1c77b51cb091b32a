"""CAN telemetry endpoints.

Endpoints:
  - /can/latest (most recent decoded CAN messages)
  - /can/status (bus connection status)
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from pyecocar._constants import LATEST_ENDPOINT, STATUS_ENDPOINT
from pyecocar._transport import Transport
from pyecocar.exceptions import DecodeError
from pyecocar.models.status import StatusMessage
from pyecocar.models.telemetry import FieldId, LatestResponse, TelemetryMessage


def _describe(exc: ValidationError) -> str:
    """One-line summary of a validation failure, suitable for observers."""
    parts = []
    for error in exc.errors(include_url=False):
        location = ".".join(str(item) for item in error["loc"]) or "<body>"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def parse_latest(endpoint: str, body: Any) -> dict[FieldId, TelemetryMessage]:
    try:
        response = LatestResponse.model_validate(body)
    except ValidationError as exc:
        raise DecodeError(f"Malformed payload from {endpoint}: {_describe(exc)}", endpoint=endpoint) from exc
    return response.telemetry()


def parse_status(endpoint: str, body: Any) -> StatusMessage:
    try:
        return StatusMessage.model_validate(body)
    except ValidationError as exc:
        raise DecodeError(f"Malformed payload from {endpoint}: {_describe(exc)}", endpoint=endpoint) from exc


async def fetch_latest(transport: Transport) -> dict[FieldId, TelemetryMessage]:
    """Fetch and decode the latest telemetry readings."""
    body = await transport.get_json(LATEST_ENDPOINT)
    return parse_latest(LATEST_ENDPOINT, body)


async def fetch_status(transport: Transport) -> StatusMessage:
    """Fetch and decode the bus connection status."""
    body = await transport.get_json(STATUS_ENDPOINT)
    return parse_status(STATUS_ENDPOINT, body)
