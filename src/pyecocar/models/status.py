"""Status payload model for ``GET /can/status``."""

from __future__ import annotations

from pydantic import StrictBool

from pyecocar.models._base import EcoCarBaseModel


class StatusMessage(EcoCarBaseModel):
    """Connection status as reported by the server."""

    connected: StrictBool
