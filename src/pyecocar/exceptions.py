"""Custom exception hierarchy for pyecocar."""

from __future__ import annotations


class EcoCarError(Exception):
    """Base exception for all pyecocar errors."""


class EcoCarConfigError(EcoCarError):
    """Invalid or missing configuration."""


class FetchError(EcoCarError):
    """A single fetch against the telemetry API failed.

    Never fatal: the poller converts it into a connectivity update and an
    error notification, and the next cycle proceeds on schedule.
    """

    def __init__(self, reason: str, *, endpoint: str = "") -> None:
        self.reason = reason
        self.endpoint = endpoint
        super().__init__(reason)


class TransportError(FetchError):
    """Network-level failure (connection refused, DNS, timeout)."""


class ProtocolError(FetchError):
    """HTTP status outside 200-299."""

    def __init__(
        self,
        reason: str,
        *,
        status_code: int,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        super().__init__(reason, endpoint=endpoint)


class DecodeError(FetchError):
    """Malformed JSON, or an expected member missing or of the wrong type."""
