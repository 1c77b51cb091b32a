"""pyecocar - Async Python client for the EcoCar dashboard telemetry API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyecocar")
except PackageNotFoundError:
    __version__ = "0+local"
from pyecocar.client import EcoCarClient
from pyecocar.config import EcoCarConfig
from pyecocar.exceptions import (
    DecodeError,
    EcoCarConfigError,
    EcoCarError,
    FetchError,
    ProtocolError,
    TransportError,
)
from pyecocar.ingestion.fetcher import Fetcher, FetchResult
from pyecocar.ingestion.poller import TelemetryPoller
from pyecocar.models import FieldId, StatusMessage, TelemetryMessage
from pyecocar.state.events import ChangeEvent
from pyecocar.state.store import Reconciler, TelemetrySnapshot

__all__ = [
    "__version__",
    "ChangeEvent",
    "DecodeError",
    "EcoCarClient",
    "EcoCarConfig",
    "EcoCarConfigError",
    "EcoCarError",
    "FetchError",
    "FetchResult",
    "Fetcher",
    "FieldId",
    "ProtocolError",
    "Reconciler",
    "StatusMessage",
    "TelemetryMessage",
    "TelemetryPoller",
    "TelemetrySnapshot",
    "TransportError",
]
