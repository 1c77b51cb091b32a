"""Internal constants shared across the library."""

API_PREFIX = "/api/v1"
LATEST_ENDPOINT = "/can/latest"
STATUS_ENDPOINT = "/can/status"
USER_AGENT = "pyecocar/1"

# The dashboard protocol expects a 10 Hz refresh.
DEFAULT_POLL_INTERVAL: float = 0.1
DEFAULT_REQUEST_TIMEOUT: float = 0.08

# Response bodies quoted in errors/logs are cut to this many characters.
BODY_PREVIEW_CHARS = 200
