"""Client configuration for pyecocar."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyecocar._constants import API_PREFIX, DEFAULT_POLL_INTERVAL, DEFAULT_REQUEST_TIMEOUT, USER_AGENT
from pyecocar.exceptions import EcoCarConfigError


@dataclasses.dataclass(frozen=True)
class EcoCarConfig:
    """Client configuration.

    Parameters
    ----------
    host : str
        Host name of the telemetry API server.
    port : int
        TCP port of the telemetry API server.
    scheme : str
        ``"http"`` or ``"https"``.
    api_prefix : str
        Path prefix shared by every endpoint.
    poll_interval : float
        Seconds between polling cycles. Defaults to 100 ms.
    request_timeout : float
        Upper bound in seconds for a single GET, including reading the body.
        Must be shorter than ``poll_interval`` so a hung request can never
        hold up the next cycle.
    user_agent : str
        Value sent in the ``User-Agent`` header.
    """

    host: str = "localhost"
    port: int = 5000
    scheme: str = "http"
    api_prefix: str = API_PREFIX
    poll_interval: float = DEFAULT_POLL_INTERVAL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    user_agent: str = USER_AGENT

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise EcoCarConfigError("host must be non-empty")
        if not 1 <= self.port <= 65535:
            raise EcoCarConfigError(f"port must be between 1 and 65535, got {self.port}")
        if self.scheme not in {"http", "https"}:
            raise EcoCarConfigError(f"scheme must be 'http' or 'https', got {self.scheme!r}")
        if self.poll_interval <= 0:
            raise EcoCarConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.request_timeout <= 0:
            raise EcoCarConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.request_timeout >= self.poll_interval:
            raise EcoCarConfigError(
                f"request_timeout ({self.request_timeout}s) must be shorter than poll_interval ({self.poll_interval}s)"
            )

    @property
    def base_url(self) -> str:
        """Root URL every endpoint path is appended to, without a trailing slash."""
        prefix = "/" + self.api_prefix.strip("/") if self.api_prefix.strip("/") else ""
        return f"{self.scheme}://{self.host}:{self.port}{prefix}"

    @classmethod
    def from_env(cls, **overrides: Any) -> EcoCarConfig:
        """Create configuration from environment variables.

        Reads the optional ``ECOCAR_*`` variables. Explicit keyword arguments
        override environment values.

        Raises
        ------
        EcoCarConfigError
            If a numeric variable cannot be parsed or the result is invalid.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "ECOCAR_HOST": "host",
            "ECOCAR_SCHEME": "scheme",
            "ECOCAR_API_PREFIX": "api_prefix",
            "ECOCAR_USER_AGENT": "user_agent",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # Numeric values, handle separately
        _ENV_NUM_MAP: dict[str, tuple[str, type]] = {
            "ECOCAR_PORT": ("port", int),
            "ECOCAR_POLL_INTERVAL": ("poll_interval", float),
            "ECOCAR_REQUEST_TIMEOUT": ("request_timeout", float),
        }
        for env_key, (field_name, convert) in _ENV_NUM_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = convert(val)
            except ValueError as exc:
                raise EcoCarConfigError(f"{env_key} is not a valid {convert.__name__}: {val!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
