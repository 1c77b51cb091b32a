"""HTTP transport for the telemetry API."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol

import aiohttp

from pyecocar._constants import BODY_PREVIEW_CHARS
from pyecocar.config import EcoCarConfig
from pyecocar.exceptions import DecodeError, ProtocolError, TransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, endpoint: str) -> Any:
        ...


class HttpTransport:
    """Plain JSON-over-HTTP transport backed by an aiohttp session."""

    def __init__(self, config: EcoCarConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def get_json(self, endpoint: str) -> Any:
        """GET ``{base_url}{endpoint}`` and return the decoded JSON body.

        Raises
        ------
        TransportError
            Connection refused, DNS failure or timeout.
        ProtocolError
            Status outside 200-299.
        DecodeError
            Body is not valid JSON.
        """
        url = f"{self._config.base_url}{endpoint}"
        headers = {
            "accept": "application/json",
            "user-agent": self._config.user_agent,
        }

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(url, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise ProtocolError(
                        f"HTTP {resp.status} from {endpoint}: {text[:BODY_PREVIEW_CHARS]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except ProtocolError:
            raise
        except UnicodeDecodeError as exc:
            raise DecodeError(
                f"Undecodable body from {endpoint}: {exc}",
                endpoint=endpoint,
            ) from exc
        except asyncio.TimeoutError as exc:
            raise TransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise TransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            return json.loads(text)
        except (ValueError, RecursionError) as exc:
            raise DecodeError(
                f"Invalid JSON from {endpoint}: {text[:BODY_PREVIEW_CHARS]}",
                endpoint=endpoint,
            ) from exc
