"""Geolocation providers for the device running a search.

The device itself knows where it is, so the default provider simply holds the
latest position the client reported and waits (bounded) for one to arrive.
An IP-based lookup is available for headless use.
"""

import asyncio
import logging
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from lastmile.config import Settings
from lastmile.models.common import Geo

logger = logging.getLogger(__name__)


class GeolocationError(Exception):
    """Current position could not be obtained."""

    reason = "position_unavailable"


class PositionUnavailableError(GeolocationError):
    """No position source could produce a fix."""

    reason = "position_unavailable"


class PositionTimeoutError(GeolocationError):
    """No fix arrived within the timeout."""

    reason = "position_timeout"


class PermissionDeniedError(GeolocationError):
    """The user refused to share their location."""

    reason = "permission_denied"


class GeolocationProvider(Protocol):
    """Protocol for geolocation providers."""

    async def get_current_position(
        self, *, high_accuracy: bool = True, timeout_ms: int = 10_000
    ) -> Geo:
        """Return the device's current position.

        Raises:
            PositionUnavailableError, PositionTimeoutError, PermissionDeniedError
        """
        ...


class ReportedPositionProvider:
    """Position pushed by the client device."""

    def __init__(self) -> None:
        self._position: Geo | None = None
        self._denied = False
        self._fix = asyncio.Event()

    @property
    def last_position(self) -> Geo | None:
        return self._position

    def report(self, position: Geo) -> None:
        """Record a fresh fix; clears any earlier denial."""
        self._position = position
        self._denied = False
        self._fix.set()

    def deny(self) -> None:
        """Record that the user refused location access."""
        self._position = None
        self._denied = True
        # Wake waiters so they fail now rather than at the timeout
        self._fix.set()

    async def get_current_position(
        self, *, high_accuracy: bool = True, timeout_ms: int = 10_000
    ) -> Geo:
        """Return the last reported fix, waiting up to timeout_ms for the first."""
        if self._denied:
            raise PermissionDeniedError("Location permission denied")

        if self._position is None:
            self._fix.clear()
            try:
                await asyncio.wait_for(self._fix.wait(), timeout=timeout_ms / 1000)
            except asyncio.TimeoutError:
                raise PositionTimeoutError(f"No position reported within {timeout_ms} ms") from None

        if self._denied:
            raise PermissionDeniedError("Location permission denied")
        if self._position is None:
            raise PositionUnavailableError("No position reported")
        return self._position


class IpGeolocationProvider:
    """Coarse position from an IP geolocation service (ip-api.com shape).

    IP lookups are city-level at best; high_accuracy cannot be honoured.
    """

    def __init__(
        self,
        url: str = "http://ip-api.com/json",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize provider.

        Args:
            url: Lookup endpoint returning {status, lat, lon}
            client: Optional httpx client (for testing with mocks)
        """
        self.url = url
        self._client = client

    async def get_current_position(
        self, *, high_accuracy: bool = True, timeout_ms: int = 10_000
    ) -> Geo:
        """Look up the position of this host's public IP."""
        timeout_s = timeout_ms / 1000
        client = self._client
        close_client = False
        if client is None:
            client = httpx.AsyncClient(timeout=timeout_s)
            close_client = True

        try:
            response = await client.get(self.url, timeout=timeout_s)
            response.raise_for_status()
            data: Any = response.json()
        except httpx.TimeoutException as e:
            raise PositionTimeoutError(f"IP geolocation timed out after {timeout_ms} ms") from e
        except (httpx.HTTPError, ValueError) as e:
            raise PositionUnavailableError(f"IP geolocation failed: {type(e).__name__}") from e
        finally:
            if close_client:
                await client.aclose()

        if not isinstance(data, dict):
            raise PositionUnavailableError("IP geolocation returned an unexpected payload")

        if data.get("status") != "success":
            raise PositionUnavailableError(f"IP geolocation failed: {data.get('message', 'unknown')}")

        try:
            return Geo(lat=data["lat"], lon=data["lon"])
        except (KeyError, ValidationError) as e:
            raise PositionUnavailableError("IP geolocation returned no usable coordinates") from e


def build_geolocation_provider(settings: Settings) -> GeolocationProvider:
    """Create the provider selected in settings."""
    if settings.geolocation_provider == "ip":
        logger.info(f"Using IP geolocation ({settings.ip_geolocation_url})")
        return IpGeolocationProvider(url=settings.ip_geolocation_url)
    return ReportedPositionProvider()
