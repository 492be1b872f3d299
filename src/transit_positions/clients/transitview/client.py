"""HTTP client for the SEPTA TransitView API."""

from typing import Any
from urllib.parse import quote

import httpx

from transit_positions.clients.transitview._decode import parse_all_routes, parse_route
from transit_positions.clients.transitview.exceptions import (
    TransitViewDecodeError,
    TransitViewHTTPError,
    TransitViewTransportError,
)
from transit_positions.core.models import RouteSnapshot, VehiclePosition


class TransitViewClient:
    """HTTP client for TransitView live vehicle positions.

    No authentication is required.  The client holds no state besides the
    underlying ``httpx.AsyncClient`` and is safe to share between tasks.
    """

    BASE_URL = "https://www3.septa.org/hackathon"
    ALL_ROUTES_PATH = "/TransitViewAll/"
    ROUTE_PATH = "/TransitView/"

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the TransitView client.

        Args:
            base_url: Base URL for the TransitView API.
            timeout: Request timeout in seconds.

        """
        self.base_url = base_url.rstrip("/")
        self._http_client = httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def get_all_positions(self) -> RouteSnapshot:
        """Get all vehicle positions across every bus and trolley route.

        Returns:
            Mapping of route label to the positions on that route.

        Raises:
            TransitViewTransportError: When the feed cannot be reached.
            TransitViewHTTPError: When the feed returns an error status.
            TransitViewDecodeError: When the body cannot be decoded.

        """
        payload = await self._get(self.ALL_ROUTES_PATH)
        return parse_all_routes(payload)

    async def get_route_positions(self, route: str) -> list[VehiclePosition]:
        """Get vehicle positions for a single route.

        Args:
            route: Route label, escaped into the request path.

        Returns:
            Positions on the route in feed order.

        Raises:
            TransitViewTransportError: When the feed cannot be reached.
            TransitViewHTTPError: When the feed returns an error status.
            TransitViewDecodeError: When the body cannot be decoded.

        """
        payload = await self._get(f"{self.ROUTE_PATH}{quote(route, safe='')}")
        return parse_route(payload, route)

    async def _get(self, path: str) -> Any:
        """Send a GET request and return parsed JSON.

        Args:
            path: Request path relative to base_url.

        Returns:
            Parsed JSON response.

        """
        url = f"{self.base_url}{path}"
        try:
            response = await self._http_client.request("GET", url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransitViewTransportError(f"GET {url} failed: {exc}") from exc

        if not response.is_success:
            raise TransitViewHTTPError(status_code=response.status_code, url=url)

        try:
            result: Any = response.json()
        except ValueError as exc:
            raise TransitViewDecodeError(f"GET {url} returned invalid JSON") from exc
        return result

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http_client.aclose()

    async def __aenter__(self) -> "TransitViewClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        await self.close()
