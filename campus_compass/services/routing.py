"""
Routing gateway over the Google Distance Matrix HTTP API.

Only walking routes between two points are needed. Every failure (missing
API key, HTTP error, timeout, non-OK status at the top level or on the
single element, unexpected body) is raised as RoutingError so the ETA
estimator can turn it into "unavailable".
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from campus_compass.core.config import get_settings
from campus_compass.core.logging import get_logger
from campus_compass.utils.geo import Coordinates

logger = get_logger(__name__)


class RoutingError(Exception):
    def __init__(self, status: str, message: str = ""):
        self.status = status
        super().__init__(f"{status}: {message}" if message else status)


@dataclass(frozen=True)
class Route:
    duration_seconds: int
    distance_meters: int
    distance_text: str


class DistanceMatrixGateway:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://maps.googleapis.com/maps/api",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "DistanceMatrixGateway":
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def walking_route(self, origin: Coordinates, destination: Coordinates) -> Route:
        if not self.api_key:
            raise RoutingError("NOT_CONFIGURED", "GOOGLE_MAPS_API_KEY is not set")
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)

        params = {
            "origins": origin.as_param(),
            "destinations": destination.as_param(),
            "mode": "walking",
            "units": "metric",
            "key": self.api_key,
        }
        try:
            response = await self._client.get(
                f"{self.base_url}/distancematrix/json", params=params, timeout=self.timeout
            )
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as e:
            raise RoutingError("TIMEOUT", str(e)) from e
        except httpx.HTTPError as e:
            raise RoutingError("HTTP_ERROR", str(e)) from e
        except ValueError as e:
            raise RoutingError("MALFORMED_RESPONSE", "body is not JSON") from e

        return self._parse(body)

    @staticmethod
    def _parse(body: dict) -> Route:
        if not isinstance(body, dict):
            raise RoutingError("MALFORMED_RESPONSE", "body is not an object")

        status = body.get("status")
        if status != "OK":
            if status == "REQUEST_DENIED":
                logger.error(
                    "distance_matrix_denied",
                    hint="check the API key and that the Distance Matrix API is enabled",
                    message=body.get("error_message"),
                )
            raise RoutingError(status or "MALFORMED_RESPONSE", body.get("error_message") or "")

        try:
            element = body["rows"][0]["elements"][0]
        except (KeyError, IndexError, TypeError) as e:
            raise RoutingError("MALFORMED_RESPONSE", "missing route element") from e

        element_status = element.get("status")
        if element_status != "OK":
            raise RoutingError(element_status or "MALFORMED_RESPONSE")

        try:
            return Route(
                duration_seconds=int(element["duration"]["value"]),
                distance_meters=int(element["distance"]["value"]),
                distance_text=str(element["distance"]["text"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise RoutingError("MALFORMED_RESPONSE", "missing duration or distance") from e


def build_gateway(client: Optional[httpx.AsyncClient] = None) -> DistanceMatrixGateway:
    settings = get_settings()
    return DistanceMatrixGateway(
        api_key=settings.GOOGLE_MAPS_API_KEY,
        base_url=settings.GOOGLE_MAPS_BASE_URL,
        timeout=settings.ROUTING_TIMEOUT_SECONDS,
        client=client,
    )
