"""
Shared request dependencies that are not auth related.
"""

from typing import AsyncGenerator

from campus_compass.services.eta_service import RoutingGateway
from campus_compass.services.routing import build_gateway


async def get_routing_gateway() -> AsyncGenerator[RoutingGateway, None]:
    """One gateway (and one HTTP client) per request, shared by all ETA lookups in it."""
    gateway = build_gateway()
    try:
        yield gateway
    finally:
        await gateway.aclose()
