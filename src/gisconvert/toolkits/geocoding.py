"""
Geocoding toolkit: coordinates -> location via Nominatim reverse geocoding.

One GET per call, no retries and no caching. The endpoint, User-Agent and
timeout come from the server settings; the aiohttp session comes from the
server context.
"""

import asyncio
import logging
from typing import Any, Dict

import aiohttp

from ..core.errors import ConversionFailed
from ..core.registry import ToolSpec
from ..core.schemas import CoordinatesToLocationRequest

logger = logging.getLogger(__name__)

# Nominatim response field -> output field
LOCATION_FIELDS = {
    "display_name": "displayName",
    "address": "address",
    "type": "type",
    "osm_id": "osmId",
    "osm_type": "osmType",
    "category": "category",
}


async def reverse_geocode(session: aiohttp.ClientSession, settings, latitude: float, longitude: float) -> Any:
    """Call the reverse-geocoding endpoint and return the decoded JSON body."""
    try:
        async with session.get(
            settings.NOMINATIM_URL,
            params={"format": "json", "lat": str(latitude), "lon": str(longitude)},
            headers={"User-Agent": settings.GEOCODER_USER_AGENT},
        ) as response:
            if response.status != 200:
                raise ConversionFailed(f"Geocoding service returned {response.status}: {response.reason}")
            try:
                # Nominatim error pages are HTML; decode whatever came back
                return await response.json(content_type=None)
            except ValueError as e:
                raise ConversionFailed(f"Failed to parse geocoding response: {e}")
    except asyncio.TimeoutError:
        raise ConversionFailed(f"Geocoding request timed out after {settings.GEOCODER_TIMEOUT} seconds")
    except aiohttp.ClientError as e:
        raise ConversionFailed(f"Geocoding request failed: {e}")


async def coordinates_to_location_handler(request: CoordinatesToLocationRequest, context) -> Dict[str, Any]:
    """
    Params:
      - latitude, longitude: WGS84 decimal degrees
    """
    logger.info(f"[Converting] Coordinates ({request.latitude}, {request.longitude}) to location name")

    session = await context.get_http()
    data = await reverse_geocode(session, context.settings, request.latitude, request.longitude)
    if not isinstance(data, dict):
        raise ConversionFailed("Failed to parse geocoding response: expected a JSON object")
    return {out: data[src] for src, out in LOCATION_FIELDS.items() if src in data}


def setup(registrar):
    """Register the geocoding toolkit."""
    registrar.toolkit(
        name="geocoding",
        description="Reverse geocoding of coordinates",
        version="1.0.0"
    )

    registrar.tool(
        ToolSpec(
            slug="coordinates_to_location",
            name="Coordinates to location",
            description="Convert latitude/longitude coordinates to location name using reverse geocoding",
            parameters={
                "type": "object",
                "properties": {
                    "latitude": {"type": "number", "description": "Latitude coordinate"},
                    "longitude": {"type": "number", "description": "Longitude coordinate"}
                },
                "required": ["latitude", "longitude"]
            }
        ),
        coordinates_to_location_handler
    )
