"""
WKT toolkit: Well-Known Text <-> GeoJSON geometry.

Parsing and writing are done by shapely; this module only unwraps
Features and checks that something non-empty came out.
"""

import logging
from typing import Any, Dict

from shapely import wkt as shapely_wkt
from shapely.geometry import mapping, shape

from ..core.errors import ConversionFailed
from ..core.registry import ToolSpec
from ..core.schemas import GeoJSONToWktRequest, WktToGeoJSONRequest

logger = logging.getLogger(__name__)


def _preview(text: str, limit: int = 50) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def wkt_to_geojson_handler(request: WktToGeoJSONRequest, context) -> Dict[str, Any]:
    logger.info(f'[Converting] WKT to GeoJSON: "{_preview(request.wkt)}"')

    geom = shapely_wkt.loads(request.wkt)
    if geom is None or geom.is_empty:
        raise ConversionFailed("Failed to parse WKT string")
    return mapping(geom)


def geojson_to_wkt_handler(request: GeoJSONToWktRequest, context) -> str:
    gj = request.geojson
    logger.info(f"[Converting] GeoJSON to WKT: {_preview(str(gj))}")

    if gj.get("type") == "Feature":
        gj = gj.get("geometry")
    if not isinstance(gj, dict) or gj.get("type") in (None, "FeatureCollection"):
        raise ConversionFailed("stringify requires a valid GeoJSON Feature or geometry object as input")

    wkt = shape(gj).wkt
    if not wkt:
        raise ConversionFailed("Failed to convert GeoJSON to WKT")
    return wkt


def setup(registrar):
    """Register the WKT toolkit."""
    registrar.toolkit(
        name="wkt",
        description="Well-Known Text <-> GeoJSON conversions",
        version="1.0.0"
    )

    registrar.tool(
        ToolSpec(
            slug="wkt_to_geojson",
            name="WKT to GeoJSON",
            description="Convert Well-Known Text (WKT) to GeoJSON format",
            parameters={
                "type": "object",
                "properties": {
                    "wkt": {"type": "string", "description": "Well-Known Text (WKT) string to convert"}
                },
                "required": ["wkt"]
            }
        ),
        wkt_to_geojson_handler
    )

    registrar.tool(
        ToolSpec(
            slug="geojson_to_wkt",
            name="GeoJSON to WKT",
            description="Convert GeoJSON to Well-Known Text (WKT) format",
            parameters={
                "type": "object",
                "properties": {
                    "geojson": {"type": "object", "description": "GeoJSON object to convert"}
                },
                "required": ["geojson"]
            }
        ),
        geojson_to_wkt_handler
    )
