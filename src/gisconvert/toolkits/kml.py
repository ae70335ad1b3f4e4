"""
KML toolkit: KML <-> GeoJSON.

1) kml_to_geojson - parse KML into an XML DOM, then build a FeatureCollection
                    from its Placemarks (kml2geojson)
2) geojson_to_kml - write FeatureCollection / Feature / geometry as a KML
                    Document of Placemarks (simplekml)

Placemark name and description come from configurable feature properties;
every property is also written as ExtendedData.
"""

import logging
from typing import Any, Dict, Iterable, List, Sequence
from xml.dom import minidom

import simplekml
from kml2geojson.main import build_feature_collection

from ..core.errors import ConversionFailed
from ..core.registry import ToolSpec
from ..core.schemas import GeoJSONToKmlRequest, KmlToGeoJSONRequest

logger = logging.getLogger(__name__)


def kml_to_geojson_handler(request: KmlToGeoJSONRequest, context) -> Dict[str, Any]:
    logger.info("[Converting] KML to GeoJSON")
    document = minidom.parseString(request.kml)
    try:
        return build_feature_collection(document)
    finally:
        document.unlink()


# -------------------------------------------------------------------
# GeoJSON -> KML
# -------------------------------------------------------------------
def _positions(coords: Iterable[Sequence[float]]) -> List[tuple]:
    return [tuple(p) for p in coords]


def _add_geometry(container, geometry: Dict[str, Any], nested: bool = False):
    """Add ``geometry`` to a simplekml container (Document/Folder/MultiGeometry).

    Multi-part geometries inside a MultiGeometry are flattened into it.
    """
    gtype = geometry.get("type")
    coords = geometry.get("coordinates")

    if gtype == "Point":
        return container.newpoint(coords=[tuple(coords)])
    if gtype == "LineString":
        return container.newlinestring(coords=_positions(coords))
    if gtype == "Polygon":
        return container.newpolygon(
            outerboundaryis=_positions(coords[0]),
            innerboundaryis=[_positions(ring) for ring in coords[1:]]
        )

    if gtype in ("MultiPoint", "MultiLineString", "MultiPolygon", "GeometryCollection"):
        multi = container if nested else container.newmultigeometry()
        if gtype == "GeometryCollection":
            members = geometry.get("geometries") or []
        else:
            member_type = gtype[len("Multi"):]
            members = [{"type": member_type, "coordinates": c} for c in coords]
        for member in members:
            _add_geometry(multi, member, nested=True)
        return multi

    raise ConversionFailed(f"Unsupported geometry type: {gtype}")


def _features_of(gj: Dict[str, Any]) -> List[Dict[str, Any]]:
    gtype = gj.get("type")
    if gtype == "FeatureCollection":
        return list(gj.get("features") or [])
    if gtype == "Feature":
        return [gj]
    return [{"type": "Feature", "properties": {}, "geometry": gj}]


def _text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def geojson_to_kml_handler(request: GeoJSONToKmlRequest, context) -> str:
    """
    Params:
      - geojson: FeatureCollection, Feature or geometry
      - documentName / documentDescription: KML Document metadata
      - nameProperty / descriptionProperty: feature properties used for
        Placemark name and description
    """
    logger.info("[Converting] GeoJSON to KML")

    kml = simplekml.Kml(name=request.document_name, description=request.document_description)
    skipped = 0
    for feature in _features_of(request.geojson):
        geometry = feature.get("geometry") if isinstance(feature, dict) else None
        if not isinstance(geometry, dict) or not geometry.get("type"):
            skipped += 1
            continue

        placemark = _add_geometry(kml.document, geometry)
        props = feature.get("properties") or {}
        if props.get(request.name_property) is not None:
            placemark.name = _text(props[request.name_property])
        if props.get(request.description_property) is not None:
            placemark.description = _text(props[request.description_property])
        for key, value in props.items():
            placemark.extendeddata.newdata(name=key, value="" if value is None else _text(value))

    if skipped:
        logger.debug(f"Skipped {skipped} feature(s) without geometry")
    return kml.kml()


def setup(registrar):
    """Register the KML toolkit."""
    registrar.toolkit(
        name="kml",
        description="KML <-> GeoJSON conversions",
        version="1.0.0"
    )

    registrar.tool(
        ToolSpec(
            slug="kml_to_geojson",
            name="KML to GeoJSON",
            description="Convert KML to GeoJSON format",
            parameters={
                "type": "object",
                "properties": {
                    "kml": {"type": "string", "description": "KML content to convert"}
                },
                "required": ["kml"]
            }
        ),
        kml_to_geojson_handler
    )

    registrar.tool(
        ToolSpec(
            slug="geojson_to_kml",
            name="GeoJSON to KML",
            description="Convert GeoJSON to KML format",
            parameters={
                "type": "object",
                "properties": {
                    "geojson": {"type": "object", "description": "GeoJSON object to convert"},
                    "documentName": {
                        "type": "string",
                        "description": "Name for the KML document",
                        "default": "GeoJSON Conversion"
                    },
                    "documentDescription": {
                        "type": "string",
                        "description": "Description for the KML document",
                        "default": "Converted from GeoJSON by GIS Format Conversion MCP"
                    },
                    "nameProperty": {
                        "type": "string",
                        "description": "Property name in GeoJSON to use as KML name",
                        "default": "name"
                    },
                    "descriptionProperty": {
                        "type": "string",
                        "description": "Property name in GeoJSON to use as KML description",
                        "default": "description"
                    }
                },
                "required": ["geojson"]
            }
        ),
        geojson_to_kml_handler
    )
