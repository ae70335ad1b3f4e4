"""
Topology toolkit: GeoJSON <-> TopoJSON.

Topology construction, quantization and arc decoding are done by the
``topojson`` package. This module normalizes the GeoJSON input into a
FeatureCollection and resolves which TopoJSON object to decode.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import geojson
import topojson
from topojson.utils import serialize_as_geojson

from ..core.errors import ConversionFailed
from ..core.registry import ToolSpec
from ..core.schemas import GeoJSONToTopoJSONRequest, TopoJSONToGeoJSONRequest

logger = logging.getLogger(__name__)


def _as_feature_collection(gj: Dict[str, Any]) -> geojson.FeatureCollection:
    """Wrap a Feature or bare geometry so the topology builder sees a FeatureCollection."""
    gtype = gj.get("type")
    if gtype == "FeatureCollection":
        collection = gj
    elif gtype == "Feature":
        collection = {"type": "FeatureCollection", "features": [gj]}
    else:
        collection = {
            "type": "FeatureCollection",
            "features": [{"type": "Feature", "properties": {}, "geometry": gj}]
        }
    return geojson.loads(json.dumps(collection))


def _keep_source_ids(sources: List[Dict[str, Any]], targets: List[Dict[str, Any]]) -> None:
    """Carry over ids present on ``sources``; drop ids the library made up.

    Pairs items by position and does nothing when the counts differ.
    """
    if len(sources) != len(targets):
        return
    for source, target in zip(sources, targets):
        if not isinstance(source, dict) or not isinstance(target, dict):
            continue
        if "id" in source:
            target["id"] = source["id"]
        else:
            target.pop("id", None)


def geojson_to_topojson_handler(request: GeoJSONToTopoJSONRequest, context) -> Dict[str, Any]:
    """
    Params:
      - geojson: FeatureCollection, Feature or geometry
      - objectName: key of the resulting object in `objects` (default "data")
      - quantization: quantization factor; 0 (or negative) disables it (default 1e4)
    """
    logger.info("[Converting] GeoJSON to TopoJSON")

    quantization = request.quantization
    if 0 < quantization < 2:
        raise ConversionFailed("quantization must be 0 or >= 2")

    collection = _as_feature_collection(request.geojson)
    # Point and MultiPoint coordinates are only quantized at build time.
    topo = topojson.Topology(
        collection,
        object_name=request.object_name,
        prequantize=int(quantization) if quantization > 0 else False,
        topoquantize=False,
    )
    result = json.loads(topo.to_json())
    obj = result.get("objects", {}).get(request.object_name, {})
    _keep_source_ids(collection["features"], obj.get("geometries", []))
    return result


def _resolve_object_name(topo: Dict[str, Any], object_name: Optional[str] = None) -> str:
    objects = topo.get("objects")
    if not isinstance(objects, dict):
        raise ConversionFailed("No valid object found in TopoJSON")
    name = object_name or next(iter(objects), None)
    if not name or name not in objects:
        raise ConversionFailed("No valid object found in TopoJSON")
    return name


def topojson_to_geojson_handler(request: TopoJSONToGeoJSONRequest, context) -> Dict[str, Any]:
    """
    Params:
      - topojson: Topology object
      - objectName: object to decode; defaults to the first key of `objects`
    """
    logger.info("[Converting] TopoJSON to GeoJSON")

    topo = request.topojson
    name = _resolve_object_name(topo, request.object_name)

    obj = topo["objects"][name]
    if not isinstance(obj, dict):
        raise ConversionFailed(f"TopoJSON object '{name}' is not a geometry object")
    if "geometries" not in obj:
        # single geometry object; decode it as a one-member collection
        topo = dict(topo, objects={name: {"type": "GeometryCollection", "geometries": [obj]}})
    if "arcs" not in topo:
        topo = dict(topo, arcs=[])

    collection = serialize_as_geojson(topo, objectname=name)
    _keep_source_ids(topo["objects"][name]["geometries"], collection.get("features", []))
    return collection


def setup(registrar):
    """Register the topology toolkit."""
    registrar.toolkit(
        name="topology",
        description="GeoJSON <-> TopoJSON conversions",
        version="1.0.0"
    )

    registrar.tool(
        ToolSpec(
            slug="geojson_to_topojson",
            name="GeoJSON to TopoJSON",
            description="Convert GeoJSON to TopoJSON format (more compact with shared boundaries)",
            parameters={
                "type": "object",
                "properties": {
                    "geojson": {"type": "object", "description": "GeoJSON object to convert"},
                    "objectName": {
                        "type": "string",
                        "description": "Name of the TopoJSON object to create",
                        "default": "data"
                    },
                    "quantization": {
                        "type": "number",
                        "description": "Quantization parameter for simplification (0 to disable)",
                        "default": 1e4
                    }
                },
                "required": ["geojson"]
            }
        ),
        geojson_to_topojson_handler
    )

    registrar.tool(
        ToolSpec(
            slug="topojson_to_geojson",
            name="TopoJSON to GeoJSON",
            description="Convert TopoJSON to GeoJSON format",
            parameters={
                "type": "object",
                "properties": {
                    "topojson": {"type": "object", "description": "TopoJSON object to convert"},
                    "objectName": {
                        "type": "string",
                        "description": "Name of the TopoJSON object to convert (if not provided, first object is used)"
                    }
                },
                "required": ["topojson"]
            }
        ),
        topojson_to_geojson_handler
    )
