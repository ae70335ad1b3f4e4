"""
Feature flattening: GeoJSON FeatureCollection -> CSV text.

Every feature becomes one row. The row starts with a single representative
(latitude, longitude) pair for the feature's geometry, followed by one cell
per property key seen anywhere in the collection:

- Point                     the coordinate itself
- LineString / MultiPoint   first coordinate
- MultiLineString           first coordinate of the first line
- Polygon                   vertex mean of the outer ring
- MultiPolygon              vertex mean of the first polygon's outer ring
- GeometryCollection        first member, if it is a Point or Polygon

Anything else (unknown type, missing or malformed geometry) leaves both
coordinate cells empty; it never fails the conversion.
"""

import json
import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

COORDINATE_HEADERS = ["latitude", "longitude"]

LonLat = Tuple[Any, Any]


def ring_centroid(ring: Sequence[Sequence[float]]) -> Tuple[float, float]:
    """Unweighted mean of a ring's vertices (x = lon, y = lat)."""
    n = len(ring)
    sum_x = 0.0
    sum_y = 0.0
    for point in ring:
        sum_x += point[0]
        sum_y += point[1]
    return (sum_x / n, sum_y / n)


def _first_position(position: Sequence[Any]) -> LonLat:
    return (position[0], position[1])


def _point_or_polygon(geometry: Dict[str, Any]) -> Optional[LonLat]:
    gtype = geometry.get("type")
    coords = geometry.get("coordinates")
    if gtype == "Point":
        return _first_position(coords)
    if gtype == "Polygon":
        return ring_centroid(coords[0])
    return None


def representative_point(geometry: Any) -> Optional[LonLat]:
    """Return the (lon, lat) that stands in for ``geometry``, or None."""
    if not isinstance(geometry, dict):
        return None

    gtype = geometry.get("type")
    try:
        if gtype in ("Point", "Polygon"):
            return _point_or_polygon(geometry)
        if gtype in ("LineString", "MultiPoint"):
            return _first_position(geometry["coordinates"][0])
        if gtype == "MultiPolygon":
            return ring_centroid(geometry["coordinates"][0][0])
        if gtype == "MultiLineString":
            return _first_position(geometry["coordinates"][0][0])
        if gtype == "GeometryCollection":
            members = geometry.get("geometries") or []
            if members and isinstance(members[0], dict):
                return _point_or_polygon(members[0])
            return None
    except (KeyError, IndexError, TypeError, ValueError, ZeroDivisionError) as e:
        logger.warning(f"Cannot derive a coordinate from {gtype} geometry: {e!r}")
        return None
    return None


def collect_property_keys(features: Sequence[Any]) -> List[str]:
    """Union of property keys over all features, in first-seen order."""
    keys: Dict[str, None] = {}
    for feature in features:
        props = _properties(feature)
        for key in props:
            keys.setdefault(key, None)
    return list(keys)


def format_value(value: Any) -> str:
    """Render a non-string value the way a JSON-minded reader expects it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def format_cell(value: Any) -> str:
    if isinstance(value, str):
        return '"' + value.replace('"', '""') + '"'
    return format_value(value)


def _properties(feature: Any) -> Dict[str, Any]:
    if isinstance(feature, dict) and isinstance(feature.get("properties"), dict):
        return feature["properties"]
    return {}


def iter_rows(features: Sequence[Any]) -> Iterator[List[str]]:
    """Yield the header row, then one row per feature.

    The header is fixed from the full feature set before any data row is
    produced, so every row has the same number of cells.
    """
    keys = collect_property_keys(features)
    yield COORDINATE_HEADERS + keys

    for feature in features:
        geometry = feature.get("geometry") if isinstance(feature, dict) else None
        point = representative_point(geometry)
        if point is None:
            row = ["", ""]
        else:
            lon, lat = point
            row = [format_value(lat), format_value(lon)]

        props = _properties(feature)
        for key in keys:
            row.append(format_cell(props[key]) if key in props else "")
        yield row


def features_to_csv(features: Sequence[Any]) -> str:
    return "\n".join(",".join(row) for row in iter_rows(features))
