"""
Tabular toolkit: CSV <-> GeoJSON.

1) csv_to_geojson - CSV rows with latitude/longitude columns -> Point FeatureCollection
2) geojson_to_csv - FeatureCollection -> CSV, one representative coordinate per feature
                    (see gisconvert.core.flatten)

Notes:
- CSV parsing uses the standard library reader; every column (the coordinate
  columns included) is kept as a string property.
- delimiter="auto" picks the delimiter from the header line.
"""

import csv
import io
import logging
import math
from typing import Any, Dict, List, Optional

from ..core.errors import ConversionFailed
from ..core.flatten import features_to_csv
from ..core.registry import ToolSpec
from ..core.schemas import CsvToGeoJSONRequest, GeoJSONToCsvRequest

logger = logging.getLogger(__name__)

AUTO_DELIMITERS = ",;\t|"


def _sniff_delimiter(text: str) -> str:
    """Most frequent candidate delimiter in the header line, else a comma."""
    header = text.splitlines()[0] if text else ""
    best = max(AUTO_DELIMITERS, key=header.count)
    return best if header.count(best) else ","


def _parse_coordinate(value: Optional[str]) -> Optional[float]:
    """Parse a coordinate cell; None when it is not a finite number."""
    if value is None:
        return None
    try:
        number = float(value.strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def csv_to_geojson_handler(request: CsvToGeoJSONRequest, context) -> Dict[str, Any]:
    """
    Params:
      - csv: CSV text with a header row
      - latfield / lonfield: header names of the coordinate columns
      - delimiter: single character, or "auto" (default ",")
    """
    logger.info(
        f"[Converting] CSV to GeoJSON using lat field {request.latfield} and lon field {request.lonfield}"
    )

    delimiter = request.delimiter
    if delimiter == "auto":
        delimiter = _sniff_delimiter(request.csv)

    reader = csv.DictReader(io.StringIO(request.csv), delimiter=delimiter, restval="")
    fieldnames = reader.fieldnames or []
    if request.latfield not in fieldnames or request.lonfield not in fieldnames:
        raise ConversionFailed("Latitude and longitude fields not present")

    features: List[Dict[str, Any]] = []
    bad_rows: List[int] = []
    for row_number, row in enumerate(reader, start=1):
        properties = {k: v for k, v in row.items() if k is not None}
        lat = _parse_coordinate(properties.get(request.latfield))
        lon = _parse_coordinate(properties.get(request.lonfield))
        if lat is None or lon is None:
            bad_rows.append(row_number)
            continue
        features.append({
            "type": "Feature",
            "properties": properties,
            "geometry": {"type": "Point", "coordinates": [lon, lat]}
        })

    if bad_rows:
        rows = ", ".join(str(n) for n in bad_rows)
        raise ConversionFailed(f"A row contained an invalid value for latitude or longitude (rows: {rows})")

    return {"type": "FeatureCollection", "features": features}


def geojson_to_csv_handler(request: GeoJSONToCsvRequest, context) -> str:
    logger.info("[Converting] GeoJSON to CSV")
    if not request.include_all_properties:
        # TODO: decide whether includeAllProperties=false should drop property columns
        logger.debug("includeAllProperties=false is accepted but all properties are written")
    return features_to_csv(request.features)


def setup(registrar):
    """Register the tabular toolkit."""
    registrar.toolkit(
        name="tabular",
        description="CSV <-> GeoJSON conversions",
        version="1.0.0"
    )

    registrar.tool(
        ToolSpec(
            slug="csv_to_geojson",
            name="CSV to GeoJSON",
            description="Convert CSV with geographic data to GeoJSON",
            parameters={
                "type": "object",
                "properties": {
                    "csv": {"type": "string", "description": "CSV string to convert"},
                    "latfield": {"type": "string", "description": "Field name for latitude"},
                    "lonfield": {"type": "string", "description": "Field name for longitude"},
                    "delimiter": {
                        "type": "string",
                        "description": "CSV delimiter (default is comma, \"auto\" to detect)",
                        "default": ","
                    }
                },
                "required": ["csv", "latfield", "lonfield"]
            }
        ),
        csv_to_geojson_handler
    )

    registrar.tool(
        ToolSpec(
            slug="geojson_to_csv",
            name="GeoJSON to CSV",
            description="Convert GeoJSON to CSV format",
            parameters={
                "type": "object",
                "properties": {
                    "geojson": {"type": "object", "description": "GeoJSON object to convert"},
                    "includeAllProperties": {
                        "type": "boolean",
                        "description": "Include all feature properties in the CSV",
                        "default": True
                    }
                },
                "required": ["geojson"]
            }
        ),
        geojson_to_csv_handler
    )
