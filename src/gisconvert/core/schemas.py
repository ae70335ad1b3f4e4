"""Request models for the conversion operations.

Each operation has its own request model; ``ConversionRequest`` is the
tagged union of all of them, discriminated by ``operation``. Field
aliases are the camelCase argument names advertised to clients.
"""
import json
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic_core import PydanticCustomError

# Error types that mean "the caller did not supply this argument".
MISSING_ERROR_TYPES = {"missing", "string_too_short", "empty_parameter"}


def _json_object(value: Any, kind: str) -> Any:
    """Accept a JSON object or a JSON string encoding one."""
    if value is None:
        raise PydanticCustomError("empty_parameter", "Parameter is empty")
    if isinstance(value, str):
        if not value.strip():
            raise PydanticCustomError("empty_parameter", "Parameter is empty")
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise PydanticCustomError("invalid_json", "Invalid {kind} string: {error}", {"kind": kind, "error": str(e)})
    if not isinstance(value, dict):
        raise PydanticCustomError("not_an_object", "{kind} must be an object or a JSON string", {"kind": kind})
    return value


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class _GeoJSONRequest(_Request):
    geojson: Dict[str, Any]

    @field_validator("geojson", mode="before")
    @classmethod
    def _decode_geojson(cls, v):
        return _json_object(v, "GeoJSON")


class WktToGeoJSONRequest(_Request):
    operation: Literal["wkt_to_geojson"] = "wkt_to_geojson"
    wkt: str = Field(min_length=1)


class GeoJSONToWktRequest(_GeoJSONRequest):
    operation: Literal["geojson_to_wkt"] = "geojson_to_wkt"


class CsvToGeoJSONRequest(_Request):
    operation: Literal["csv_to_geojson"] = "csv_to_geojson"
    csv: str = Field(min_length=1)
    latfield: str = Field(min_length=1)
    lonfield: str = Field(min_length=1)
    delimiter: str = Field(",", min_length=1)


class GeoJSONToCsvRequest(_GeoJSONRequest):
    operation: Literal["geojson_to_csv"] = "geojson_to_csv"
    # Accepted for compatibility; all properties are always written.
    include_all_properties: bool = Field(True, alias="includeAllProperties")

    @field_validator("geojson")
    @classmethod
    def _require_features(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(v.get("features"), list):
            raise PydanticCustomError("invalid_geojson", "Invalid GeoJSON: missing features array")
        return v

    @property
    def features(self) -> List[Any]:
        return self.geojson["features"]


class GeoJSONToTopoJSONRequest(_GeoJSONRequest):
    operation: Literal["geojson_to_topojson"] = "geojson_to_topojson"
    object_name: str = Field("data", alias="objectName", min_length=1)
    quantization: float = 1e4


class TopoJSONToGeoJSONRequest(_Request):
    operation: Literal["topojson_to_geojson"] = "topojson_to_geojson"
    topojson: Dict[str, Any]
    object_name: Optional[str] = Field(None, alias="objectName")

    @field_validator("topojson", mode="before")
    @classmethod
    def _decode_topojson(cls, v):
        return _json_object(v, "TopoJSON")


class KmlToGeoJSONRequest(_Request):
    operation: Literal["kml_to_geojson"] = "kml_to_geojson"
    kml: str = Field(min_length=1)


class GeoJSONToKmlRequest(_GeoJSONRequest):
    operation: Literal["geojson_to_kml"] = "geojson_to_kml"
    document_name: str = Field("GeoJSON Conversion", alias="documentName")
    document_description: str = Field(
        "Converted from GeoJSON by GIS Format Conversion MCP", alias="documentDescription"
    )
    name_property: str = Field("name", alias="nameProperty")
    description_property: str = Field("description", alias="descriptionProperty")


class CoordinatesToLocationRequest(_Request):
    operation: Literal["coordinates_to_location"] = "coordinates_to_location"
    latitude: float
    longitude: float


REQUEST_MODELS = (
    WktToGeoJSONRequest,
    GeoJSONToWktRequest,
    CsvToGeoJSONRequest,
    GeoJSONToCsvRequest,
    GeoJSONToTopoJSONRequest,
    TopoJSONToGeoJSONRequest,
    KmlToGeoJSONRequest,
    GeoJSONToKmlRequest,
    CoordinatesToLocationRequest,
)

ConversionRequest = Annotated[Union[REQUEST_MODELS], Field(discriminator="operation")]

conversion_request_adapter = TypeAdapter(ConversionRequest)

# Operation names covered by ConversionRequest.
REQUEST_OPERATIONS = frozenset(m.model_fields["operation"].default for m in REQUEST_MODELS)
