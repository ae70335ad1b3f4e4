"""Request dispatch for conversion tools.

``ConversionService.execute`` is the single entry point for running a
tool: it resolves the tool by name, validates the arguments into the
tool's request model, runs the handler, and turns every failure into a
``GisConversionError``. Results come back as text: JSON-shaped results
are pretty-printed with a 2-space indent, text results pass through.
"""
import inspect
import json
import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from ..context import ServerContext
from ..errors import (
    ConversionFailed,
    GisConversionError,
    InvalidParameter,
    MissingParameter,
    UnknownOperation,
)
from ..registry import ToolSpec
from ..schemas import MISSING_ERROR_TYPES, REQUEST_OPERATIONS, conversion_request_adapter

logger = logging.getLogger(__name__)


def _json_default(value: Any) -> Any:
    # numpy scalars and arrays coming back from the topology library
    if hasattr(value, "tolist"):
        return value.tolist()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def format_result(result: Union[str, Dict[str, Any], List[Any]]) -> str:
    """Serialize a handler result into the response text."""
    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2, default=_json_default)


def translate_validation_error(exc: ValidationError, operation: str) -> GisConversionError:
    """Map a pydantic ValidationError onto MissingParameter / InvalidParameter."""
    missing: List[str] = []
    invalid: List[str] = []
    for err in exc.errors():
        loc = [str(part) for part in err["loc"]]
        if loc and loc[0] == operation:
            loc = loc[1:]
        field = ".".join(loc) or "arguments"
        if err["type"] in MISSING_ERROR_TYPES or err.get("input") is None:
            if field not in missing:
                missing.append(field)
        else:
            invalid.append(f"Invalid parameter '{field}': {err['msg']}")
    if missing:
        return MissingParameter(missing)
    return InvalidParameter("; ".join(invalid))


class ConversionService:
    """Dispatches named tool calls against the registry of a ServerContext."""

    def __init__(self, context: ServerContext):
        self.context = context

    def list_tools(self) -> List[ToolSpec]:
        return self.context.registry.list_tools()

    def parse_request(self, name: str, arguments: Optional[Dict[str, Any]]) -> Any:
        """Validate raw arguments into the request model for ``name``.

        Tools outside the built-in request union (plugins) receive the raw
        argument mapping.
        """
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidParameter("Tool arguments must be an object")
        if name not in REQUEST_OPERATIONS:
            return arguments
        try:
            return conversion_request_adapter.validate_python({**arguments, "operation": name})
        except ValidationError as e:
            raise translate_validation_error(e, name) from e

    async def execute(self, name: str, arguments: Optional[Dict[str, Any]]) -> str:
        """Run tool ``name`` and return its textual result.

        Raises
        ------
        GisConversionError
            UnknownOperation, MissingParameter, InvalidParameter or
            ConversionFailed; no other exception escapes.
        """
        registry = self.context.registry
        spec = registry.get_tool(name)
        handler = registry.get_handler(name)
        if spec is None or handler is None:
            logger.error(f"[Error] Unknown tool requested: {name}")
            raise UnknownOperation(name)

        request = self.parse_request(name, arguments)

        try:
            if inspect.iscoroutinefunction(handler):
                result = await handler(request, self.context)
            else:
                result = handler(request, self.context)
            return format_result(result)
        except (MissingParameter, InvalidParameter, UnknownOperation):
            raise
        except GisConversionError as e:
            logger.error(f"[Error] {spec.name} conversion failed: {e.message}")
            raise ConversionFailed(f"{spec.name} conversion failed: {e.message}") from e
        except Exception as e:
            logger.error(f"[Error] {spec.name} conversion failed: {e}")
            raise ConversionFailed(f"{spec.name} conversion failed: {e}") from e
