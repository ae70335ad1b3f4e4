"""
Registry for toolkits and conversion tools.

Toolkits register themselves through a ``Registrar`` during startup; the
dispatcher looks tools up here by slug. A registry instance is owned by
the server context rather than held in module scope.
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List, Optional
from threading import RLock
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Schemas
# -----------------------------------------------------------------------------

class ToolSpec(BaseModel):
    """Tool specification model."""
    model_config = ConfigDict(from_attributes=True)

    slug: str
    name: str
    description: str
    parameters: Dict[str, Any]


class Toolkit(BaseModel):
    """Toolkit model."""
    model_config = ConfigDict(from_attributes=True)

    name: str
    description: str
    version: Optional[str] = None

# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------

# Handler type alias: (validated request, server context) -> str | dict
ExecuteHandler = Callable[[Any, Any], Any]

class CoreRegistry:
    """Central registry for all toolkits and tools."""

    def __init__(self):
        self._lock = RLock()
        self._toolkits: Dict[str, Toolkit] = {}           # name -> Toolkit
        self._tools: Dict[str, Dict[str, object]] = {}    # slug -> {"spec": ToolSpec, "handler": ExecuteHandler, "toolkit": str}
        self._current_toolkit: Optional[str] = None

    def register_toolkit(self, name: str, description: str, version: Optional[str] = None) -> None:
        """Register a toolkit. Tools registered afterwards belong to it."""
        with self._lock:
            self._toolkits[name] = Toolkit(name=name, description=description, version=version)
            self._current_toolkit = name
            logger.debug(f"Registered toolkit: {name}")

    def register_tool(self, spec: ToolSpec, handler: ExecuteHandler) -> None:
        """Register a tool with its handler."""
        with self._lock:
            if spec.slug in self._tools:
                logger.warning(f"Tool {spec.slug} registered twice; keeping the latest handler")
            self._tools[spec.slug] = {"spec": spec, "handler": handler, "toolkit": self._current_toolkit}
            logger.debug(f"Registered tool: {spec.slug}")

    def get_toolkit(self, name: str) -> Optional[Toolkit]:
        with self._lock:
            return self._toolkits.get(name)

    def list_toolkits(self) -> List[Toolkit]:
        with self._lock:
            return list(self._toolkits.values())

    def get_tool(self, slug: str) -> Optional[ToolSpec]:
        """Get a tool specification by slug."""
        with self._lock:
            rec = self._tools.get(slug)
            return rec["spec"] if rec else None

    def get_handler(self, slug: str) -> Optional[ExecuteHandler]:
        """Get a tool's execution handler by slug."""
        with self._lock:
            rec = self._tools.get(slug)
            return rec["handler"] if rec else None

    def list_tools(self, toolkit: Optional[str] = None) -> List[ToolSpec]:
        """
        List tool specifications in registration order.
        If toolkit is provided, only tools registered under that toolkit are returned.
        """
        with self._lock:
            return [
                rec["spec"] for rec in self._tools.values()
                if toolkit is None or rec["toolkit"] == toolkit
            ]

    def clear(self) -> None:
        """Clear the registry (useful for testing)."""
        with self._lock:
            self._toolkits.clear()
            self._tools.clear()
            self._current_toolkit = None

# -----------------------------------------------------------------------------
# Registrar Helper (for plugins)
# -----------------------------------------------------------------------------

class Registrar:
    """Helper class passed to toolkit ``setup`` functions."""

    def __init__(self, registry_instance: CoreRegistry):
        self.registry = registry_instance

    def toolkit(self, name: str, description: str, version: Optional[str] = None):
        self.registry.register_toolkit(name, description, version)

    def tool(self, spec: ToolSpec, handler: ExecuteHandler):
        self.registry.register_tool(spec, handler)
