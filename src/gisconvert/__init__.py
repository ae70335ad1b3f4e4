# MCP server exposing GIS format conversions (WKT, GeoJSON, CSV, TopoJSON,
# KML) and reverse geocoding as tools for LLM clients. See README for
# usage details.

def create_server(*args, **kwargs):
    from .core.context import create_context
    from .core.mcp_server import GisFormatMCPServer

    return GisFormatMCPServer(create_context(*args, **kwargs))
