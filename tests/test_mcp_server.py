import asyncio

import pytest
from mcp.shared.exceptions import McpError
from mcp.shared.memory import create_connected_server_and_client_session
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND, TextContent

from gisconvert import create_server
from gisconvert.core.mcp_server import GisFormatMCPServer


@pytest.fixture()
def server(context):
    return GisFormatMCPServer(context)


def call_over_session(server, name, arguments):
    """Invoke a tool through a connected in-memory client session."""

    async def scenario():
        async with create_connected_server_and_client_session(server.server) as client:
            return await client.call_tool(name, arguments)

    return asyncio.run(scenario())


def test_list_tools_advertises_schemas(server):
    tools = asyncio.run(server.list_tools())
    by_name = {t.name: t for t in tools}
    assert len(by_name) == 9
    assert by_name["csv_to_geojson"].inputSchema["required"] == ["csv", "latfield", "lonfield"]
    assert by_name["geojson_to_topojson"].inputSchema["properties"]["objectName"]["default"] == "data"


def test_call_tool_returns_text_content(server):
    content = asyncio.run(server.call_tool("wkt_to_geojson", {"wkt": "POINT (3 4)"}))
    assert len(content) == 1
    assert isinstance(content[0], TextContent)
    assert '"Point"' in content[0].text


def test_call_tool_unknown_name(server):
    with pytest.raises(McpError) as exc:
        asyncio.run(server.call_tool("nope", {}))
    assert exc.value.error.code == METHOD_NOT_FOUND
    assert exc.value.error.message == "Unknown tool: nope"


def test_call_tool_missing_argument(server):
    with pytest.raises(McpError) as exc:
        asyncio.run(server.call_tool("kml_to_geojson", {}))
    assert exc.value.error.code == INVALID_PARAMS


def test_session_call_returns_result(server):
    result = call_over_session(server, "geojson_to_wkt", {"geojson": {"type": "Point", "coordinates": [1, 2]}})
    assert not result.isError
    assert result.content[0].text.startswith("POINT")


def test_session_unknown_tool_keeps_code(server):
    with pytest.raises(McpError) as exc:
        call_over_session(server, "nope", {})
    assert exc.value.error.code == METHOD_NOT_FOUND
    assert exc.value.error.message == "Unknown tool: nope"


def test_session_missing_parameter_keeps_code(server):
    with pytest.raises(McpError) as exc:
        call_over_session(server, "csv_to_geojson", {"csv": "a,b\n1,2", "lonfield": "b"})
    assert exc.value.error.code == INVALID_PARAMS
    assert "latfield" in exc.value.error.message


def test_session_conversion_failure_keeps_code(server):
    with pytest.raises(McpError) as exc:
        call_over_session(server, "wkt_to_geojson", {"wkt": "POINT EMPTY"})
    assert exc.value.error.code == INTERNAL_ERROR
    assert exc.value.error.message.startswith("WKT to GeoJSON conversion failed:")


def test_create_server_loads_builtin_tools(settings):
    embedded = create_server(settings)
    assert isinstance(embedded, GisFormatMCPServer)
    assert len(asyncio.run(embedded.list_tools())) == 9
