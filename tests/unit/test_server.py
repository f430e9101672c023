"""In-memory MCP server tests using FastMCP 2.x Client.

Tests the full tool surface through the MCP protocol without subprocess or network.
The display host is a real DisplayHost over a temporary definition tree.
"""

from unittest.mock import patch

import pytest
import pytest_asyncio
from fastmcp import Client

from vitrine.config import DisplayConfig, VitrineConfig
from vitrine.host import DisplayHost
from vitrine.server import create_app, shape_from_dict

# --- Fixtures ---


@pytest.fixture
def host(definitions_dir, tmp_path):
    config = VitrineConfig(display=DisplayConfig(
        definition_paths=[str(definitions_dir)],
        template_store=str(tmp_path / "templates.json"),
    ))
    return DisplayHost(config)


@pytest_asyncio.fixture
async def mcp_client(host):
    """In-memory MCP client connected to a test app."""
    app = create_app(host)
    async with Client(app) as c:
        yield c


# --- Tool surface ---


@pytest.mark.asyncio
async def test_tool_surface(mcp_client):
    tools = await mcp_client.list_tools()
    names = {t.name for t in tools}
    assert names == {
        "ping",
        "render_shape",
        "list_themes",
        "set_theme",
        "list_shape_types",
        "save_template",
        "preview_template",
    }


@pytest.mark.asyncio
async def test_ping(mcp_client):
    result = await mcp_client.call_tool("ping", {})
    assert result.data == "pong"


# --- Rendering ---


@pytest.mark.asyncio
async def test_render_shape(mcp_client):
    result = await mcp_client.call_tool("render_shape", {"shape_type": "Content", "properties": {"title": "Hi"}})
    assert result.data == "<article>Hi</article>"


@pytest.mark.asyncio
async def test_render_shape_escapes_properties(mcp_client):
    result = await mcp_client.call_tool("render_shape", {"shape_type": "Content", "properties": {"title": "<b>"}})
    assert result.data == "<article>&lt;b&gt;</article>"


@pytest.mark.asyncio
async def test_render_shape_with_wrapper_and_display_type(mcp_client):
    result = await mcp_client.call_tool("render_shape", {
        "shape_type": "Content",
        "properties": {"title": "Hi"},
        "display_type": "Summary",
        "wrappers": ["Frame"],
    })
    assert result.data == '<div class="frame"><section>Hi</section></div>'


@pytest.mark.asyncio
async def test_render_unknown_shape(mcp_client):
    result = await mcp_client.call_tool("render_shape", {"shape_type": "Nope"})
    assert result.data == "Error: Shape type 'Nope' not found"


# --- Themes ---


@pytest.mark.asyncio
async def test_list_themes(mcp_client):
    result = await mcp_client.call_tool("list_themes", {})
    assert [t["id"] for t in result.data] == ["Agency", "Base"]
    agency = result.data[0]
    assert agency["name"] == "The Agency"
    assert agency["base_theme"] == "Base"
    assert agency["current"] is False


@pytest.mark.asyncio
async def test_set_theme_changes_rendering(mcp_client, host):
    result = await mcp_client.call_tool("set_theme", {"theme_id": "Agency"})
    assert result.data == {"status": "ok", "current": "Agency"}
    assert host.config.theme.current == "Agency"

    result = await mcp_client.call_tool("render_shape", {"shape_type": "Content", "properties": {"title": "Hi"}})
    assert result.data == '<article class="agency">Hi</article>'


@pytest.mark.asyncio
async def test_set_unknown_theme(mcp_client, host):
    result = await mcp_client.call_tool("set_theme", {"theme_id": "Nope"})
    assert result.data == {"error": "Theme 'Nope' not found"}
    assert host.theme_manager.current is None


@pytest.mark.asyncio
async def test_list_shape_types(mcp_client):
    result = await mcp_client.call_tool("list_shape_types", {})
    assert result.data == ["Content", "Content__Summary", "Frame"]


# --- Templates ---


@pytest.mark.asyncio
async def test_save_template_overrides_definitions(mcp_client, host):
    result = await mcp_client.call_tool("save_template", {"name": "Content", "source": "<h2>{{ Model.title }}</h2>"})
    assert result.data == {"status": "saved", "name": "Content"}
    assert host.template_store.get("Content") == "<h2>{{ Model.title }}</h2>"

    result = await mcp_client.call_tool("render_shape", {"shape_type": "Content", "properties": {"title": "Hi"}})
    assert result.data == "<h2>Hi</h2>"


@pytest.mark.asyncio
async def test_save_template_without_store_path(definitions_dir):
    host = DisplayHost(VitrineConfig(display=DisplayConfig(definition_paths=[str(definitions_dir)])))
    async with Client(create_app(host)) as client:
        result = await client.call_tool("save_template", {"name": "Content", "source": "<h3/>"})
    assert result.data == {"status": "stored", "name": "Content"}
    assert host.template_store.get("Content") == "<h3/>"


@pytest.mark.asyncio
async def test_save_template_write_failure(mcp_client, host):
    with patch.object(host.template_store, "_write", side_effect=OSError("disk full")):
        result = await mcp_client.call_tool("save_template", {"name": "Content", "source": "<h3/>"})
    assert "disk full" in result.data["error"]
    assert host.template_store.get("Content") is None

    result = await mcp_client.call_tool("render_shape", {"shape_type": "Content", "properties": {"title": "Hi"}})
    assert result.data == "<article>Hi</article>"


@pytest.mark.asyncio
async def test_preview_template_is_not_kept(mcp_client, host):
    result = await mcp_client.call_tool("preview_template", {
        "name": "Content",
        "source": "<em>{{ Model.title }}</em>",
        "shape": {"type": "Content", "properties": {"title": "Hi"}},
    })
    assert result.data == "<em>Hi</em>"
    assert host.template_store.get_preview("Content") is None

    result = await mcp_client.call_tool("render_shape", {"shape_type": "Content", "properties": {"title": "Hi"}})
    assert result.data == "<article>Hi</article>"


@pytest.mark.asyncio
async def test_preview_template_error(mcp_client):
    result = await mcp_client.call_tool("preview_template", {
        "name": "Content",
        "source": "{% if %}",
        "shape": {"type": "Content"},
    })
    assert result.data.startswith("Error: Template error in 'Content'")


@pytest.mark.asyncio
async def test_preview_template_needs_shape_type(mcp_client):
    result = await mcp_client.call_tool("preview_template", {"name": "Content", "source": "x", "shape": {}})
    assert result.data == "Error: a shape needs a 'type'"


# --- Shape building ---


class TestShapeFromDict:

    def test_nested_items(self):
        shape = shape_from_dict({
            "type": "List",
            "items": [{"type": "Text", "properties": {"text": "a"}}, "plain"],
        })
        assert shape.type == "List"
        assert shape.items[0].type == "Text"
        assert shape.items[0].text == "a"
        assert shape.items[1] == "plain"

    def test_metadata_fields(self):
        shape = shape_from_dict({
            "type": "Content",
            "prefix": "main",
            "display_type": "Summary",
            "cache_id": "c1",
            "alternates": ["Content__A", "Content__B"],
            "wrappers": ["Frame"],
        })
        assert shape.metadata.prefix == "main"
        assert shape.metadata.display_type == "Summary"
        assert shape.metadata.cache_id == "c1"
        assert shape.metadata.alternates == ["Content__A", "Content__B"]
        assert shape.metadata.wrappers == ["Frame"]

    def test_type_required(self):
        with pytest.raises(ValueError):
            shape_from_dict({"properties": {}})
