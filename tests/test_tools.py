"""Tool layer: replies, error conversion, and the FastMCP surface."""

import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

from backends.context import AdapterContext
from core.catalog import InMemoryCatalog
from core.models import DeleteCommand, DeployCommand, Template
from tools.mcp_server import (
    create_server,
    format_template,
    format_template_listing,
    run_delete,
    run_deploy,
    run_list_templates,
)


@pytest.mark.asyncio
async def test_deploy_by_id_dispatches_command(context, dispatcher):
    text = await run_deploy(context, {"user_id": "u1", "template_id": "tpl-x", "creds": {"a": 1}})
    assert text == "Deploy event published for user u1 using template tpl-x"
    assert dispatcher.deployed == [DeployCommand("u1", "tpl-x", {"a": 1})]


@pytest.mark.asyncio
async def test_deploy_by_name_names_the_template(context, dispatcher):
    text = await run_deploy(context, {"user_id": "u1", "name": "gpt", "creds": {}})
    assert text == "Deploy event published for user u1 using template tpl-gpt (Basic GPT Server)"
    assert dispatcher.deployed == [DeployCommand("u1", "tpl-gpt", {})]


@pytest.mark.asyncio
async def test_deploy_unknown_name_is_tool_error_and_not_dispatched(context, dispatcher):
    with pytest.raises(ToolError, match="No template found matching name: nonexistent"):
        await run_deploy(context, {"user_id": "u1", "name": "nonexistent", "creds": {}})
    assert dispatcher.deployed == []


@pytest.mark.asyncio
async def test_deploy_missing_fields_is_tool_error(context, dispatcher):
    with pytest.raises(ToolError, match="user_id"):
        await run_deploy(context, {"template_id": "tpl-x", "creds": {}})
    assert dispatcher.deployed == []


@pytest.mark.asyncio
async def test_dispatch_failure_propagates(catalog):
    class BrokenDispatcher:
        async def deploy(self, command):
            raise ConnectionError("broker down")

        async def delete(self, command):
            raise ConnectionError("broker down")

    context = AdapterContext(catalog=catalog, dispatcher=BrokenDispatcher())
    with pytest.raises(ConnectionError):
        await run_deploy(context, {"user_id": "u1", "template_id": "tpl-x", "creds": {}})


@pytest.mark.asyncio
async def test_delete_dispatches(context, dispatcher):
    text = await run_delete(context, {"server_id": "srv-9"})
    assert text == "Delete event published for server srv-9"
    assert dispatcher.deleted == [DeleteCommand("srv-9")]


@pytest.mark.asyncio
async def test_delete_without_server_id_is_tool_error(context, dispatcher):
    with pytest.raises(ToolError, match="server_id"):
        await run_delete(context, {})
    assert dispatcher.deleted == []


@pytest.mark.asyncio
async def test_list_templates(context):
    text = await run_list_templates(context)
    assert text == (
        "• MongoDB Server (tpl-mongo)\n  Type: database\n  Fields: USER, PASSWORD"
        "\n\n"
        "• Basic GPT Server (tpl-gpt)\n  Type: ai / openai\n  Fields: OPENAI_API_KEY"
    )


@pytest.mark.asyncio
async def test_list_templates_empty(dispatcher):
    context = AdapterContext(catalog=InMemoryCatalog([]), dispatcher=dispatcher)
    assert await run_list_templates(context) == "No templates found."


def test_format_template_placeholders():
    assert format_template(Template(id="t1", name="")) == "• (unnamed) (t1)\n  Type: (no type)\n  Fields: "


def test_format_listing_of_nothing():
    assert format_template_listing([]) == "No templates found."


# -----------------------------------------------------------------------------
# Through FastMCP's in-memory transport
# -----------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_server_lists_three_tools(context):
    async with Client(create_server(context)) as client:
        tools = await client.list_tools()
    assert {t.name for t in tools} == {"deploy", "delete", "list_templates"}


@pytest.mark.asyncio
async def test_server_deploy_roundtrip(context, dispatcher):
    async with Client(create_server(context)) as client:
        result = await client.call_tool("deploy", {"user_id": "u1", "name": "mongo", "creds": {"pw": "x"}})
    assert "tpl-mongo" in result.content[0].text
    assert dispatcher.deployed == [DeployCommand("u1", "tpl-mongo", {"pw": "x"})]


@pytest.mark.asyncio
async def test_server_reports_resolution_error(context, dispatcher):
    async with Client(create_server(context)) as client:
        with pytest.raises(ToolError, match="No template found matching name: nope"):
            await client.call_tool("deploy", {"user_id": "u1", "name": "nope", "creds": {}})
    assert dispatcher.deployed == []


@pytest.mark.asyncio
async def test_server_treats_null_creds_as_missing(context, dispatcher):
    async with Client(create_server(context)) as client:
        with pytest.raises(ToolError, match="creds: Field required"):
            await client.call_tool("deploy", {"user_id": "u1", "template_id": "tpl-x", "creds": None})
    assert dispatcher.deployed == []
