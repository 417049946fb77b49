# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (deploy, delete, list_templates)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Exposes the three MCP tools.  Each tool is a thin wrapper: it logs the
#   call, hands the arguments to core/ (resolution, validation), forwards
#   the result to the dispatch sink, and formats a short text reply.
#
# HOW IT WORKS (the flow):
#   1. An MCP client calls a tool by name (e.g., "deploy")
#   2. FastMCP routes the call to the matching closure in create_server()
#   3. The closure calls run_deploy / run_delete / run_list_templates
#      with the AdapterContext it was built with
#   4. Validation failures become ToolError (the client sees the message);
#      broker / API failures propagate as-is
#
# ARGUMENT TYPES:
#   Tool parameters are typed `Any` on purpose: the resolver, not FastMCP,
#   decides what a bad argument bag looks like, so that the caller gets one
#   message listing every bad field.
#
# RUNNING THIS SERVER:
#   Use main.py; it opens the backends and then runs create_server(...)
#   over stdio.
# =============================================================================

import json
import logging
import sys
from typing import Annotated, Any, Iterable

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from backends.context import AdapterContext
from core.errors import ArgumentValidationError, TemplateNotFoundError
from core.models import Template
from core.resolver import parse_delete, resolve_deploy

SERVER_NAME = "tarxan-mcp"

logger = logging.getLogger("deploy_adapter")

# =============================================================================
# Logging Setup
# =============================================================================
# STDOUT carries the MCP protocol, so every log line goes to STDERR.
#   CYAN   → incoming tool calls
#   YELLOW → intermediate status
#   GREEN  → replies
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

_REDACTED_KEYS = {"creds"}


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call in CYAN.  Credentials are never printed."""
    param_str = ", ".join(
        f"{k}=<redacted>" if k in _REDACTED_KEYS else f"{k}={v!r}"
        for k, v in params.items()
    )
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, text: str) -> str:
    logger.info(f"{_GREEN}  ← {tool_name} response: {json.dumps(text)}{_RESET}")
    return text


# =============================================================================
# Reply formatting
# =============================================================================
def format_template(template: Template) -> str:
    name = template.name or "(unnamed)"
    type_ = template.type or "(no type)"
    sub_type = f" / {template.sub_type}" if template.sub_type else ""
    fields = ", ".join(template.fields)
    return f"• {name} ({template.id})\n  Type: {type_}{sub_type}\n  Fields: {fields}"


def format_template_listing(templates: Iterable[Template]) -> str:
    return "\n\n".join(format_template(t) for t in templates) or "No templates found."


def _present(**arguments: Any) -> dict[str, Any]:
    """Drop None parameters: omitted ones (FastMCP fills them with None) and JSON null alike."""
    return {k: v for k, v in arguments.items() if v is not None}


# =============================================================================
# Tool bodies
# =============================================================================
# Plain coroutines taking the context explicitly.  create_server() binds
# them to FastMCP; tests call them directly.
# =============================================================================
async def run_deploy(context: AdapterContext, arguments: dict[str, Any]) -> str:
    _log_request("deploy", **arguments)

    try:
        resolved = await resolve_deploy(arguments, context.catalog)
    except (ArgumentValidationError, TemplateNotFoundError) as exc:
        _log_status(f"Rejected: {exc}")
        raise ToolError(str(exc)) from exc

    command = resolved.command
    if resolved.by_name:
        _log_status(
            f"Resolved name {arguments.get('name')!r} → "
            f"{resolved.matched.name} ({resolved.matched.id})"
        )
    else:
        _log_status(f"Using explicit template_id {command.template_id}")

    await context.dispatcher.deploy(command)

    text = f"Deploy event published for user {command.user_id} using template {command.template_id}"
    if resolved.by_name:
        text += f" ({resolved.matched.name})"
    return _log_response("deploy", text)


async def run_delete(context: AdapterContext, arguments: dict[str, Any]) -> str:
    _log_request("delete", **arguments)

    try:
        command = parse_delete(arguments)
    except ArgumentValidationError as exc:
        _log_status(f"Rejected: {exc}")
        raise ToolError(str(exc)) from exc

    await context.dispatcher.delete(command)
    return _log_response("delete", f"Delete event published for server {command.server_id}")


async def run_list_templates(context: AdapterContext) -> str:
    _log_request("list_templates")

    templates = await context.catalog.get_all()
    _log_status(f"Catalog returned {len(templates)} template(s)")
    return _log_response("list_templates", format_template_listing(templates))


# =============================================================================
# Server factory
# =============================================================================
def create_server(context: AdapterContext) -> FastMCP:
    """Build the FastMCP server with all tools bound to `context`."""
    mcp = FastMCP(SERVER_NAME)

    @mcp.tool()
    async def deploy(
        user_id: Annotated[Any, Field(description="User ID")] = None,
        creds: Annotated[Any, Field(description="Credential object")] = None,
        template_id: Annotated[
            Any, Field(description="Template ID (optional if name is given)")
        ] = None,
        name: Annotated[
            Any, Field(description="Template name (optional if ID is given)")
        ] = None,
    ) -> str:
        """Trigger a deploy action (by template ID or by template name).

        If `template_id` is given it is used as-is.  Otherwise `name` is
        matched case-insensitively as a substring of the catalog's template
        names and the first match is deployed.  Use list_templates to see
        what exists.
        """
        return await run_deploy(
            context,
            _present(user_id=user_id, template_id=template_id, name=name, creds=creds),
        )

    @mcp.tool()
    async def delete(
        server_id: Annotated[Any, Field(description="Server ID")] = None,
    ) -> str:
        """Trigger a delete action for a deployed server."""
        return await run_delete(context, _present(server_id=server_id))

    @mcp.tool()
    async def list_templates() -> str:
        """List available deployment templates with their type and required fields."""
        return await run_list_templates(context)

    return mcp
