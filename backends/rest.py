# =============================================================================
# backends/rest.py  —  Catalog and Dispatcher over a REST deployment API
# =============================================================================
#
# ENDPOINTS (relative to API_BASE_URL):
#   GET  /templates  →  JSON list of template objects
#                       (a {"templates": [...]} envelope is accepted too)
#   POST /deploy     →  body {"user_id", "template_id", "creds"}
#   POST /delete     →  body {"server_id"}
#
# Both classes share one httpx.AsyncClient, built by make_http_client()
# and owned by the AdapterContext.  Any non-2xx status raises
# httpx.HTTPStatusError, which fails the tool call.
#
# The API has no name search, so find_by_name_substring() filters the full
# listing client-side with the same rule as the in-memory catalog.
# =============================================================================

import logging
from typing import Any, Optional

import httpx

from core.catalog import filter_by_name
from core.config import Settings
from core.models import DeleteCommand, DeployCommand, Template

logger = logging.getLogger(__name__)


def make_http_client(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    headers = {"Accept": "application/json"}
    if settings.api_token:
        headers["Authorization"] = f"Bearer {settings.api_token}"
    return httpx.AsyncClient(
        base_url=settings.api_base_url or "",
        headers=headers,
        timeout=settings.api_timeout,
        transport=transport,
    )


def _template_documents(body: Any) -> list[dict]:
    if isinstance(body, dict):
        body = body.get("templates", [])
    if not isinstance(body, list):
        raise ValueError("Template listing must be a JSON list")
    return [doc for doc in body if isinstance(doc, dict)]


class RestCatalog:
    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def __aenter__(self) -> "RestCatalog":
        logger.info("[REST Catalog] %s/templates", self._client.base_url)
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def get_all(self) -> list[Template]:
        response = await self._client.get("/templates")
        response.raise_for_status()
        return [Template.from_document(doc) for doc in _template_documents(response.json())]

    async def find_by_name_substring(self, name: str) -> list[Template]:
        return filter_by_name(await self.get_all(), name)


class RestDispatcher:
    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def __aenter__(self) -> "RestDispatcher":
        logger.info("[REST Dispatch] %s", self._client.base_url)
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def _post(self, path: str, payload: dict) -> None:
        response = await self._client.post(path, json=payload)
        response.raise_for_status()

    async def deploy(self, command: DeployCommand) -> None:
        await self._post("/deploy", command.to_payload())

    async def delete(self, command: DeleteCommand) -> None:
        await self._post("/delete", command.to_payload())
