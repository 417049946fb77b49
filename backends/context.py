# =============================================================================
# backends/context.py  —  The adapter's connection context
# =============================================================================
#
# One AdapterContext per process:
#   - opened once at startup by main.py (connect failures abort startup),
#   - passed explicitly into tools.mcp_server.create_server(),
#   - closed on shutdown, in reverse order of opening.
#
# There is no module-level connection handle anywhere else.
# =============================================================================

from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import httpx

from backends.mongo_catalog import MongoCatalog
from backends.nats_dispatch import NatsDispatcher
from backends.rest import RestCatalog, RestDispatcher, make_http_client
from core.catalog import InMemoryCatalog, TemplateCatalog
from core.config import Settings
from core.dispatch import Dispatcher


@dataclass
class AdapterContext:
    catalog: TemplateCatalog
    dispatcher: Dispatcher


def build_catalog(settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
    if settings.catalog_backend == "memory":
        return InMemoryCatalog()
    if settings.catalog_backend == "mongo":
        return MongoCatalog(settings.mongo_url, settings.mongo_collection)
    if http_client is None:
        raise ValueError("REST catalog needs an HTTP client")
    return RestCatalog(http_client)


def build_dispatcher(settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
    if settings.dispatch_backend == "nats":
        return NatsDispatcher(
            settings.nats_url,
            deploy_subject=settings.nats_deploy_subject,
            delete_subject=settings.nats_delete_subject,
        )
    if http_client is None:
        raise ValueError("REST dispatcher needs an HTTP client")
    return RestDispatcher(http_client)


@asynccontextmanager
async def open_context(settings: Settings) -> AsyncIterator[AdapterContext]:
    """Connect the configured catalog and dispatcher; close both on exit."""
    async with AsyncExitStack() as stack:
        http_client = None
        if "rest" in (settings.catalog_backend, settings.dispatch_backend):
            http_client = await stack.enter_async_context(make_http_client(settings))

        catalog = await stack.enter_async_context(build_catalog(settings, http_client))
        dispatcher = await stack.enter_async_context(build_dispatcher(settings, http_client))
        yield AdapterContext(catalog=catalog, dispatcher=dispatcher)
