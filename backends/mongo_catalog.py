# =============================================================================
# backends/mongo_catalog.py  —  Template catalog backed by MongoDB
# =============================================================================
#
# Templates are documents in a collection (default "templates") of the
# database named in MONGO_URL.  Documents are read, never written.
#
# Name lookup reads the collection and applies core.catalog.filter_by_name,
# the same casefold substring rule as the memory and REST catalogs.  A
# server-side $regex with the "i" option folds case differently for some
# non-ASCII names ("ß" vs "SS").  Results keep the collection's natural
# order; the resolver takes the first.
# =============================================================================

import logging
from typing import Any, Optional

from pymongo import AsyncMongoClient

from core.catalog import filter_by_name
from core.models import Template

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "tarxan"


class MongoCatalog:
    """Read-only TemplateCatalog over a Mongo collection."""

    def __init__(
        self,
        url: str,
        collection: str = "templates",
        client: Optional[Any] = None,
    ):
        self._url = url
        self._collection_name = collection
        self._client = client
        self._collection = None

    async def connect(self) -> None:
        if self._client is None:
            self._client = AsyncMongoClient(self._url)
        # Fail at startup, not on the first tool call.
        await self._client.admin.command("ping")
        database = self._client.get_default_database(default=DEFAULT_DATABASE)
        self._collection = database[self._collection_name]
        logger.info("[MongoDB Connected] %s (collection=%s)", self._url, self._collection_name)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
            self._collection = None

    async def __aenter__(self) -> "MongoCatalog":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        try:
            await self.close()
        except Exception:
            logger.warning("Error while closing MongoDB client", exc_info=True)

    def _require_collection(self):
        if self._collection is None:
            raise RuntimeError("MongoDB connection not established")
        return self._collection

    async def get_all(self) -> list[Template]:
        docs = await self._require_collection().find({}).to_list()
        logger.debug("Fetched %d template documents", len(docs))
        return [Template.from_document(doc) for doc in docs]

    async def find_by_name_substring(self, name: str) -> list[Template]:
        return filter_by_name(await self.get_all(), name)
