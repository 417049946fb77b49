# =============================================================================
# core/catalog.py  —  Template Catalog contract + embedded catalog
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Defines the read-only contract every template source satisfies, and
#   ships the simplest source: a constant in-memory list.
#
#   The resolver only ever talks to a TemplateCatalog.  Whether the
#   templates come from this list, a Mongo collection, or a REST listing
#   (see backends/) is decided once, at startup.
#
# MATCHING RULE:
#   find_by_name_substring() is a case-insensitive SUBSTRING match on the
#   template name.  The query is literal text, never a pattern.  Results
#   keep catalog order; the caller picks the first.
# =============================================================================

from typing import Iterable, Protocol

from core.models import Template


class TemplateCatalog(Protocol):
    """Read-only template source."""

    async def get_all(self) -> list[Template]: ...

    async def find_by_name_substring(self, name: str) -> list[Template]: ...


def name_matches(template: Template, query: str) -> bool:
    """True if `query` occurs anywhere in the template name, ignoring case."""
    return query.casefold() in (template.name or "").casefold()


def filter_by_name(templates: Iterable[Template], query: str) -> list[Template]:
    return [t for t in templates if name_matches(t, query)]


# -----------------------------------------------------------------------------
# Embedded templates
# -----------------------------------------------------------------------------
# The catalog used when CATALOG_BACKEND=memory.  Handy for local runs and
# demos where no document store is available.
# -----------------------------------------------------------------------------
DEFAULT_TEMPLATES: tuple[Template, ...] = (
    Template(
        id="tpl-mongo",
        name="MongoDB Server",
        type="database",
        sub_type="mongodb",
        fields=["MONGO_INITDB_ROOT_USERNAME", "MONGO_INITDB_ROOT_PASSWORD"],
        path="templates/mongodb",
        require_subdomain=False,
        require_custom_subdomain=False,
    ),
    Template(
        id="tpl-gpt",
        name="Basic GPT Server",
        type="ai",
        sub_type="openai",
        fields=["OPENAI_API_KEY"],
        path="templates/basic-gpt",
        require_subdomain=True,
        require_custom_subdomain=False,
    ),
    Template(
        id="tpl-postgres",
        name="PostgreSQL Server",
        type="database",
        sub_type="postgres",
        fields=["POSTGRES_USER", "POSTGRES_PASSWORD"],
        path="templates/postgres",
        require_subdomain=False,
        require_custom_subdomain=False,
    ),
    Template(
        id="tpl-static",
        name="Static Website",
        type="web",
        fields=["REPOSITORY_URL"],
        path="templates/static-site",
        require_subdomain=True,
        require_custom_subdomain=True,
    ),
)


class InMemoryCatalog:
    """A TemplateCatalog backed by a fixed list.

    Supports `async with` like the networked catalogs so startup code can
    treat every backend the same way.
    """

    def __init__(self, templates: Iterable[Template] = DEFAULT_TEMPLATES):
        self._templates = list(templates)

    async def __aenter__(self) -> "InMemoryCatalog":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def get_all(self) -> list[Template]:
        return list(self._templates)

    async def find_by_name_substring(self, name: str) -> list[Template]:
        return filter_by_name(self._templates, name)
