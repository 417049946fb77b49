# =============================================================================
# core/models.py  —  Data Models (templates, deploy and delete commands)
# =============================================================================
#
# These dataclasses describe every piece of data that crosses the adapter:
# what the catalog hands us, and what we hand to the dispatch sink.
# They carry no I/O.  Validation of the raw tool arguments lives in
# core/resolver.py; by the time one of these exists, it is well-formed.
# =============================================================================

from dataclasses import dataclass, field
from typing import Any, Optional


# -----------------------------------------------------------------------------
# Template — a named deployment blueprint, owned by an external catalog
# -----------------------------------------------------------------------------
# Only `id` and `name` matter for resolution.  The rest is metadata shown by
# list_templates.  Names are NOT unique.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Template:
    """A deployable blueprint as listed by the template catalog."""

    id: str
    name: str
    type: Optional[str] = None
    sub_type: Optional[str] = None
    fields: list[str] = field(default_factory=list)
    path: Optional[str] = None
    require_subdomain: bool = False
    require_custom_subdomain: bool = False

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Template":
        """Build a Template from a catalog document (Mongo or REST JSON).

        Accepts either `id` or Mongo's `_id`; the id is always stringified.
        Unknown keys are ignored.
        """
        raw_id = doc.get("id", doc.get("_id"))
        fields = doc.get("fields")
        return cls(
            id="" if raw_id is None else str(raw_id),
            name=doc.get("name") or "",
            type=doc.get("type"),
            sub_type=doc.get("sub_type"),
            fields=[str(f) for f in fields] if isinstance(fields, list) else [],
            path=doc.get("path"),
            require_subdomain=bool(doc.get("require_subdomain", False)),
            require_custom_subdomain=bool(doc.get("require_custom_subdomain", False)),
        )


# -----------------------------------------------------------------------------
# DeployCommand — the canonical payload sent downstream
# -----------------------------------------------------------------------------
# `creds` is opaque: any JSON value the caller sent, passed through as-is.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class DeployCommand:
    user_id: str
    template_id: str
    creds: Any

    def to_payload(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "template_id": self.template_id,
            "creds": self.creds,
        }


@dataclass(frozen=True)
class DeleteCommand:
    server_id: str

    def to_payload(self) -> dict[str, Any]:
        return {"server_id": self.server_id}


# -----------------------------------------------------------------------------
# ResolvedDeploy — a DeployCommand plus how we got there
# -----------------------------------------------------------------------------
# `resolved_by` is "template_id" (strict path, no lookup) or "name"
# (fallback path).  For the name path, `matched` is the chosen template.
# -----------------------------------------------------------------------------
RESOLVED_BY_ID = "template_id"
RESOLVED_BY_NAME = "name"


@dataclass(frozen=True)
class ResolvedDeploy:
    """Outcome of deploy resolution, annotated for logging and replies."""

    command: DeployCommand
    resolved_by: str = RESOLVED_BY_ID
    matched: Optional[Template] = None

    @property
    def by_name(self) -> bool:
        return self.resolved_by == RESOLVED_BY_NAME
