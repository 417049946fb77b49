# =============================================================================
# core/resolver.py  —  Deploy Request Resolver
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns the loose argument bag of a `deploy` tool call into exactly one
#   DeployCommand, or fails with an error that names every bad field.
#
# THE TWO PATHS (tried in this order, one per call):
#   1. Strict:   user_id + template_id + creds, correctly typed.
#                Accepted as-is.  The catalog is NOT consulted.
#   2. Fallback: strict failed, but user_id + creds + a non-empty `name`
#                are there.  The name is looked up in the catalog
#                (case-insensitive substring) and the FIRST match wins.
#   Neither fits → every violation from the strict check is reported.
#
# Nothing here dispatches anything.  If this module raises, the tool call
# stops before any downstream side effect.
# =============================================================================

import logging
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from core.catalog import TemplateCatalog
from core.errors import FieldViolation, TemplateNotFoundError, validation_error
from core.models import (
    RESOLVED_BY_ID,
    RESOLVED_BY_NAME,
    DeleteCommand,
    DeployCommand,
    ResolvedDeploy,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Canonical argument shapes
# -----------------------------------------------------------------------------
# strict=True: no silent int → str coercion.  Extra keys (e.g. a `name`
# sent alongside a valid `template_id`) are ignored.
# -----------------------------------------------------------------------------
class DeployArgs(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    user_id: str
    template_id: str
    creds: Any

    @field_validator("creds")
    @classmethod
    def _creds_not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("credentials must be provided")
        return value


class DeleteArgs(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    server_id: str


def _violations(exc: ValidationError) -> list[FieldViolation]:
    return [
        FieldViolation(
            path=".".join(str(part) for part in err["loc"]) or "(root)",
            reason=err["msg"],
            missing=err["type"] == "missing",
        )
        for err in exc.errors()
    ]


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _fallback_applies(raw: Mapping[str, Any]) -> bool:
    return (
        _non_empty_str(raw.get("name"))
        and _non_empty_str(raw.get("user_id"))
        and raw.get("creds") is not None
    )


async def resolve_deploy(
    raw: Mapping[str, Any],
    catalog: TemplateCatalog,
) -> ResolvedDeploy:
    """Resolve a raw deploy request into a canonical command.

    Args:
        raw: The tool arguments as received.
        catalog: Template source, read only when falling back to `name`.

    Returns:
        A ResolvedDeploy saying which path was taken and, for the name
        path, which template was picked.

    Raises:
        MissingFieldError / InvalidTypeError: neither shape fits.
        TemplateNotFoundError: the name matched nothing.
    """
    if not isinstance(raw, Mapping):
        raise validation_error(
            [FieldViolation("(root)", "Expected an object of tool arguments")]
        )

    try:
        args = DeployArgs.model_validate(dict(raw))
    except ValidationError as exc:
        if not _fallback_applies(raw):
            raise validation_error(_violations(exc)) from None
    else:
        return ResolvedDeploy(
            command=DeployCommand(args.user_id, args.template_id, args.creds),
            resolved_by=RESOLVED_BY_ID,
        )

    name = raw["name"]
    matches = await catalog.find_by_name_substring(name)
    if not matches:
        raise TemplateNotFoundError(name)

    chosen = matches[0]
    if len(matches) > 1:
        logger.info(
            "Name %r matched %d templates; using first: %s (%s)",
            name, len(matches), chosen.name, chosen.id,
        )
    return ResolvedDeploy(
        command=DeployCommand(raw["user_id"], chosen.id, raw["creds"]),
        resolved_by=RESOLVED_BY_NAME,
        matched=chosen,
    )


def parse_delete(raw: Mapping[str, Any]) -> DeleteCommand:
    """Validate `delete` arguments; same error reporting as deploy."""
    if not isinstance(raw, Mapping):
        raise validation_error(
            [FieldViolation("(root)", "Expected an object of tool arguments")]
        )
    try:
        args = DeleteArgs.model_validate(dict(raw))
    except ValidationError as exc:
        raise validation_error(_violations(exc)) from None
    return DeleteCommand(server_id=args.server_id)
