# =============================================================================
# core/errors.py  —  Adapter error types
# =============================================================================
#
# Every error a tool call can fail with on purpose.  The tool layer turns
# these into MCP tool errors; anything else (a dead broker, an HTTP 500)
# propagates untouched.
# =============================================================================

from dataclasses import dataclass


class AdapterError(Exception):
    """Base class for errors raised by the deploy adapter."""


class ConfigError(AdapterError):
    """Raised at startup when the environment holds an unusable setting."""


@dataclass(frozen=True)
class FieldViolation:
    """One problem with one argument: where, what, and whether it was absent."""

    path: str
    reason: str
    missing: bool = False

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}"


class ArgumentValidationError(AdapterError):
    """Tool arguments did not match the expected shape.

    Carries every violation found, not just the first one.
    """

    def __init__(self, violations: list[FieldViolation]):
        self.violations = list(violations)
        super().__init__(
            "Invalid arguments: " + ", ".join(str(v) for v in self.violations)
        )

    @property
    def fields(self) -> list[str]:
        return [v.path for v in self.violations]


class MissingFieldError(ArgumentValidationError):
    """At least one required field was absent."""


class InvalidTypeError(ArgumentValidationError):
    """All required fields were present but at least one had the wrong shape."""


class TemplateNotFoundError(AdapterError):
    """The name fallback ran and no catalog entry's name contains the query."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No template found matching name: {name}")


def validation_error(violations: list[FieldViolation]) -> ArgumentValidationError:
    """Pick the most specific error class for a set of violations."""
    if any(v.missing for v in violations):
        return MissingFieldError(violations)
    return InvalidTypeError(violations)
