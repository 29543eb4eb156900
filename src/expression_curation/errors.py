"""Exception hierarchy for expression call curation.

Every error raised by the library derives from CurationError. The concrete
classes also derive from ValueError, so callers that only guard against bad
arguments keep working.

Hierarchy:
    CurationError
    +-- PreconditionError
    |   +-- UnregisteredConditionError
    |   +-- UnknownEntityError
    +-- NumericDomainError
    +-- InvariantViolationError
"""

from typing import Any, Optional


class CurationError(Exception):
    """
    Base exception for all curation errors.

    Attributes:
        message: Human-readable error description.
        context: Additional context data for debugging.
    """

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{ctx_str}]"
        return self.message


class PreconditionError(CurationError, ValueError):
    """
    Caller-side contract violation.

    Raised for unsorted input lists, clustering input mixing several genes,
    calls missing a rank or a condition, invalid thresholds or unknown
    clustering methods. Always fatal to the whole operation.
    """


class UnregisteredConditionError(PreconditionError):
    """A condition is outside the working set of a precision index."""

    def __init__(self, message: str, conditions: Optional[list] = None):
        context = {"conditions": conditions} if conditions else None
        super().__init__(message, context)
        self.conditions = conditions or []


class UnknownEntityError(PreconditionError):
    """An anatomical entity or developmental stage id is absent from the species scope."""

    def __init__(
        self,
        message: str,
        entity_ids: Optional[set[str]] = None,
        species_id: Optional[str] = None,
    ):
        context: dict[str, Any] = {}
        if species_id is not None:
            context["species_id"] = species_id
        if entity_ids:
            context["entity_ids"] = sorted(entity_ids)
        super().__init__(message, context)
        self.entity_ids = set(entity_ids or ())
        self.species_id = species_id


class NumericDomainError(CurationError, ValueError):
    """A rank or score is outside the domain accepted by a computation."""


class InvariantViolationError(CurationError, ValueError):
    """A value object was built with inconsistent attributes."""
