"""
Typed workflow failures.

Every guard in the workflow engine raises one of these, naming the entity
and field that failed so the caller can render an actionable message.
Nothing in the engine catches them; they propagate to the HTTP layer where
main.py maps them onto status codes.
"""

from typing import Any, Optional


class WorkflowError(Exception):
    """Base class for all workflow failures."""

    code = "workflow_error"
    status_code = 400

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        entity_id: Optional[Any] = None,
        field: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.entity = entity
        self.entity_id = entity_id
        self.field = field

    def to_dict(self) -> dict:
        return {
            "detail": self.message,
            "error": self.code,
            "entity": self.entity,
            "entity_id": self.entity_id,
            "field": self.field,
        }


class ValidationError(WorkflowError):
    """Malformed or missing input (empty reason, missing financial scoring...)."""

    code = "validation_error"
    status_code = 400


class PermissionDeniedError(WorkflowError):
    """The acting user lacks the capability the operation requires."""

    code = "permission_denied"
    status_code = 403


class ConflictError(WorkflowError):
    """
    The entity is not in the state the operation requires.

    Raised on stale reads and duplicate submissions. Callers must re-fetch
    before deciding whether to retry.
    """

    code = "conflict"
    status_code = 409

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        entity_id: Optional[Any] = None,
        field: Optional[str] = "status",
        expected: Optional[Any] = None,
        actual: Optional[Any] = None,
    ):
        super().__init__(message, entity=entity, entity_id=entity_id, field=field)
        self.expected = expected
        self.actual = actual

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["expected"] = _plain(self.expected)
        data["actual"] = _plain(self.actual)
        return data


class NotFoundError(WorkflowError):
    """A referenced entity id does not resolve."""

    code = "not_found"
    status_code = 404


class ExternalServiceError(WorkflowError):
    """The record store failed for reasons outside workflow logic."""

    code = "external_service_error"
    status_code = 503


def _plain(value: Any) -> Any:
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_plain(v) for v in value]
    return getattr(value, "value", value)
