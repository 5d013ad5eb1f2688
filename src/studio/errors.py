"""Workflow error taxonomy.

Missing records surface as ``protean.exceptions.ObjectNotFoundError`` and bad
input as ``protean.exceptions.ValidationError``; the classes below cover the
outcomes Protean has no type for. Each carries a message and the identifiers
needed to act on it, and the API layer maps them to status codes.
"""


class WorkflowError(Exception):
    """Base class for studio workflow failures."""

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict:
        return {"error": self.message, **{k: v for k, v in self.context.items() if v is not None}}


class Forbidden(WorkflowError):
    """Wrong tenant, role or assignment for the attempted action."""


class RevisionLimitReached(Forbidden):
    """A customer revision request exceeded the allowed number of rounds."""

    def __init__(self, allowance):
        super().__init__(
            "Revision limit reached for this order",
            max_rounds=allowance.max_rounds,
            used_rounds=allowance.used_rounds,
            remaining_rounds=allowance.remaining_rounds,
            basis=allowance.basis,
        )
        self.allowance = allowance


class Conflict(WorkflowError):
    """The request was based on stale state and lost to another writer."""


class StaleWrite(Conflict):
    """Another request saved the same record first; the write was based on a stale read."""


class AssignmentConflict(Conflict):
    """The order is no longer assignable, usually because someone else assigned it."""

    hint = "Someone else may have already assigned this order. Re-fetch it and try again."

    def to_dict(self) -> dict:
        return {**super().to_dict(), "hint": self.hint}


class InvalidStateTransition(Conflict):
    """The record is not in a state that allows the requested transition."""

    def __init__(self, entity: str, current: str, target: str, **context):
        super().__init__(
            f"Cannot transition {entity} from {current} to {target}",
            current_status=current,
            target_status=target,
            **context,
        )


class UpstreamFailure(WorkflowError):
    """Object storage or another external service failed on the primary path."""
