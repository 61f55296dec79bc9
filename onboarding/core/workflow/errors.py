"""Workflow error taxonomy.

Every precondition violation raises one of these before any mutation is
applied. ``status_code`` is the HTTP status the API layer responds with.
"""

from typing import Optional


class WorkflowError(Exception):
    """Base class for workflow failures surfaced to the caller."""
    
    status_code = 400
    
    def __init__(self, message: str, *, action: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.action = action


class NotFoundError(WorkflowError):
    """Application, request or related record does not exist."""
    status_code = 404


class InvalidTransitionError(WorkflowError):
    """Status or stage precondition not met."""
    status_code = 409


class UnauthorizedError(WorkflowError):
    """Actor role or ownership does not permit the action at this stage."""
    status_code = 403


class ConflictError(WorkflowError):
    """Uniqueness violation or concurrent modification."""
    status_code = 409


class ValidationError(WorkflowError):
    """Missing or malformed input such as required comments."""
    status_code = 422
