"""Domain errors raised by the validator, normalizer, stores and services.

The API layer maps each error to a response using its ``status_code`` and
``kind``; nothing below the API layer knows about HTTP.
"""


class TaskflowError(Exception):
    """Base class for all domain errors."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"message": self.message, "kind": self.kind}


class ValidationError(TaskflowError):
    """Malformed or missing input the caller can correct."""

    kind = "validation_error"
    status_code = 400


class AuthError(TaskflowError):
    """Missing, invalid or expired credential."""

    kind = "auth_error"
    status_code = 401


class NotFoundError(TaskflowError):
    """Resource absent, or owned by someone else."""

    kind = "not_found"
    status_code = 404


class DependencyError(TaskflowError):
    """Database or external collaborator unreachable."""

    kind = "dependency_error"
    status_code = 503
