"""
Error taxonomy for the maternal health core.

Validation, not-found and precondition errors are expected outcomes: they are
detected before any write and handed back to the caller inside a Result.
InternalError signals a data-integrity bug and is raised, not returned.
"""


class MaternalHealthError(Exception):
    """Base class for all core errors."""

    code = "error"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "error": self.reason}


class ValidationError(MaternalHealthError):
    """Malformed or out-of-range input."""

    code = "validation_error"


class NotFoundError(MaternalHealthError):
    """A referenced entity does not exist."""

    code = "not_found"


class PreconditionError(MaternalHealthError):
    """The referenced entity exists but is in the wrong state."""

    code = "precondition_failed"


class InternalError(MaternalHealthError):
    """Serialization or time-conversion failure; message is kept opaque."""

    code = "internal_error"
