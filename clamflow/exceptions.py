"""Typed errors raised by the ClamFlow core.

Every service failure is one of the classes below so the presentation
layer can map it to a message without inspecting strings.  Each error
carries a stable ``error_code`` and an optional ``details`` payload.
"""

from typing import Union

from pydantic import ValidationError as PydanticValidationError


class ClamFlowException(Exception):
    """Base exception for ClamFlow application errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        details: Union[dict, list, None] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Standardised error payload.

        Format:
        {
            "error": {
                "code": "ERROR_CODE",
                "message": "Human-readable error message",
                "details": {...}  // Optional additional details
            }
        }
        """
        content = {
            "error": {
                "code": self.error_code,
                "message": self.message,
            }
        }
        if self.details:
            content["error"]["details"] = self.details
        return content


class ValidationError(ClamFlowException):
    """Malformed or out-of-range input, caught before any write."""

    def __init__(self, message: str, details: Union[dict, list, None] = None):
        super().__init__(message, error_code="VALIDATION_ERROR", details=details)

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationError":
        errors = []
        for error in exc.errors():
            field = " -> ".join(str(loc) for loc in error["loc"])
            errors.append({
                "field": field,
                "message": error["msg"],
                "type": error["type"],
            })
        first = errors[0] if errors else None
        message = (
            f"Validation error: {first['field']}: {first['message']}"
            if first else "Validation error"
        )
        return cls(message, details={"errors": errors})


class NotFoundError(ClamFlowException):
    """A referenced entity does not exist."""

    def __init__(self, resource: str, identifier):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            message=f"{resource} not found: {identifier}",
            error_code="RESOURCE_NOT_FOUND",
        )


class ConflictError(ClamFlowException):
    """Uniqueness or state-precondition violation."""

    def __init__(self, message: str, error_code: str = "CONFLICT"):
        super().__init__(message, error_code=error_code)


class ReferentialIntegrityError(ClamFlowException):
    """Deleting the entity would orphan dependent records."""

    def __init__(self, resource: str, identifier, dependents: str):
        super().__init__(
            message=f"{resource} {identifier} is still referenced by {dependents}",
            error_code="REFERENTIAL_INTEGRITY",
        )


class SchemaVersionError(ClamFlowException):
    """The store is at a schema version this code cannot work with."""

    def __init__(self, message: str, found=None, expected=None):
        self.found = found
        self.expected = expected
        super().__init__(message, error_code="SCHEMA_VERSION")


class StorageError(ClamFlowException):
    """Underlying persistence failure; the caller decides whether to retry."""

    def __init__(self, message: str = "Database temporarily unavailable. Please try again."):
        super().__init__(message, error_code="STORAGE_ERROR")
