from __future__ import annotations


class NotFoundError(ValueError):
    """A referenced record does not exist."""


class ValidationFailed(ValueError):
    """Payload is well-formed JSON but breaks a business rule.

    ``errors`` holds field-level complaints as ``{'field': ..., 'message': ...}`` dicts.
    """

    def __init__(self, message: str, errors: list[dict] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> ValidationFailed:
        return cls(message, [{'field': field, 'message': message}])


class ConfirmationRequired(Exception):
    """Existing work would be replaced; the caller must confirm explicitly."""

    def __init__(self, message: str, existing_count: int) -> None:
        super().__init__(message)
        self.message = message
        self.existing_count = existing_count
