from __future__ import annotations


class ValidationError(ValueError):
    """Rejected input. The message is shown to the user as-is."""


class DuplicateRecordError(ValidationError):
    pass


class InvalidTransitionError(ValidationError):
    pass
