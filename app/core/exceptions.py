# app/core/exceptions.py

# Services raise ValueError for anything the caller got wrong.
# These subclasses only tell the endpoints which status code to use.


class NotFoundError(ValueError):
    """Referenced record does not exist (404)."""


class ConflictError(ValueError):
    """Operation not allowed in the record's current state (400)."""


class AdmissionAlreadyConverted(Exception):
    """Another request linked a student to this admission first."""
