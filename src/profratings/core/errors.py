"""
Typed errors raised by the data access layer.

Every error carries an HTTP-style status code so the API layer can surface it
unchanged. None of them are retried internally.
"""

from typing import Optional


class ProfRatingsError(Exception):
    """Base error with an associated status code."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def __repr__(self):
        return f"<{type(self).__name__}(status_code={self.status_code}, message='{self.message}')>"


class NotFoundError(ProfRatingsError):
    """A key is missing from its namespace."""

    status_code = 404


class RecordValidationError(ProfRatingsError):
    """A stored or incoming record does not match its schema."""

    status_code = 400


class WriteError(ProfRatingsError):
    """A record failed validation on the write path."""

    status_code = 500


class AuthenticationError(ProfRatingsError):
    """Missing, malformed or mismatched credentials."""

    status_code = 401


class StateConflictError(ProfRatingsError):
    """Duplicate review identifier within a course."""

    status_code = 409


class PreconditionFailedError(ProfRatingsError):
    """A pending review was committed before being marked successful."""

    status_code = 412


class AggregationError(ProfRatingsError):
    """The professor failed validation after folding in a new review."""

    status_code = 500
