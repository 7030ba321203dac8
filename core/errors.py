"""
Error taxonomy shared by the report, verification and finalization workflows.

Every error carries the HTTP status it surfaces as, so the API layer can
render it without knowing which workflow raised it.
"""

from fastapi import status


class TruthlineError(Exception):
    """Base class for errors shown to the invoking user"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TruthlineError):
    """Bad input shape or length"""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthorizationError(TruthlineError):
    """Caller lacks the role or credential the operation needs"""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(TruthlineError):
    """Referenced report or profile does not exist"""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(TruthlineError):
    """Operation clashes with the current state, e.g. re-finalizing a report"""

    status_code = status.HTTP_409_CONFLICT


class PersistenceError(TruthlineError):
    """Store read or write failed"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ServiceCredentialError(AuthorizationError):
    """Service-level operation called without the elevated credential"""

    status_code = status.HTTP_401_UNAUTHORIZED
