"""Domain exception hierarchy for structured error responses.

Every error that reaches the client is rendered as an HTTP status plus a
machine-readable ``code`` the frontend can branch on.
"""

from __future__ import annotations


class AppException(Exception):
    """Base exception for all domain errors.

    Subclasses set ``status_code`` and a default ``code`` at the class level;
    callers provide ``message``, an optional operation-specific ``code``
    (e.g. ``RFQ_NOT_FOUND``) and an optional ``details`` list.
    """

    code: str = "APP_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or []
        if code is not None:
            self.code = code


class NotFoundException(AppException):
    code = "NOT_FOUND"
    status_code = 404


class BusinessRuleException(AppException):
    code = "BUSINESS_RULE_VIOLATION"
    status_code = 400


class ServiceFailureException(AppException):
    code = "INTERNAL_ERROR"
    status_code = 500


class ForbiddenException(AppException):
    code = "FORBIDDEN"
    status_code = 403


class UnauthorizedException(AppException):
    code = "UNAUTHORIZED"
    status_code = 401
