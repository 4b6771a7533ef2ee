"""Domain exception hierarchy.

Every error raised by the service layer derives from ``WorkHubError`` and
carries a stable machine-readable ``code`` plus the HTTP status the outer
request boundary maps it to. Messages are safe to show to callers; internal
detail belongs in the log, not in the exception text.
"""

from fastapi import status


class WorkHubError(Exception):
    """Base exception for the work-management backend."""

    code = "ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(WorkHubError):
    """Entity absent or soft-deleted."""

    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class AlreadyExistsError(WorkHubError):
    """Uniqueness violation (proactive check or DB constraint)."""

    code = "ALREADY_EXISTS"
    status_code = status.HTTP_409_CONFLICT


class UnauthorizedError(WorkHubError):
    """Missing or wrong tenant context, or insufficient rank."""

    code = "UNAUTHORIZED"
    status_code = status.HTTP_403_FORBIDDEN


class TenantNotSelectedError(UnauthorizedError):
    code = "TENANT_NOT_SELECTED"


class EmployeeNotSetError(UnauthorizedError):
    code = "EMPLOYEE_NOT_SET"


class ContextNotSetError(UnauthorizedError):
    """The request context was never populated, or was already cleared."""

    code = "CONTEXT_NOT_SET"
    status_code = status.HTTP_401_UNAUTHORIZED


class BadRequestError(WorkHubError):
    """Domain-rule violation."""

    code = "BAD_REQUEST"
    status_code = status.HTTP_400_BAD_REQUEST


class PasswordMismatchError(BadRequestError):
    code = "PASSWORD_MISMATCH"


class InvalidPasswordError(BadRequestError):
    code = "INVALID_PASSWORD"


class InvalidCredentialsError(WorkHubError):
    """Login failure. Deliberately says nothing about which check failed."""

    code = "INVALID_CREDENTIALS"
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Invalid phone number or password"):
        super().__init__(message)


class TokenInvalidError(WorkHubError):
    """Any bearer-token failure: malformed, expired, bad signature, wrong kind."""

    code = "TOKEN_INVALID"
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class SubscriptionLimitExceededError(WorkHubError):
    code = "SUBSCRIPTION_LIMIT_EXCEEDED"
    status_code = status.HTTP_409_CONFLICT


class ConcurrentModificationError(WorkHubError):
    """Optimistic-lock conflict. The caller should re-fetch and retry."""

    code = "CONCURRENT_MODIFICATION"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "Resource was modified concurrently; re-fetch and retry"):
        super().__init__(message)


class FileStorageError(WorkHubError):
    code = "FILE_STORAGE_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
