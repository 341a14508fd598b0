"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidScheduleError(DomainException, ValueError):
    """Installment schedule parameters are invalid"""

    pass


class NotFoundError(DomainException):
    """Requested record does not exist in the store"""

    pass


class StoreError(DomainException):
    """Record store rejected or failed the operation"""

    pass


class StoreUnavailableError(StoreError):
    """Record store could not be reached (network or connectivity failure)"""

    pass


class ConstraintViolationError(StoreError):
    """Store-side constraint blocked the operation (e.g. foreign reference)"""

    pass


class VersionConflictError(DomainException):
    """Installment was modified by another writer since it was read"""

    pass


class AuthenticationError(DomainException):
    """Credentials or session token rejected by the identity provider"""

    pass


class IdentityUnavailableError(DomainException):
    """Identity provider timed out or returned a server error"""

    pass
