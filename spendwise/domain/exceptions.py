"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class UserNotFoundError(DomainException):
    """No user profile exists for the requested identifier"""

    pass


class InvalidDateRangeError(DomainException):
    """Requested analysis window ends before it starts"""

    pass
