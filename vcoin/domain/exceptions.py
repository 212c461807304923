"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ClassNotFoundError(DomainException):
    """Class does not exist"""

    pass


class StudentNotFoundError(DomainException):
    """Student does not exist"""

    pass


class InvalidCredentialsError(DomainException):
    """Student login did not match class, registry number and password"""

    pass
