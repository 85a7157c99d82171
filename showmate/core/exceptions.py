class ShowmateException(Exception):
    """Base exception for Showmate"""

    pass


class UnauthorizedException(ShowmateException):
    """Raised when bearer token validation fails"""

    pass


class NotFoundException(ShowmateException):
    """Raised when resource not found"""

    pass


class ForbiddenException(ShowmateException):
    """Raised when the principal tries to act on behalf of another user"""

    pass


class ValidationException(ShowmateException):
    """Raised for missing or invalid input"""

    pass


class ConflictException(ShowmateException):
    """Raised when a user already has an active or pending membership"""

    pass


class TemplateNotFoundException(ShowmateException):
    """Raised when an email type has no registered template"""

    pass
