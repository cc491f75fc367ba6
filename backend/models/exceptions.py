"""
Custom domain exceptions for the application.

These exceptions are raised by the service layer and converted to HTTP exceptions
by centralized exception handlers in main.py, maintaining proper separation of concerns.

The authentication module (auth.py) also uses these domain exceptions to remain
HTTP-agnostic, allowing reuse in non-HTTP contexts (CLI tools, background tasks).

Enhanced with correlation IDs for Sentry integration and user error reporting.
"""

from core.correlation import generate_correlation_id, get_correlation_id


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message.
        correlation_id: Unique ID for error tracking (auto-generated if not provided).
    """

    def __init__(self, message: str, correlation_id: str | None = None):
        self.message = message
        # Use request correlation ID if available, otherwise generate new one
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    pass


class PermissionDeniedException(DomainException):
    """Raised when user lacks required permissions."""

    pass


class ValidationException(DomainException):
    """Raised when input validation fails."""

    pass


class AuthenticationException(DomainException):
    """Raised when authentication fails."""

    pass


class AlreadyExistsException(DomainException):
    """Raised when trying to create a resource that already exists."""

    pass


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    pass


# Specific exceptions for domain entities


class CommunityNotFoundException(NotFoundException):
    """Community not found."""

    def __init__(self, slug: str | None = None) -> None:
        super().__init__("Community not found")
        self.slug = slug


class ReportNotFoundException(NotFoundException):
    """Report not found (or not part of the requested community)."""

    def __init__(self, report_id: int | None = None) -> None:
        super().__init__("Report not found")
        self.report_id = report_id


class SlugAlreadyExistsException(AlreadyExistsException):
    """Community slug is already taken."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"Community with slug '{slug}' already exists")
        self.slug = slug


class CommunityInactiveException(BusinessRuleException):
    """Raised when joining or reporting into a disabled community."""

    def __init__(self) -> None:
        super().__init__("Community inactive")


class MissingFieldsException(ValidationException):
    """Raised when required payload fields are absent or empty."""

    def __init__(self, fields: list[str], message: str | None = None) -> None:
        super().__init__(message or "Missing required fields")
        self.fields = fields


class InvalidCoordinatesException(ValidationException):
    """Latitude or longitude outside the valid range."""

    def __init__(self, lat: float, lng: float) -> None:
        super().__init__(f"Invalid coordinates: ({lat}, {lng})")
        self.lat = lat
        self.lng = lng


class InsufficientPermissionsException(PermissionDeniedException):
    """User doesn't have sufficient permissions."""

    pass
