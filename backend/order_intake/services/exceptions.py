"""Base service exceptions.

These exceptions are raised by the service layer. Allocation, write and
resolution errors are handled inside the order write pipeline and recorded
per item; only NotFoundError and ValidationError reach the API layer, which
converts them to HTTP responses.
"""


class ServiceError(Exception):
    """Base service exception."""

    pass


class NotFoundError(ServiceError):
    """Resource not found."""

    pass


class ValidationError(ServiceError):
    """Validation error."""

    pass


class AllocationError(ServiceError):
    """A sequence value or record id could not be allocated.

    Fatal for the line item being processed, never for the whole order.
    """

    pass


class WriteError(ServiceError):
    """An insert affected zero rows or raised."""

    pass


class ResolutionError(ServiceError):
    """A reference lookup failed or matched nothing.

    Always recovered by substituting an empty value.
    """

    pass
