"""Catalog domain exceptions."""

from order_intake.services.exceptions import NotFoundError


class CustomerNotFound(NotFoundError):
    """No customer with the given name."""

    pass
