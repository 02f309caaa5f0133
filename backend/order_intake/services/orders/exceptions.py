"""Order domain exceptions."""

from order_intake.services.exceptions import ValidationError, WriteError


class InvalidOrderPayload(ValidationError):
    """The submission is missing or structurally invalid."""

    pass


class HeaderNotWritten(WriteError):
    """The order header insert affected no rows."""

    pass


class LineNotWritten(WriteError):
    """The order line insert affected no rows."""

    pass


class InventTransNotWritten(WriteError):
    """The inventory transaction insert affected no rows."""

    pass
