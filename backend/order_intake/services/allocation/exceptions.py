"""Allocation domain exceptions."""

from order_intake.services.exceptions import AllocationError


class SequenceNotFound(AllocationError):
    """No counter row exists for the sequence name."""

    pass


class InvalidSequenceValue(AllocationError):
    """The stored counter value is not an integer."""

    pass


class SequenceConflict(AllocationError):
    """Another caller advanced the counter between peek and swap."""

    pass


class RecordIdConflict(AllocationError):
    """Another caller inserted a row with the allocated record id."""

    pass


class AllocationLockUnavailable(AllocationError):
    """The distributed allocation lock could not be acquired."""

    pass
