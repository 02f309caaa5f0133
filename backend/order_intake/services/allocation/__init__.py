"""Identifier allocation: named counters and gap-filling record ids."""

from order_intake.services.allocation.guard import AllocationGuard, build_guard
from order_intake.services.allocation.record_id import RecordIdAllocator
from order_intake.services.allocation.sequence import SequenceAllocator, format_inventtrans_id

__all__ = [
    "AllocationGuard",
    "RecordIdAllocator",
    "SequenceAllocator",
    "build_guard",
    "format_inventtrans_id",
]
