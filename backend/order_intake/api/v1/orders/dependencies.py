"""FastAPI dependencies for service injection."""

from typing import Annotated

from fastapi import Depends

from order_intake.config import Settings, get_settings
from order_intake.db import StorageGateway, get_gateway
from order_intake.services.allocation import AllocationGuard, build_guard
from order_intake.services.orders.order_write_service import OrderWriteService

# One guard per strategy for the whole process, so mutex locks are shared across requests
_guards: dict[str, AllocationGuard] = {}


def get_allocation_guard(
    config: Annotated[Settings, Depends(get_settings)],
) -> AllocationGuard:
    """Get the process-wide allocation guard for the configured strategy."""
    strategy = config.allocation_strategy
    if strategy not in _guards:
        _guards[strategy] = build_guard(strategy, lock_ttl_ms=config.allocation_lock_ttl_ms)
    return _guards[strategy]


def get_order_write_service(
    gateway: Annotated[StorageGateway, Depends(get_gateway)],
    config: Annotated[Settings, Depends(get_settings)],
    guard: Annotated[AllocationGuard, Depends(get_allocation_guard)],
) -> OrderWriteService:
    """Get an OrderWriteService instance for the current request."""
    return OrderWriteService(gateway, config=config, guard=guard)


# Type aliases for cleaner endpoint signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]
OrderWriteServiceDep = Annotated[OrderWriteService, Depends(get_order_write_service)]
