"""Database package with engine management and the storage gateway."""

from order_intake.db.gateway import StorageGateway
from order_intake.db.session import dispose_engine, get_engine, get_gateway

__all__ = [
    "StorageGateway",
    "dispose_engine",
    "get_engine",
    "get_gateway",
]
