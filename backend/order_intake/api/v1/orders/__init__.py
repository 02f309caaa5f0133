"""Orders API package."""

from order_intake.api.v1.orders.order_routes import router

__all__ = ["router"]
