"""Dispatch domain API package."""

from dispatch.api.errors import register_error_handlers
from dispatch.api.routes import admin_router, driver_router, order_router, seller_router

__all__ = ["admin_router", "order_router", "seller_router", "driver_router", "register_error_handlers"]
