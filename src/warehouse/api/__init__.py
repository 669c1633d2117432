"""Warehouse domain API package."""

from warehouse.api.errors import register_error_handlers
from warehouse.api.routes import operation_router, package_router

__all__ = ["operation_router", "package_router", "register_error_handlers"]
