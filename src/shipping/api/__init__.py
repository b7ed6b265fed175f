"""Shipping domain API package."""

from shipping.api.errors import register_exception_handlers
from shipping.api.routes import progress_router, shipment_router

__all__ = ["progress_router", "register_exception_handlers", "shipment_router"]
