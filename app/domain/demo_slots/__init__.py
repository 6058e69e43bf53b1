"""Demo slot domain - Booking, review and notification of hack night demos"""

from .router import admin_router, router

__all__ = ["router", "admin_router"]
