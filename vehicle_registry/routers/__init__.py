"""
API routers for vehicle registry endpoints.
"""

from . import health_router, vehicle_router

__all__ = ["vehicle_router", "health_router"]
