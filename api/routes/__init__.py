"""
API route handlers.
"""

from api.routes.compose import router as compose_router
from api.routes.instructions import router as instructions_router

__all__ = ["compose_router", "instructions_router"]
