"""
API v1 package for the Prompt Release Service.

This package contains all the API routes and endpoints for version 1 of the API.
"""

from fastapi import APIRouter

from . import errors, deps

# Import API routers
from .api import router as prompts_router
from .publications import router as publications_router
from .publications import environments_router

# Create the main API router
router = APIRouter()

# Include all routers
router.include_router(prompts_router, prefix="/prompts")
router.include_router(publications_router, prefix="/prompts")
router.include_router(environments_router, prefix="/environments")

__all__ = ["router", "errors", "deps"]
