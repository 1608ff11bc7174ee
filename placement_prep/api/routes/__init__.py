"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from placement_prep.api.routes.auth_routes import router as auth_router
from placement_prep.api.routes.user_routes import router as user_router
from placement_prep.api.routes.content_routes import router as content_router
from placement_prep.api.routes.task_routes import router as task_router
from placement_prep.api.routes.experience_routes import router as experience_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(user_router)
api_router.include_router(content_router)
api_router.include_router(task_router)
api_router.include_router(experience_router)
