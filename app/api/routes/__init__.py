"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from app.api.routes.auth_routes import router as auth_router
from app.api.routes.premium_routes import router as premium_router
from app.api.routes.payment_routes import router as payment_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(premium_router)
api_router.include_router(payment_router)
