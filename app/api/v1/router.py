"""
API v1 router setup
Organized into: public (optional token) and dashboard (token required by the services)
"""
from fastapi import APIRouter

from app.api.v1.dashboard import appointments, appointment_types, availability, notifications
from app.api.v1.public import organizations

api_v1_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES (No authentication required)
# ============================================================================
api_v1_router.include_router(
    organizations.router,
    prefix="/public",
    tags=["Public"]
)

# ============================================================================
# DASHBOARD ROUTES (JWT authentication required)
# ============================================================================
api_v1_router.include_router(
    availability.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    appointment_types.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    appointments.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    notifications.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """
    API information and available endpoints.
    """
    return {
        "version": "1.0",
        "authentication": {
            "public": "No authentication required, a token widens the day view",
            "dashboard": "JWT Bearer token required (user login)",
        }
    }
