"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. The tenant guard is applied per-route (through
Depends(require_institute)) because POST /institutes must stay reachable
for principals who don't have an institute yet.
"""

from fastapi import APIRouter, Depends

from eduflow.api.auth import router as auth_router
from eduflow.api.courses import router as courses_router
from eduflow.api.health import router as health_router
from eduflow.api.institutes import router as institutes_router
from eduflow.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api/v1")

# Open routes
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes: valid access token required
api_router.include_router(
    institutes_router, tags=["institutes", "students", "teachers"], dependencies=_auth
)
api_router.include_router(courses_router, tags=["courses"], dependencies=_auth)
