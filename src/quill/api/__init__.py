"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Unlike a fully private API, reads here are public, so auth
can't be applied at the include_router level. Each write handler takes
Depends(get_current_user) itself; everything else is open.
"""

from fastapi import APIRouter

from quill.api.articles import router as articles_router
from quill.api.auth import router as auth_router
from quill.api.health import router as health_router
from quill.api.tags import router as tags_router
from quill.api.users import router as users_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(articles_router, tags=["articles"])
api_router.include_router(tags_router, tags=["tags"])
api_router.include_router(users_router, tags=["users", "credentials"])
