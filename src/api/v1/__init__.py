"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.groups import router as groups_router
from api.v1.routes.join_requests import router as join_requests_router
from api.v1.routes.messages import router as messages_router
from api.v1.routes.users import router as users_router

router = APIRouter()
router.include_router(groups_router)
router.include_router(join_requests_router)
router.include_router(messages_router)
router.include_router(users_router)
