"""Central API router that aggregates all route modules."""

from fastapi import APIRouter

from boltchat.api.chat import router as chat_router
from boltchat.api.health import router as health_router
from boltchat.api.sessions import router as sessions_router
from boltchat.api.settings import router as settings_router

api_router = APIRouter()

api_router.include_router(health_router, prefix="/health", tags=["health"])
api_router.include_router(chat_router, prefix="/chat", tags=["chat"])
api_router.include_router(sessions_router, prefix="/sessions", tags=["sessions"])
api_router.include_router(settings_router, prefix="/settings", tags=["settings"])
