"""FastAPI application entry point with lifespan management."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from boltchat.api.chat import websocket_chat
from boltchat.api.router import api_router
from boltchat.config import settings
from boltchat.dependencies import get_completion_client, get_engine, get_session_directory

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle."""
    logger.info("Starting Bolt Assistant backend...")

    # Session storage (in-memory or MongoDB)
    directory = get_session_directory()
    await directory.initialize()
    logger.info("Session directory initialized (%s backend)", settings.session_backend)

    # HTTP client for the completion endpoint
    completion_client = get_completion_client()
    await completion_client.initialize()

    # Build the engine eagerly so it is wired to the directory before any request
    get_engine()

    yield

    # Cleanup
    await completion_client.close()
    await directory.close()
    logger.info("Bolt Assistant backend shut down cleanly")


app = FastAPI(
    title="Bolt Assistant API",
    description="Conversational coding assistant backed by a chat-completion endpoint",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.frontend_url,
        "http://localhost:8081",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount API routes
app.include_router(api_router, prefix="/api")

# Mount WebSocket endpoint (outside /api prefix to match frontend expectations)
app.websocket("/ws/chat")(websocket_chat)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
