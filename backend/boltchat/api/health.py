"""Health check endpoint for infrastructure monitoring."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends

from boltchat.config import Settings, get_settings
from boltchat.credentials.store import CredentialStore
from boltchat.dependencies import get_credential_store, get_session_directory
from boltchat.memory.directory import SessionDirectory

logger = logging.getLogger(__name__)
router = APIRouter()


async def _check_session_store(directory: SessionDirectory) -> dict[str, Any]:
    """Ping the session store and return status."""
    if await directory.store.ping():
        return {"status": "healthy"}
    logger.warning("Session store health check failed")
    return {"status": "unhealthy"}


def _check_completion(store: CredentialStore, settings: Settings) -> dict[str, Any]:
    """Report whether completions can be requested at all."""
    return {
        "status": "healthy" if store.present else "unconfigured",
        "model": settings.openai_model,
    }


@router.get("")
async def health_check(
    settings: Settings = Depends(get_settings),
    directory: SessionDirectory = Depends(get_session_directory),
    credentials: CredentialStore = Depends(get_credential_store),
) -> dict[str, Any]:
    """Return aggregate health of backend services."""
    services = {
        "session_store": await _check_session_store(directory),
        "completion": _check_completion(credentials, settings),
    }

    overall = (
        "healthy"
        if all(s["status"] == "healthy" for s in services.values())
        else "degraded"
    )

    return {
        "status": overall,
        "services": services,
    }
