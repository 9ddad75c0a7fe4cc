"""Credential settings endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from boltchat.credentials.store import CredentialStore, InvalidCredentialError
from boltchat.dependencies import get_credential_store
from boltchat.models.credentials import CredentialStatus, CredentialUpdate

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/credential", response_model=CredentialStatus)
async def get_credential(
    store: CredentialStore = Depends(get_credential_store),
) -> CredentialStatus:
    """Return whether an API key is set, masked."""
    return store.status()


@router.put("/credential", response_model=CredentialStatus)
async def set_credential(
    body: CredentialUpdate,
    store: CredentialStore = Depends(get_credential_store),
) -> CredentialStatus:
    """Store an API key for this process."""
    try:
        store.set(body.value)
    except InvalidCredentialError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return store.status()


@router.delete("/credential", response_model=CredentialStatus)
async def clear_credential(
    store: CredentialStore = Depends(get_credential_store),
) -> CredentialStatus:
    """Remove the API key for this process."""
    store.clear()
    return store.status()
