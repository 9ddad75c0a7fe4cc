"""In-process credential store for the completion API key.

The store is passed explicitly to whoever needs the key (the completion
client and the settings routes). Readers take an immutable
:class:`Credential` snapshot, so a key edited in settings only affects
requests issued after the edit.
"""

from __future__ import annotations

import logging

from boltchat.models.credentials import Credential, CredentialStatus

logger = logging.getLogger(__name__)

MASK_CHAR = "•"
MASK_LENGTH = 36


class InvalidCredentialError(ValueError):
    """Raised when a submitted credential is empty or still masked."""


def mask(value: str) -> str:
    """Return a display-safe rendering of ``value``."""
    if not value:
        return ""
    return MASK_CHAR * MASK_LENGTH


def preview(value: str) -> str:
    """Short prefix used in log lines, e.g. ``sk-abcd...``."""
    return f"{value[:7]}..." if value else "<unset>"


class CredentialStore:
    """Holds the API credential for the running process."""

    def __init__(self, initial: str = "") -> None:
        self._credential = Credential(value=initial.strip())
        if self._credential.present:
            logger.info("API credential loaded from configuration")
        else:
            logger.warning(
                "No API credential configured; chat replies will ask the user to add one"
            )

    def get(self) -> Credential:
        return self._credential

    def set(self, value: str) -> None:
        value = value.strip()
        if not value or MASK_CHAR in value:
            raise InvalidCredentialError("Please enter a valid API key.")
        self._credential = Credential(value=value)
        logger.info("API credential updated (%s)", preview(value))

    def clear(self) -> None:
        self._credential = Credential()
        logger.info("API credential removed")

    @property
    def present(self) -> bool:
        return self._credential.present

    def status(self) -> CredentialStatus:
        credential = self._credential
        return CredentialStatus(present=credential.present, masked=mask(credential.value))
