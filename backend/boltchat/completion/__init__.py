"""Completion module - OpenAI-compatible chat completions via REST."""

from .client import FALLBACK_REPLY, CompletionClient
from .errors import (
    CompletionError,
    CredentialMissingError,
    ErrorKind,
    RemoteRejectedError,
    UnreachableError,
)

__all__ = [
    "FALLBACK_REPLY",
    "CompletionClient",
    "CompletionError",
    "CredentialMissingError",
    "ErrorKind",
    "RemoteRejectedError",
    "UnreachableError",
]
