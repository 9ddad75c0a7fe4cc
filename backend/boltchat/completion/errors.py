"""Failure taxonomy for chat completions."""

from enum import Enum


class ErrorKind(str, Enum):
    UNREACHABLE = "unreachable"
    REMOTE_REJECTED = "remote_rejected"
    CREDENTIAL_MISSING = "credential_missing"
    INVALID_INPUT = "invalid_input"


class CompletionError(Exception):
    """Base class for failures the conversation engine reports inline.

    ``user_message`` is the human-readable description shown to the user.
    """

    kind: ErrorKind

    def __init__(self, user_message: str) -> None:
        super().__init__(user_message)
        self.user_message = user_message


class UnreachableError(CompletionError):
    """The endpoint could not be reached (connection error or timeout)."""

    kind = ErrorKind.UNREACHABLE


class RemoteRejectedError(CompletionError):
    """The endpoint answered with a non-success status."""

    kind = ErrorKind.REMOTE_REJECTED

    def __init__(self, user_message: str, status_code: int) -> None:
        super().__init__(user_message)
        self.status_code = status_code


class CredentialMissingError(CompletionError):
    """No API credential was available when the request was built."""

    kind = ErrorKind.CREDENTIAL_MISSING
