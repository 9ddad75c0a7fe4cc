"""OpenAI-compatible chat completion client over httpx.

Each call is stateless from the endpoint's point of view: the request
carries the persona prompt and the latest user message only, never the
earlier turns of the session.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from boltchat.completion.errors import (
    CredentialMissingError,
    RemoteRejectedError,
    UnreachableError,
)
from boltchat.config import Settings
from boltchat.credentials.store import CredentialStore, preview

logger = logging.getLogger(__name__)

COMPLETIONS_PATH = "/chat/completions"
FALLBACK_REPLY = "Sorry, I couldn't generate a response."


def build_payload(
    model: str, system_prompt: str, user_text: str, max_tokens: int
) -> dict[str, Any]:
    """Request body with exactly one system entry and one user entry."""
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_text},
        ],
        "max_tokens": max_tokens,
    }


def parse_reply(data: Any) -> str:
    """Pull ``choices[0].message.content`` out of a success body.

    Anything missing, empty or oddly shaped yields :data:`FALLBACK_REPLY`.
    """
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return FALLBACK_REPLY
    if not isinstance(content, str) or not content.strip():
        return FALLBACK_REPLY
    return content.strip()


def parse_error(response: httpx.Response) -> str:
    """Provider-supplied ``error.message``, or a generic status line."""
    try:
        message = response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        message = None
    if isinstance(message, str) and message.strip():
        return message.strip()
    return f"Failed to fetch response from the AI service (status {response.status_code})"


class CompletionClient:
    """Sends whole-response chat completions to the configured endpoint."""

    def __init__(
        self,
        credentials: CredentialStore,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._credentials = credentials
        self._base_url = settings.openai_base_url.rstrip("/")
        self._model = settings.openai_model
        self._max_tokens = settings.max_tokens
        self._timeout = settings.request_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def initialize(self) -> None:
        """Create the HTTP client."""
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )
        logger.info(
            "CompletionClient initialized (model=%s, max_tokens=%d, timeout=%.0fs)",
            self._model,
            self._max_tokens,
            self._timeout,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
        logger.info("CompletionClient closed")

    async def complete(self, system_prompt: str, user_text: str) -> str:
        """Return the assistant's reply to ``user_text``.

        Raises:
            CredentialMissingError: no credential at call time.
            UnreachableError: connection failure or timeout.
            RemoteRejectedError: non-success status from the endpoint.
        """
        if not self._client:
            raise RuntimeError("CompletionClient not initialized. Call initialize() first.")

        credential = self._credentials.get()
        if not credential.present:
            raise CredentialMissingError(
                "No API key is configured. Add one in Settings."
            )

        payload = build_payload(self._model, system_prompt, user_text, self._max_tokens)
        logger.debug(
            "Requesting completion with key %s (%d chars of user text)",
            preview(credential.value),
            len(user_text),
        )

        try:
            response = await self._client.post(
                COMPLETIONS_PATH,
                json=payload,
                headers={"Authorization": f"Bearer {credential.value}"},
            )
        except httpx.TimeoutException as exc:
            logger.error("Completion request timed out: %r", exc)
            raise UnreachableError(
                f"The AI service did not respond within {self._timeout:.0f} seconds."
            ) from exc
        except httpx.TransportError as exc:
            logger.error("Completion request failed: %r", exc)
            raise UnreachableError("Could not connect to the AI service.") from exc

        if not response.is_success:
            message = parse_error(response)
            logger.error(
                "Completion API error %d: %s", response.status_code, response.text[:200]
            )
            raise RemoteRejectedError(message, response.status_code)

        try:
            data = response.json()
        except ValueError:
            logger.warning("Completion API returned a non-JSON body")
            return FALLBACK_REPLY

        reply = parse_reply(data)
        logger.info("Completion received (%d chars)", len(reply))
        return reply
