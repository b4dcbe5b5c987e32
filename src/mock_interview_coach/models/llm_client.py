"""
Text generator abstraction.

Provides a unified interface for the external text generator and an
Ollama-backed implementation that talks to the Ollama chat API over HTTP.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

import httpx

from mock_interview_coach.config import get_settings
from mock_interview_coach.errors import (
    UpstreamError,
    UpstreamRateLimited,
    UpstreamTimeout,
    is_rate_limit_error,
)
from mock_interview_coach.orchestrator.schemas import Message, MessageRole

logger = logging.getLogger(__name__)

# Chat roles understood by the Ollama API, one entry per MessageRole.
_CHAT_ROLES: dict[MessageRole, str] = {
    MessageRole.HUMAN: "user",
    MessageRole.AI: "assistant",
}


class TextGenerator(ABC):
    """Abstract base class for text generators."""

    @abstractmethod
    async def generate(
        self,
        system_instruction: str,
        history: Sequence[Message],
        user_input: str,
    ) -> str:
        """
        Generate free-form text.

        Args:
            system_instruction: Instruction placed before the conversation.
            history: Conversation so far, oldest first.
            user_input: Final user turn.

        Returns:
            Generated text. The output format is not guaranteed.
        """
        ...

    async def close(self) -> None:
        """Release any held resources."""
        return None


class OllamaTextGenerator(TextGenerator):
    """
    Ollama-based text generator.

    Sends the instruction, history and user input to the ``/api/chat``
    endpoint of an Ollama server and returns the assistant message.
    """

    def __init__(
        self,
        model: str | None = None,
        base_url: str | None = None,
        temperature: float | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the Ollama text generator.

        Args:
            model: Model name (uses config if not provided).
            base_url: Ollama server URL (uses config if not provided).
            temperature: Sampling temperature (uses config if not provided).
            timeout: HTTP timeout in seconds (uses config if not provided).
            client: Pre-built HTTP client, mainly for tests.
        """
        settings = get_settings()
        self._model = model or settings.llm_model_name
        self._base_url = base_url or settings.llm_base_url
        self._temperature = settings.llm_temperature if temperature is None else temperature
        self._timeout = timeout or settings.llm_timeout
        self._client = client

        logger.info(f"Initialized Ollama text generator with model: {self._model}")

    @property
    def model(self) -> str:
        """Get the model name."""
        return self._model

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _build_messages(
        self,
        system_instruction: str,
        history: Sequence[Message],
        user_input: str,
    ) -> list[dict[str, str]]:
        """Build the Ollama chat payload messages."""
        messages = [{"role": "system", "content": system_instruction}]
        messages.extend({"role": _CHAT_ROLES[msg.role], "content": msg.content} for msg in history)
        messages.append({"role": "user", "content": user_input})
        return messages

    async def generate(
        self,
        system_instruction: str,
        history: Sequence[Message],
        user_input: str,
    ) -> str:
        payload: dict[str, Any] = {
            "model": self._model,
            "messages": self._build_messages(system_instruction, history, user_input),
            "stream": False,
            "options": {"temperature": self._temperature},
        }

        client = await self._get_client()
        try:
            response = await client.post("/api/chat", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            detail = e.response.text[:200]
            if status == 429:
                raise UpstreamRateLimited(f"Text generator rate limited (429): {detail}") from e
            raise UpstreamError(f"Text generator returned HTTP {status}: {detail}") from e
        except httpx.TimeoutException as e:
            raise UpstreamTimeout(f"Text generator timed out after {self._timeout} seconds") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Text generator request failed: {e}") from e

        try:
            content = response.json()["message"]["content"]
        except (ValueError, KeyError, TypeError) as e:
            raise UpstreamError("Text generator returned an unexpected payload") from e

        logger.debug(f"Text generator response length: {len(content)} chars")
        return content.strip()


async def invoke_generator(
    generator: TextGenerator,
    system_instruction: str,
    history: Sequence[Message],
    user_input: str,
    timeout: float,
) -> str:
    """
    Call a text generator with a hard timeout and normalized errors.

    Args:
        generator: Generator to call.
        system_instruction: Instruction placed before the conversation.
        history: Conversation so far.
        user_input: Final user turn.
        timeout: Seconds before the call is abandoned.

    Returns:
        Generated text.

    Raises:
        UpstreamTimeout: If the call exceeded ``timeout``.
        UpstreamRateLimited: If the failure text carries a 429.
        UpstreamError: For any other generator failure.
    """
    try:
        return await asyncio.wait_for(
            generator.generate(system_instruction, list(history), user_input),
            timeout=timeout,
        )
    except asyncio.TimeoutError as e:
        raise UpstreamTimeout(f"Text generator timed out after {timeout} seconds") from e
    except UpstreamError:
        raise
    except Exception as e:
        if is_rate_limit_error(e):
            raise UpstreamRateLimited(str(e)) from e
        raise UpstreamError(f"Text generator failed: {e}") from e
