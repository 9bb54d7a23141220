"""
Completion client wrapper around the OpenAI chat-completions API.
The rest of the service only sees ``complete(messages) -> text``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from openai import APIError, AsyncOpenAI, OpenAIError

from src.core.config import OpenAISettings, settings
from src.core.constants import MessageRole
from src.core.exceptions import ConfigurationError, DownstreamError
from src.core.logging import get_logger
from src.llm.parsing import parse_completion_json

logger = get_logger(__name__)

NOT_CONFIGURED_MESSAGE = (
    "AI is not configured on the server. Please set the OPENAI_API_KEY environment variable."
)


@dataclass
class Message:
    """A message in the conversation."""

    role: MessageRole
    content: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to API format."""
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(MessageRole.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(MessageRole.USER, content)


class LLMClient:
    """
    Thin async wrapper over ``AsyncOpenAI``.

    The SDK client is created on first use so the application starts (and
    non-AI endpoints keep working) without an API key.
    """

    def __init__(
        self,
        config: Optional[OpenAISettings] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self.config = config or settings.openai
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or self.config.is_configured

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.config.is_configured:
                raise ConfigurationError(NOT_CONFIGURED_MESSAGE, missing=["OPENAI_API_KEY"])
            self._client = AsyncOpenAI(
                api_key=self.config.api_key,
                timeout=self.config.timeout,
                max_retries=self.config.max_retries,
            )
        return self._client

    async def complete(
        self,
        messages: Sequence[Message],
        json_mode: bool = False,
        temperature: Optional[float] = None,
    ) -> str:
        """
        Run one chat completion and return the text of the first choice.

        Raises:
            ConfigurationError: no API key configured
            DownstreamError: the API call failed or returned no content
        """
        client = self._get_client()
        kwargs: dict[str, Any] = {
            "model": self.config.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": self.config.temperature if temperature is None else temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        logger.debug("Calling completion API", model=self.config.model, json_mode=json_mode)
        try:
            response = await client.chat.completions.create(**kwargs)
        except APIError as e:
            status = getattr(e, "status_code", None)
            logger.error("Completion API error", status=status, error=str(e))
            raise DownstreamError("llm", str(e), status=status) from e
        except OpenAIError as e:
            logger.error("Completion client error", error=str(e))
            raise DownstreamError("llm", str(e)) from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise DownstreamError("llm", "Empty response from model.")

        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.info(
                "Completion finished",
                model=self.config.model,
                prompt_tokens=getattr(usage, "prompt_tokens", None),
                completion_tokens=getattr(usage, "completion_tokens", None),
            )
        return content

    async def complete_json(
        self,
        messages: Sequence[Message],
        temperature: Optional[float] = None,
    ) -> dict[str, Any]:
        """Complete in JSON mode and parse the result; raises LlmParseError."""
        raw = await self.complete(messages, json_mode=True, temperature=temperature)
        return parse_completion_json(raw)
