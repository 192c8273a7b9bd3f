import logging
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from ...errors import CompletionError, EmptyCompletionError
from ..base import LLMProvider
from ..models import ChatMessage, LLMResponse

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """OpenAI LLM provider implementation.

    Hidden design decisions:
    - OpenAI API client initialization
    - Message format conversion
    - Error mapping (transport errors vs. empty responses)
    - Authentication mechanism
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-3.5-turbo",
        base_url: str | None = None,
        timeout: float | None = None,
        **client_kwargs: Any
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: Default chat model
            base_url: Optional custom API base URL
            timeout: Optional request timeout in seconds
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        # Retries are disabled: a failed turn is reported once
        client_kwargs.setdefault("max_retries", 0)
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a chat completion using OpenAI.

        Args:
            messages: Conversation history
            model: Model to use (overrides default)
            **kwargs: Additional OpenAI-specific parameters

        Returns:
            LLMResponse with the first choice's content
        """
        model_to_use = model or self._model

        openai_messages = [
            {"role": msg.role.value, "content": msg.content}
            for msg in messages
        ]

        logger.debug("Requesting completion from %s with %d messages", model_to_use, len(openai_messages))
        try:
            completion = await self._client.chat.completions.create(
                model=model_to_use,
                messages=openai_messages,
                **kwargs
            )
        except OpenAIError as e:
            raise CompletionError(f"failed to create completion: {e}") from e

        if not completion.choices:
            raise EmptyCompletionError("no response from OpenAI")

        usage = None
        if completion.usage:
            usage = {
                "prompt_tokens": completion.usage.prompt_tokens,
                "completion_tokens": completion.usage.completion_tokens,
                "total_tokens": completion.usage.total_tokens
            }

        return LLMResponse(
            content=completion.choices[0].message.content or "",
            model=completion.model or model_to_use,
            usage=usage
        )

    async def close(self) -> None:
        """Close the OpenAI client.

        Note: Uses the OpenAI SDK's async context manager for proper cleanup.
        See: https://github.com/openai/openai-python#async-usage
        """
        await self._client.close()
