"""
OpenAI language model provider using official SDK.

Also works against OpenAI-compatible servers through base_url.
"""

from collections.abc import AsyncIterator

import openai
from openai import AsyncOpenAI

from src.core.llm.base import LanguageModel
from src.models.chat import ChatMessage
from src.utils.exceptions import LanguageServiceError, ValidationError
from src.utils.logger import get_logger

logger = get_logger(__name__)


class OpenAILanguageModel(LanguageModel):
    """
    OpenAI provider for chat, embeddings, summaries and extraction.
    """

    retryable_errors = (
        openai.APIConnectionError,
        openai.APITimeoutError,
        openai.RateLimitError,
        openai.InternalServerError,
    )

    def __init__(
        self,
        api_key: str,
        chat_model: str = "gpt-4o-mini",
        embedding_model: str = "text-embedding-3-small",
        base_url: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        timeout: float = 120.0,
        retry_attempts: int = 3,
        retry_delay: float = 0.5,
    ):
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            chat_model: Model for chat, summaries and extraction
            embedding_model: Model for embeddings
            base_url: Optional custom base URL
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            timeout: Request timeout in seconds
            retry_attempts: Retries after the first failed attempt
            retry_delay: Base delay for exponential backoff in seconds
        """
        self.chat_model = chat_model
        self.embedding_model = embedding_model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay

        # Retries are handled by _with_retry
        self.client = AsyncOpenAI(
            api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0
        )

    async def generate_embedding(self, text: str) -> list[float]:
        if not text or not text.strip():
            raise ValidationError("Text cannot be empty")

        async def _embed() -> list[float]:
            response = await self.client.embeddings.create(
                model=self.embedding_model, input=text
            )
            if not response.data:
                raise LanguageServiceError("OpenAI returned no embedding data")
            return list(response.data[0].embedding)

        return await self._with_retry(_embed, "openai_embedding")

    async def generate_chat_completion(self, messages: list[ChatMessage]) -> str:
        if not messages:
            raise ValidationError("Messages cannot be empty")

        async def _chat() -> str:
            response = await self.client.chat.completions.create(
                model=self.chat_model,
                messages=[m.model_dump() for m in messages],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            content = response.choices[0].message.content
            if not content:
                raise LanguageServiceError("OpenAI returned empty content")
            return content

        return await self._with_retry(_chat, "openai_chat_completion")

    async def stream_chat_completion(self, messages: list[ChatMessage]) -> AsyncIterator[str]:
        if not messages:
            raise ValidationError("Messages cannot be empty")

        async def _open():
            return await self.client.chat.completions.create(
                model=self.chat_model,
                messages=[m.model_dump() for m in messages],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                stream=True,
            )

        stream = await self._with_retry(_open, "openai_stream_chat")

        try:
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    yield delta
        except Exception as e:
            logger.error(
                f"OpenAI stream interrupted: {e}",
                extra={"model": self.chat_model, "error": str(e)},
            )
            raise LanguageServiceError(f"OpenAI stream interrupted: {e}") from e

    async def list_models(self) -> list[str]:
        async def _list() -> list[str]:
            page = await self.client.models.list()
            return [model.id for model in page.data]

        return await self._with_retry(_list, "openai_list_models")

    async def is_healthy(self) -> bool:
        try:
            await self.list_models()
            return True
        except Exception as e:
            logger.warning(f"OpenAI health check failed: {e}")
            return False

    async def close(self) -> None:
        """Close OpenAI client."""
        await self.client.close()
