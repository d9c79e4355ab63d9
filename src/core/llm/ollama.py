"""
Ollama language model provider using native ollama-python SDK.
"""

from collections.abc import AsyncIterator

import ollama

from src.core.llm.base import LanguageModel
from src.models.chat import ChatMessage
from src.utils.exceptions import LanguageServiceError, ValidationError
from src.utils.logger import get_logger

logger = get_logger(__name__)


def _model_matches(available: str, wanted: str) -> bool:
    """Ollama reports untagged models as "<name>:latest"."""
    return available == wanted or available == f"{wanted}:latest"


class OllamaLanguageModel(LanguageModel):
    """
    Ollama provider for chat, embeddings, summaries and extraction.

    Uses one chat model and one embedding model on the same server.
    """

    retryable_errors = (ollama.ResponseError, ConnectionError, TimeoutError)

    def __init__(
        self,
        host: str = "http://localhost:11434",
        chat_model: str = "llama3",
        embedding_model: str = "mxbai-embed-large",
        temperature: float = 0.7,
        max_tokens: int = 2048,
        timeout: float = 120.0,
        retry_attempts: int = 3,
        retry_delay: float = 0.5,
    ):
        """
        Initialize Ollama provider.

        Args:
            host: Ollama server URL
            chat_model: Model for chat, summaries and extraction
            embedding_model: Model for embeddings
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            timeout: Request timeout in seconds
            retry_attempts: Retries after the first failed attempt
            retry_delay: Base delay for exponential backoff in seconds
        """
        self.host = host
        self.chat_model = chat_model
        self.embedding_model = embedding_model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay

        self.client = ollama.AsyncClient(host=host, timeout=timeout)

    def _options(self) -> dict:
        return {"temperature": self.temperature, "num_predict": self.max_tokens}

    async def generate_embedding(self, text: str) -> list[float]:
        if not text or not text.strip():
            raise ValidationError("Text cannot be empty")

        async def _embed() -> list[float]:
            response = await self.client.embeddings(model=self.embedding_model, prompt=text)
            embedding = response["embedding"] if response else None
            if not embedding:
                raise LanguageServiceError(
                    "Ollama returned invalid embedding response",
                    context={"model": self.embedding_model},
                )
            return list(embedding)

        return await self._with_retry(_embed, "ollama_embedding")

    async def generate_chat_completion(self, messages: list[ChatMessage]) -> str:
        if not messages:
            raise ValidationError("Messages cannot be empty")

        async def _chat() -> str:
            response = await self.client.chat(
                model=self.chat_model,
                messages=[m.model_dump() for m in messages],
                options=self._options(),
            )
            return response["message"]["content"]

        return await self._with_retry(_chat, "ollama_chat_completion")

    async def stream_chat_completion(self, messages: list[ChatMessage]) -> AsyncIterator[str]:
        """
        Stream chat completion deltas from Ollama.

        The stream is opened with retries; once text has been yielded a
        failure ends the stream with LanguageServiceError.
        """
        if not messages:
            raise ValidationError("Messages cannot be empty")

        async def _open():
            return await self.client.chat(
                model=self.chat_model,
                messages=[m.model_dump() for m in messages],
                options=self._options(),
                stream=True,
            )

        stream = await self._with_retry(_open, "ollama_stream_chat")

        try:
            async for part in stream:
                content = part["message"]["content"]
                if content:
                    yield content
        except Exception as e:
            logger.error(
                f"Ollama stream interrupted: {e}",
                extra={"model": self.chat_model, "error": str(e)},
            )
            raise LanguageServiceError(f"Ollama stream interrupted: {e}") from e

    async def list_models(self) -> list[str]:
        async def _list() -> list[str]:
            response = await self.client.list()
            names = []
            for model in response["models"]:
                name = model.get("model") or model.get("name")
                if name:
                    names.append(name)
            return names

        return await self._with_retry(_list, "ollama_list_models")

    async def is_healthy(self) -> bool:
        try:
            available = await self.list_models()
        except Exception as e:
            logger.warning(f"Ollama health check failed: {e}", extra={"host": self.host})
            return False

        chat_ok = any(_model_matches(name, self.chat_model) for name in available)
        embed_ok = any(_model_matches(name, self.embedding_model) for name in available)
        if not (chat_ok and embed_ok):
            logger.warning(
                "Ollama is reachable but required models are missing",
                extra={"chat_model": chat_ok, "embedding_model": embed_ok},
            )
        return chat_ok and embed_ok

    async def close(self) -> None:
        """Close client (Ollama SDK handles cleanup internally)."""
        pass
