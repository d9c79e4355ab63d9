"""
Abstract base class for language model providers.

A provider supplies embeddings, chat completions (whole and streamed) and
model health. Summaries and relationship extraction are built here on top of
chat completion so every provider shares the same prompts and parsing.
"""

import asyncio
import json
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, TypeVar

from src.models.chat import ChatMessage
from src.models.relationships import RelationshipExtraction
from src.utils.exceptions import LanguageServiceError, ValidationError
from src.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

SUMMARY_SYSTEM_PROMPT = (
    "You are a helpful assistant that creates concise summaries. "
    "Create a summary of the following text in no more than {max_length} characters. "
    "Focus on the key points and main ideas."
)

RELATIONSHIP_SYSTEM_PROMPT = """You are a relationship extraction expert. Analyze the given text and extract relationships between entities.
Return your response as a JSON array of objects, where each object has:
- source: the source entity
- target: the target entity
- type: the relationship type (e.g., 'works_for', 'located_in', 'is_a', 'uses', 'contains')
- confidence: confidence score from 0.0 to 1.0
- context: the sentence or phrase where the relationship was found

Only extract clear, explicit relationships. Be conservative with confidence scores.
Return only valid JSON without any additional text or explanations."""


class LanguageModel(ABC):
    """
    Abstract base for language model providers.

    Responsibilities:
    - Embedding generation
    - Chat completion, whole and streamed
    - Summaries and relationship extraction (shared implementation)
    - Health and model discovery
    """

    retry_attempts: int = 0
    retry_delay: float = 0.5
    retryable_errors: tuple[type[BaseException], ...] = ()

    @abstractmethod
    async def generate_embedding(self, text: str) -> list[float]:
        """
        Generate an embedding vector for text.

        Args:
            text: Text to embed

        Returns:
            Embedding vector

        Raises:
            ValidationError: If text is empty
            LanguageServiceError: If the provider call fails
        """
        pass

    @abstractmethod
    async def generate_chat_completion(self, messages: list[ChatMessage]) -> str:
        """
        Generate a chat completion.

        Args:
            messages: Conversation so far

        Returns:
            Assistant reply text

        Raises:
            ValidationError: If messages is empty
            LanguageServiceError: If the provider call fails
        """
        pass

    @abstractmethod
    def stream_chat_completion(self, messages: list[ChatMessage]) -> AsyncIterator[str]:
        """
        Stream a chat completion as incremental text chunks.

        Args:
            messages: Conversation so far

        Yields:
            Text deltas in generation order

        Raises:
            LanguageServiceError: If the provider call fails
        """
        pass

    @abstractmethod
    async def list_models(self) -> list[str]:
        """
        List model names available from the provider.

        Returns:
            Model names
        """
        pass

    @abstractmethod
    async def is_healthy(self) -> bool:
        """
        Check that the chat and embedding models respond.

        Returns:
            True if the provider is usable; never raises
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        pass

    # ═══════════════════════════════════════════════════════════
    # SHARED OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def generate_summary(self, text: str, max_length: int = 500) -> str:
        """
        Summarize text in at most max_length characters.

        Replies longer than max_length are cut to max_length - 3 characters
        followed by "...".

        Args:
            text: Text to summarize
            max_length: Maximum summary length in characters

        Returns:
            Summary text

        Raises:
            ValidationError: If text is empty or max_length is not positive
            LanguageServiceError: If the provider call fails
        """
        if not text or not text.strip():
            raise ValidationError("Text cannot be empty")
        if max_length <= 0:
            raise ValidationError("Max length must be positive")

        logger.info(
            "Generating summary",
            extra={"text_length": len(text), "max_length": max_length},
        )

        messages = [
            ChatMessage.system(SUMMARY_SYSTEM_PROMPT.format(max_length=max_length)),
            ChatMessage.user(text),
        ]
        summary = (await self.generate_chat_completion(messages)).strip()

        if len(summary) > max_length:
            logger.debug(
                f"Summary truncated from {len(summary)} to {max_length} characters",
            )
            summary = summary[: max(max_length - 3, 0)] + "..."

        return summary

    async def extract_relationships(self, text: str) -> list[RelationshipExtraction]:
        """
        Extract entity relationships from text.

        Malformed model output yields an empty list; individual malformed
        entries are skipped.

        Args:
            text: Text to analyze

        Returns:
            Extracted relationships

        Raises:
            ValidationError: If text is empty
            LanguageServiceError: If the provider call fails
        """
        if not text or not text.strip():
            raise ValidationError("Text cannot be empty")

        logger.info("Extracting relationships", extra={"text_length": len(text)})

        messages = [
            ChatMessage.system(RELATIONSHIP_SYSTEM_PROMPT),
            ChatMessage.user(text),
        ]
        response = await self.generate_chat_completion(messages)
        relationships = self._parse_relationships(response)

        logger.info(f"Extracted {len(relationships)} relationships")
        return relationships

    # ═══════════════════════════════════════════════════════════
    # HELPER METHODS
    # ═══════════════════════════════════════════════════════════

    async def _with_retry(self, operation: Callable[[], Awaitable[T]], operation_name: str) -> T:
        """
        Run a provider call, retrying transient failures with exponential backoff.

        Args:
            operation: Async callable performing the request
            operation_name: Name for logging

        Returns:
            Result of operation

        Raises:
            LanguageServiceError: If all attempts fail or a non-transient error occurs
        """
        attempts = self.retry_attempts + 1
        last_error: BaseException | None = None

        for attempt in range(attempts):
            try:
                return await operation()
            except (ValidationError, LanguageServiceError):
                raise
            except self.retryable_errors as e:
                last_error = e
                if attempt < attempts - 1:
                    delay = self.retry_delay * (2**attempt)
                    logger.warning(
                        f"{operation_name} failed (attempt {attempt + 1}/{attempts}): {e}. "
                        f"Retrying in {delay}s...",
                        extra={
                            "operation": operation_name,
                            "attempt": attempt + 1,
                            "error_type": type(e).__name__,
                        },
                    )
                    await asyncio.sleep(delay)
            except Exception as e:
                logger.error(
                    f"{operation_name} failed: {e}",
                    extra={
                        "operation": operation_name,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    },
                )
                raise LanguageServiceError(
                    f"{operation_name} failed: {e}",
                    context={"operation": operation_name},
                ) from e

        logger.error(
            f"{operation_name} failed after {attempts} attempts",
            extra={"operation": operation_name, "error": str(last_error)},
        )
        raise LanguageServiceError(
            f"{operation_name} failed after {attempts} attempts: {last_error}",
            context={"operation": operation_name, "attempts": attempts},
        ) from last_error

    @staticmethod
    def _extract_json_array(content: str) -> str | None:
        """
        Cut the outermost JSON array out of a reply that may carry extra text.

        Args:
            content: Raw model reply

        Returns:
            JSON array text, or None if there is no bracketed span
        """
        start = content.find("[")
        end = content.rfind("]")
        if start < 0 or end <= start:
            return None
        return content[start : end + 1]

    def _parse_relationships(self, response: str) -> list[RelationshipExtraction]:
        """Parse the model's JSON array reply into relationship extractions."""
        json_text = self._extract_json_array(response)
        if json_text is None:
            logger.warning("Relationship extraction reply contained no JSON array")
            return []

        try:
            items = json.loads(json_text)
        except json.JSONDecodeError as e:
            logger.warning(
                f"Failed to parse relationship extraction reply as JSON: {e}",
                extra={"response": response[:500]},
            )
            return []

        if not isinstance(items, list):
            return []

        relationships = []
        for item in items:
            parsed = self._parse_relationship_item(item)
            if parsed is not None:
                relationships.append(parsed)
        return relationships

    @staticmethod
    def _parse_relationship_item(item: Any) -> RelationshipExtraction | None:
        """Convert one array element; None when required fields are missing or invalid."""
        if not isinstance(item, dict):
            return None

        source = item.get("source")
        target = item.get("target")
        rel_type = item.get("type")
        if not all(isinstance(v, str) and v.strip() for v in (source, target, rel_type)):
            return None

        try:
            confidence = float(item.get("confidence", 0.5))
        except (TypeError, ValueError):
            return None
        confidence = min(max(confidence, 0.0), 1.0)

        context = item.get("context")
        return RelationshipExtraction(
            source=source.strip(),
            target=target.strip(),
            type=rel_type.strip(),
            confidence=confidence,
            context=context if isinstance(context, str) else None,
        )
