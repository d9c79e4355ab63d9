"""
Factory for creating language model providers.
"""

from src.config import EmbedderConfig, LLMConfig
from src.core.llm.base import LanguageModel
from src.core.llm.ollama import OllamaLanguageModel
from src.core.llm.openai import OpenAILanguageModel

OLLAMA_DEFAULT_HOST = "http://localhost:11434"


class LanguageModelFactory:
    """Factory for creating language model providers from configuration."""

    @staticmethod
    def create(config: LLMConfig, embedder: EmbedderConfig | None = None) -> LanguageModel:
        """
        Create language model provider from configuration.

        Args:
            config: Chat model configuration
            embedder: Embedding model configuration (defaults if omitted)

        Returns:
            Language model instance

        Raises:
            ValueError: If provider is not supported
        """
        embedder = embedder or EmbedderConfig()

        if config.provider == "ollama":
            return OllamaLanguageModel(
                host=config.base_url or OLLAMA_DEFAULT_HOST,
                chat_model=config.model,
                embedding_model=embedder.model,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
                timeout=config.timeout,
                retry_attempts=config.retry_attempts,
                retry_delay=config.retry_delay,
            )
        elif config.provider == "openai":
            if not config.api_key:
                raise ValueError("OpenAI API key is required")
            return OpenAILanguageModel(
                api_key=config.api_key,
                chat_model=config.model,
                embedding_model=embedder.model,
                base_url=config.base_url,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
                timeout=config.timeout,
                retry_attempts=config.retry_attempts,
                retry_delay=config.retry_delay,
            )
        else:
            raise ValueError(f"Unsupported LLM provider: {config.provider}")
