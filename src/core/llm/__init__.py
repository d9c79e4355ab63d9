"""
Language model abstraction layer.

Supported providers:
- Ollama (native SDK)
- OpenAI (official SDK)
"""
from src.core.llm.base import LanguageModel
from src.core.llm.ollama import OllamaLanguageModel
from src.core.llm.openai import OpenAILanguageModel

__all__ = [
    "LanguageModel",
    "OllamaLanguageModel",
    "OpenAILanguageModel",
]
