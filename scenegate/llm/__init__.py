"""LLM provider interfaces and the writing generator"""

from .provider import LLMProvider, LLMMessage, LLMResponse, LLMProviderError
from .ollama_client import OllamaClient
from .writing_generator import WritingGenerator, LLMWritingGenerator

__all__ = [
    "LLMProvider",
    "LLMMessage",
    "LLMResponse",
    "LLMProviderError",
    "OllamaClient",
    "WritingGenerator",
    "LLMWritingGenerator",
]
