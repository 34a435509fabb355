"""Provider-agnostic chat interface used by the writing generator"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class LLMProviderError(RuntimeError):
    """Transport or protocol failure talking to a model backend"""


class LLMMessage(BaseModel):
    """One chat turn"""
    role: str = Field(..., description="system, user or assistant")
    content: str


class LLMResponse(BaseModel):
    """Completion returned by a backend"""
    content: str
    model: str
    usage: Optional[Dict[str, Any]] = Field(default=None, description="Token counts, when reported")
    metadata: Optional[Dict[str, Any]] = None


class LLMProvider(ABC):
    """A chat-completion backend

    Implementations raise LLMProviderError for transport failures; the writing
    generator turns those into error responses.
    """

    @abstractmethod
    async def generate(
        self,
        messages: List[LLMMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """Complete a chat

        Raises:
            LLMProviderError: If the backend call fails
        """
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        pass

    async def close(self):
        """Release any held connections"""
        pass
