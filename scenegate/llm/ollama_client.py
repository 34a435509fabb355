"""Ollama LLM client implementation"""

import asyncio
import logging
import aiohttp
from typing import List, Optional, Dict, Any

from .provider import LLMProvider, LLMMessage, LLMResponse, LLMProviderError

logger = logging.getLogger(__name__)


class OllamaClient(LLMProvider):
    """Chat completion against a local Ollama server"""

    def __init__(
        self,
        model: str = "llama3.1:8b",
        base_url: str = "http://localhost:11434",
        timeout: int = 300
    ):
        """
        Initialize Ollama client

        Args:
            model: Model name (e.g., "llama3.1:8b")
            base_url: Ollama API base URL
            timeout: Request timeout in seconds
        """
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def close(self):
        """Close the session"""
        if self._session and not self._session.closed:
            await self._session.close()

    def get_model_name(self) -> str:
        return self.model

    def build_payload(
        self,
        messages: List[LLMMessage],
        temperature: float,
        max_tokens: Optional[int],
        options: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Build the /api/chat request body"""
        payload = {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "stream": False,
            "options": {
                "temperature": temperature,
            }
        }
        if max_tokens:
            payload["options"]["num_predict"] = max_tokens
        if options:
            payload["options"].update(options)
        return payload

    async def generate(
        self,
        messages: List[LLMMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate a response from Ollama"""
        session = await self._get_session()
        payload = self.build_payload(messages, temperature, max_tokens, kwargs.get("options"))

        try:
            async with session.post(f"{self.base_url}/api/chat", json=payload) as response:
                response.raise_for_status()
                data = await response.json()
        except aiohttp.ClientError as e:
            raise LLMProviderError(f"Ollama API error: {str(e)}") from e
        except asyncio.TimeoutError as e:
            raise LLMProviderError(f"Ollama request timed out after {self.timeout}s") from e

        prompt_tokens = data.get("prompt_eval_count", 0)
        completion_tokens = data.get("eval_count", 0)
        logger.debug(f"Ollama {self.model}: {prompt_tokens} prompt / {completion_tokens} completion tokens")

        return LLMResponse(
            content=data.get("message", {}).get("content", ""),
            model=self.model,
            usage={
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": prompt_tokens + completion_tokens,
            },
            metadata={
                "done": data.get("done", True),
                "total_duration": data.get("total_duration", 0),
            }
        )
