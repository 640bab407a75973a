"""
Groq LLM Service
Single chat-completion call that returns the model's JSON text.
"""

import asyncio
import logging
from typing import Optional

from groq import AsyncGroq

from app.workers.base import ModelInvocationError

logger = logging.getLogger(__name__)


class GroqLLMService:
    """Model invocation adapter for content plans."""
    
    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        timeout: Optional[float] = 120.0,
    ):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client: Optional[AsyncGroq] = None
    
    @property
    def client(self) -> AsyncGroq:
        """Lazy client, so the API can boot without a key."""
        if self._client is None:
            self._client = AsyncGroq(api_key=self.api_key)
        return self._client
    
    async def complete_json(self, system_prompt: str, user_prompt: str) -> str:
        """
        Ask the model for a JSON object.
        
        Returns the raw message content; parsing is left to the caller.
        Raises ModelInvocationError on provider, network or timeout failure.
        """
        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    response_format={"type": "json_object"},
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise ModelInvocationError(f"Model call timed out after {self.timeout}s") from e
        except Exception as e:
            logger.error(f"[Groq] {self.model} call failed: {e}")
            raise ModelInvocationError(str(e) or e.__class__.__name__) from e
        
        return response.choices[0].message.content or ""
    
    async def close(self):
        if self._client is not None:
            await self._client.close()
            self._client = None
