"""Text-generation client.

Calls any OpenAI-compatible Chat Completions endpoint (Groq, OpenAI, a local
gateway) with ``httpx.AsyncClient``. The service treats the model as an opaque
prompt -> text function; failures surface as ``TextGenerationError`` with the
underlying message as ``details``.
"""
from __future__ import annotations
import logging
import os
import time
from typing import Any, Dict, Optional

import httpx

from prephub.errors import TextGenerationError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.groq.com/openai/v1/chat/completions"
DEFAULT_MODEL = "llama-3.3-70b-versatile"


def extract_content(result: Dict[str, Any]) -> str:
    """Message text of the first choice in a chat-completions response."""
    try:
        content = result["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content if isinstance(content, str) else ""


class TextGenerator:
    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url or os.getenv("LLM_API_URL", DEFAULT_API_URL)
        self.api_key = api_key if api_key is not None else os.getenv("LLM_API_KEY", "")
        self.model = model or os.getenv("LLM_MODEL", DEFAULT_MODEL)
        self.timeout = timeout or float(os.getenv("LLM_TIMEOUT", "120"))
        self.transport = transport

    async def generate(
        self, prompt: str, max_tokens: int = 2000, temperature: float = 0.7
    ) -> str:
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        started = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(
                    self.api_url, json=payload, headers=headers
                )
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Text generation failed with HTTP %s", exc.response.status_code
            )
            raise TextGenerationError(
                details=f"Generation backend returned HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Text generation request failed: %s", exc)
            raise TextGenerationError(details=str(exc) or type(exc).__name__) from exc

        content = extract_content(result)
        if not content:
            raise TextGenerationError(details="No content generated")
        logger.info(
            "Generated %d chars with %s in %.2fs",
            len(content),
            self.model,
            time.perf_counter() - started,
        )
        return content


def get_text_generator() -> TextGenerator:
    """FastAPI dependency; overridden in tests."""
    return TextGenerator()
