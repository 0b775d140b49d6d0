"""
LLM provider abstraction layer.
Supports OpenAI (default) and Gemini over their REST APIs.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

from careshift.core.config import settings


logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 30.0
TEMPERATURE = 0.1


@dataclass
class LLMResponse:
    """Standardised response from any LLM provider."""
    raw_text: str
    parsed_json: Optional[dict]
    model_used: str
    success: bool
    error: Optional[str] = None
    response_id: Optional[str] = None


class BaseLLMProvider(ABC):
    """
    A JSON-in, JSON-out chat endpoint.

    Subclasses describe the request and where the reply text lives; the POST,
    JSON decoding and failure reporting are shared.
    """

    label = "LLM"
    key_setting = "API_KEY"

    def __init__(
        self,
        model_name: str,
        api_key: Optional[str],
        client: Optional[httpx.Client] = None,
    ):
        if not api_key:
            raise ValueError(f"{self.key_setting} not set")
        self.model_name = model_name
        self.api_key = api_key
        self.client = client

    @abstractmethod
    def provider_name(self) -> str:
        ...

    def build_request(self, system_prompt: str, user_prompt: str) -> tuple[str, dict, dict]:
        """Returns (url, json body, headers)."""
        raise NotImplementedError

    def read_reply(self, data: dict) -> tuple[str, Optional[str]]:
        """Returns (reply text, response id) from a decoded response body."""
        raise NotImplementedError

    def generate_json(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        url, body, headers = self.build_request(system_prompt, user_prompt)

        raw = ""
        try:
            post = self.client.post if self.client else httpx.post
            response = post(url, json=body, headers=headers, timeout=REQUEST_TIMEOUT_SECONDS)
            response.raise_for_status()

            raw, response_id = self.read_reply(response.json())
            return LLMResponse(
                raw_text=raw,
                parsed_json=json.loads(raw),
                model_used=self.provider_name(),
                success=True,
                response_id=response_id,
            )
        except json.JSONDecodeError as e:
            logger.error(f"{self.label} returned invalid JSON: {e}")
            return self._failure(f"Invalid JSON from LLM: {e}", raw)
        except httpx.HTTPStatusError as e:
            logger.error(f"{self.label} API HTTP error: {e.response.status_code} - {e.response.text}")
            return self._failure(f"{self.label} API error: {e.response.status_code}")
        except (httpx.HTTPError, KeyError, IndexError, TypeError) as e:
            logger.error(f"{self.label} API error: {e}")
            return self._failure(str(e))

    def _failure(self, error: str, raw_text: str = "") -> LLMResponse:
        return LLMResponse(
            raw_text=raw_text,
            parsed_json=None,
            model_used=self.provider_name(),
            success=False,
            error=error,
        )


class OpenAIProvider(BaseLLMProvider):
    """Chat completions with a JSON-object response format."""

    URL = "https://api.openai.com/v1/chat/completions"
    label = "OpenAI"
    key_setting = "OPENAI_API_KEY"

    def __init__(self, model_name=None, api_key=None, client=None):
        super().__init__(
            model_name or settings.OPENAI_MODEL,
            api_key or settings.OPENAI_API_KEY,
            client,
        )

    def provider_name(self) -> str:
        return f"openai/{self.model_name}"

    def build_request(self, system_prompt, user_prompt):
        body = {
            "model": self.model_name,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "response_format": {"type": "json_object"},
            "temperature": TEMPERATURE,
        }
        return self.URL, body, {"Authorization": f"Bearer {self.api_key}"}

    def read_reply(self, data):
        return data["choices"][0]["message"]["content"], data.get("id")


class GeminiProvider(BaseLLMProvider):
    """generateContent with an application/json response type."""

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
    label = "Gemini"
    key_setting = "GEMINI_API_KEY"

    def __init__(self, model_name=None, api_key=None, client=None):
        super().__init__(
            model_name or settings.GEMINI_MODEL,
            api_key or settings.GEMINI_API_KEY,
            client,
        )

    def provider_name(self) -> str:
        return f"gemini/{self.model_name}"

    def build_request(self, system_prompt, user_prompt):
        # Gemini has no separate system role on this endpoint
        prompt = f"{system_prompt}\n\n---\n\n{user_prompt}"
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "temperature": TEMPERATURE,
            },
        }
        url = f"{self.BASE_URL}/{self.model_name}:generateContent"
        return url, body, {"x-goog-api-key": self.api_key}

    def read_reply(self, data):
        return data["candidates"][0]["content"]["parts"][0]["text"], data.get("responseId")


PROVIDERS = {
    "openai": OpenAIProvider,
    "gemini": GeminiProvider,
}


def get_llm_provider(provider_name: Optional[str] = None) -> BaseLLMProvider:
    """
    Factory to get the configured LLM provider.

    Raises:
        ValueError: unknown provider name or missing API key
    """
    provider_name = provider_name or settings.LLM_PROVIDER
    provider_cls = PROVIDERS.get(provider_name)
    if provider_cls is None:
        raise ValueError(f"Unknown LLM provider: {provider_name}")
    return provider_cls()
