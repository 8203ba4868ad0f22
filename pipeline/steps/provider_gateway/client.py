"""
Chat-completions client for OpenAI-compatible endpoints.

One POST per generation, TLS verified, bounded by a timeout, no retries.
Every failure surfaces as ProviderError; raw vendor payloads stay in logs.
"""

from typing import Any, Dict, Optional

import httpx
import logfire

from pipeline.core.exceptions import ProviderError
from pipeline.steps.prompt_builder.prompts import SYSTEM_PROMPT


DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"

CREATIVITY_TEMPERATURES: Dict[str, float] = {
    "low": 0.2,
    "medium": 0.5,
    "high": 0.8,
}


class ChatCompletionProvider:
    """Client for an OpenAI-compatible chat-completions API."""

    provider_name = "OpenAI"

    def __init__(
        self,
        api_key: str,
        api_url: str = "",
        model: str = "gpt-4o-mini",
        max_tokens: int = 2000,
        default_creativity: str = "medium",
        timeout: float = 60.0
    ):
        if not api_key:
            raise ValueError("Provider API key missing. Set OPENAI_API_KEY in environment.")

        self.api_key = api_key
        self.api_url = api_url or DEFAULT_API_URL
        self.model = model
        self.max_tokens = max_tokens
        self.default_creativity = default_creativity
        self.timeout = timeout

    def temperature_for(self, creativity: Optional[str]) -> float:
        """Map a creativity option to a sampling temperature."""
        key = (creativity or "").lower()
        if key in CREATIVITY_TEMPERATURES:
            return CREATIVITY_TEMPERATURES[key]
        return CREATIVITY_TEMPERATURES.get(self.default_creativity.lower(), CREATIVITY_TEMPERATURES["medium"])

    def build_payload(self, prompt: str, creativity: Optional[str]) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_completion_tokens": self.max_tokens,
            "temperature": self.temperature_for(creativity),
            "n": 1,
            "stream": False,
        }

    @staticmethod
    def _vendor_message(response: httpx.Response) -> str:
        try:
            error = response.json().get("error")
        except ValueError:
            return response.text[:200]
        if isinstance(error, dict):
            return str(error.get("message", ""))[:200]
        return str(error or "")[:200]

    async def generate(self, prompt: str, creativity: Optional[str] = None) -> str:
        """
        Send one chat-completion request and return the generated email.

        Args:
            prompt: Rendered user prompt
            creativity: Creativity option (low, medium, high)

        Returns:
            Generated email text

        Raises:
            ProviderError: On transport failure, vendor error or empty content
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = self.build_payload(prompt, creativity)

        logfire.info(
            "Calling chat-completions provider",
            provider=self.provider_name,
            model=self.model,
            temperature=payload["temperature"]
        )

        async with httpx.AsyncClient(timeout=self.timeout, verify=True) as client:
            try:
                response = await client.post(self.api_url, json=payload, headers=headers)
            except httpx.TimeoutException as e:
                logfire.error("Provider timeout", timeout=self.timeout)
                raise ProviderError(f"APITimeout: {e}", ProviderError.TRANSPORT) from e
            except httpx.HTTPError as e:
                logfire.error("Provider transport error", error=str(e))
                raise ProviderError(f"APITransport: {e}", ProviderError.TRANSPORT) from e

        if response.is_error:
            message = self._vendor_message(response)
            logfire.error(
                "Provider HTTP error",
                status_code=response.status_code,
                response=response.text[:500]
            )
            raise ProviderError(
                f"APIError {response.status_code}: {message}",
                ProviderError.VENDOR,
                status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            logfire.error("Provider returned invalid JSON", response=response.text[:500])
            raise ProviderError("APIError: invalid JSON response", ProviderError.VENDOR) from e

        try:
            content = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            content = ""

        if not content.strip():
            logfire.warning("Provider returned no email content", model=self.model)
            raise ProviderError("No email content found", ProviderError.EMPTY_CONTENT)

        logfire.info(
            "Provider call completed",
            provider=self.provider_name,
            content_length=len(content),
            usage=data.get("usage")
        )

        return content
