from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

import config


class GeminiError(RuntimeError):
    """The Gemini API call failed or returned something unusable."""


class GeminiClient:
    """
    Thin synchronous wrapper over the Generative Language REST API.

    One instance is created per request (see deps.ai) and handed to the
    generation functions explicitly; tests pass their own stand-in instead.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key or config.gemini_api_key()
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY is not configured")
        self.base_url = (base_url or config.gemini_base_url()).rstrip("/")
        self._client = httpx.Client(
            timeout=timeout if timeout is not None else config.gemini_timeout(),
            transport=transport,
        )

    def generate(
        self,
        model: str,
        prompt: str,
        *,
        json_mode: bool = False,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
    ) -> str:
        generation_config: Dict[str, Any] = {}
        if temperature is not None:
            generation_config.update({"temperature": temperature, "topP": 0.95, "topK": 40})
        if max_output_tokens is not None:
            generation_config["maxOutputTokens"] = max_output_tokens
        if json_mode:
            generation_config["responseMimeType"] = "application/json"

        payload: Dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if generation_config:
            payload["generationConfig"] = generation_config

        url = f"{self.base_url}/v1beta/models/{model}:generateContent"
        data = self._request("POST", url, json=payload)
        try:
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(str(p.get("text", "")) for p in parts)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise GeminiError(f"Unexpected Gemini response: {str(data)[:200]}") from e

    def list_models(self) -> Dict[str, Any]:
        return self._request("GET", f"{self.base_url}/v1/models")

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            r = self._client.request(method, url, params={"key": self.api_key}, **kwargs)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GeminiError(
                f"Gemini HTTP {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.RequestError as e:
            raise GeminiError(f"Gemini request failed: {type(e).__name__}: {e}") from e
        try:
            return r.json()
        except ValueError as e:
            raise GeminiError(f"Gemini returned non-JSON body: {r.text[:200]}") from e

    def close(self) -> None:
        self._client.close()
