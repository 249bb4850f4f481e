"""Persian translation through an OpenAI-compatible chat completion endpoint."""

from __future__ import annotations

from typing import Any

from openai import OpenAI, OpenAIError

from ..config import TranslatorConfig
from ..errors import TranslationError


class Translator:
    """Thin wrapper turning one text into its translation, or raising."""

    def __init__(self, config: TranslatorConfig, client: Any | None = None) -> None:
        self.config = config
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            if not self.config.api_key:
                raise TranslationError("Translation API key is not configured")
            self._client = OpenAI(
                api_key=self.config.api_key,
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                max_retries=0,
            )
        return self._client

    def translate(self, text: str) -> str:
        content = self.config.prompt.format(text=text)
        try:
            completion = self.client.chat.completions.create(
                model=self.config.model,
                messages=[{"role": "user", "content": content}],
            )
        except OpenAIError as exc:
            raise TranslationError(
                "Translation request failed", {"error": str(exc), "type": type(exc).__name__}
            ) from exc
        choices = getattr(completion, "choices", None) or []
        result = choices[0].message.content if choices else None
        if not result or not result.strip():
            raise TranslationError("Translation service returned an empty response")
        return result.strip()


__all__ = ["Translator"]
