from __future__ import annotations

import base64
import logging
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from .models import AnalysisResult
from .prompts import prompt_for

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"


class AnalysisError(RuntimeError):
    """Raised when a food photo cannot be analysed."""


class VisionAnalysisClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        detail: str = "low",
        client: Any = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.detail = detail
        self._api_key = api_key
        self._client = client
        if client is None and not api_key:
            logger.warning("OPENAI_API_KEY not set; food analysis will fail until it is configured")

    def _sdk(self) -> Any:
        if self._client is None:
            if not self._api_key:
                raise AnalysisError("OpenAI API key not set. Set OPENAI_API_KEY in the environment or .env")
            self._client = OpenAI(api_key=self._api_key)
        return self._client

    def build_messages(self, image_bytes: bytes, mime_type: str, language: str) -> list[dict]:
        b64 = base64.b64encode(image_bytes).decode("ascii")
        return [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt_for(language)},
                    {
                        "type": "image_url",
                        "image_url": {
                            "url": f"data:{mime_type};base64,{b64}",
                            "detail": self.detail,
                        },
                    },
                ],
            }
        ]

    def analyze(self, image_bytes: bytes, mime_type: str, language: str) -> AnalysisResult:
        if not image_bytes:
            raise AnalysisError("No image data to analyse")
        try:
            messages = self.build_messages(image_bytes, mime_type, language)
        except ValueError as exc:
            raise AnalysisError(str(exc)) from exc
        sdk = self._sdk()

        try:
            response = sdk.chat.completions.create(
                model=self.model,
                messages=messages,
                response_format={"type": "json_object"},
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except OpenAIError as exc:
            logger.error("OpenAI API error: %s", exc)
            raise AnalysisError(str(exc) or "Failed to analyze image") from exc

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise AnalysisError("No response from OpenAI API")
        logger.debug("Analysis response (%d chars)", len(content))

        try:
            return AnalysisResult.from_json(content)
        except ValueError as exc:
            logger.error("Unparseable analysis response: %s", exc)
            raise AnalysisError(str(exc)) from exc
