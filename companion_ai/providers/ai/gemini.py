"""Google Gemini generateContent adapter."""

from typing import Any, Dict, List

from ...core.types import ChatMessage
from ..catalog import GEMINI
from .base import AIProvider, IMAGE_MEDIA_TYPE, VISION_INSTRUCTION, WireRequest
from .streaming import GEMINI_STREAM


API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


def _inline_image(base64_image: str) -> Dict[str, Any]:
    return {"inlineData": {"mimeType": IMAGE_MEDIA_TYPE, "data": base64_image}}


class GeminiProvider(AIProvider):
    """
    Gemini adapter: messages become ``contents`` with nested parts, the
    assistant role is renamed "model" and the API key is a query parameter.
    """

    info = GEMINI
    stream_dialect = GEMINI_STREAM

    def _convert_message(self, message: ChatMessage) -> Dict[str, Any]:
        parts: List[Dict[str, Any]] = []
        if message.has_image:
            parts.append(_inline_image(message.image_base64))
        parts.append({"text": message.content})
        return {
            "role": "model" if message.role == "assistant" else "user",
            "parts": parts,
        }

    def _generation_config(self, max_tokens: int) -> Dict[str, Any]:
        return {"maxOutputTokens": max_tokens, "temperature": self.temperature}

    def build_chat_request(
        self,
        api_key: str,
        model: str,
        messages: List[ChatMessage],
        system_prompt: str,
        stream: bool = False,
        web_search: bool = False,
    ) -> WireRequest:
        body: Dict[str, Any] = {
            "contents": [self._convert_message(message) for message in messages],
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "generationConfig": self._generation_config(self.max_tokens),
        }
        if self.search_enabled(model, web_search):
            body["tools"] = [{"google_search": {}}]

        if stream:
            url = f"{API_BASE}/{model}:streamGenerateContent"
            params = {"key": api_key, "alt": "sse"}
        else:
            url = f"{API_BASE}/{model}:generateContent"
            params = {"key": api_key}

        return WireRequest(
            url=url,
            body=body,
            headers={"Content-Type": "application/json"},
            params=params,
        )

    def build_vision_request(
        self, api_key: str, model: str, base64_image: str, system_prompt: str
    ) -> WireRequest:
        body = {
            "contents": [
                {
                    "role": "user",
                    "parts": [_inline_image(base64_image), {"text": VISION_INSTRUCTION}],
                }
            ],
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "generationConfig": self._generation_config(self.vision_max_tokens),
        }
        return WireRequest(
            url=f"{API_BASE}/{model}:generateContent",
            body=body,
            headers={"Content-Type": "application/json"},
            params={"key": api_key},
        )

    def extract_text(self, data: Dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text") or "" for part in parts if isinstance(part, dict))
