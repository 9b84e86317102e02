"""Anthropic messages API adapter."""

from typing import Any, Dict, List

from ...core.types import ChatMessage
from ..catalog import ANTHROPIC
from .base import AIProvider, IMAGE_MEDIA_TYPE, VISION_INSTRUCTION, WireRequest
from .streaming import ANTHROPIC_STREAM


API_URL = "https://api.anthropic.com/v1/messages"
API_VERSION = "2023-06-01"
WEB_SEARCH_MAX_USES = 3


def _image_block(base64_image: str) -> Dict[str, Any]:
    return {
        "type": "image",
        "source": {
            "type": "base64",
            "media_type": IMAGE_MEDIA_TYPE,
            "data": base64_image,
        },
    }


class AnthropicProvider(AIProvider):
    """Anthropic adapter: system prompt is a top-level field, only user/assistant roles."""

    info = ANTHROPIC
    stream_dialect = ANTHROPIC_STREAM

    def _headers(self, api_key: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": api_key,
            "anthropic-version": API_VERSION,
        }

    def _convert_message(self, message: ChatMessage) -> Dict[str, Any]:
        role = "assistant" if message.role == "assistant" else "user"
        if not message.has_image:
            return {"role": role, "content": message.content}
        return {
            "role": role,
            "content": [
                _image_block(message.image_base64),
                {"type": "text", "text": message.content},
            ],
        }

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
            "model": model,
            "max_tokens": self.max_tokens,
            "system": system_prompt,
            "messages": [self._convert_message(message) for message in messages],
        }
        if stream:
            body["stream"] = True
        if self.search_enabled(model, web_search):
            body["tools"] = [
                {
                    "type": "web_search_20250305",
                    "name": "web_search",
                    "max_uses": WEB_SEARCH_MAX_USES,
                }
            ]
        return WireRequest(url=API_URL, body=body, headers=self._headers(api_key))

    def build_vision_request(
        self, api_key: str, model: str, base64_image: str, system_prompt: str
    ) -> WireRequest:
        body = {
            "model": model,
            "max_tokens": self.vision_max_tokens,
            "system": system_prompt,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        _image_block(base64_image),
                        {"type": "text", "text": VISION_INSTRUCTION},
                    ],
                }
            ],
        }
        return WireRequest(url=API_URL, body=body, headers=self._headers(api_key))

    def extract_text(self, data: Dict[str, Any]) -> str:
        # Search-augmented replies interleave tool blocks with several text blocks
        return "".join(
            block.get("text") or ""
            for block in data.get("content") or []
            if block.get("type") == "text"
        )
