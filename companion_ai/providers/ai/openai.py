"""OpenAI chat-completions adapter."""

from typing import Any, Dict, List

from ...core.types import ChatMessage
from ..catalog import OPENAI
from .base import AIProvider, IMAGE_MEDIA_TYPE, VISION_INSTRUCTION, WireRequest
from .streaming import OPENAI_STREAM


API_URL = "https://api.openai.com/v1/chat/completions"


def _image_part(base64_image: str) -> Dict[str, Any]:
    return {
        "type": "image_url",
        "image_url": {
            "url": f"data:{IMAGE_MEDIA_TYPE};base64,{base64_image}",
            "detail": "low",
        },
    }


class OpenAIProvider(AIProvider):
    """
    OpenAI adapter: the system prompt travels as the first message and
    images are inlined as base64 data URLs with a low detail hint.
    """

    info = OPENAI
    stream_dialect = OPENAI_STREAM

    def _headers(self, api_key: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }

    def _convert_message(self, message: ChatMessage) -> Dict[str, Any]:
        if not message.has_image:
            return {"role": message.role, "content": message.content}
        return {
            "role": message.role,
            "content": [
                _image_part(message.image_base64),
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
            "messages": [{"role": "system", "content": system_prompt}]
            + [self._convert_message(message) for message in messages],
            "max_tokens": self.max_tokens,
        }

        if self.search_enabled(model, web_search):
            # Search-preview variants reject the temperature field
            body["model"] = self.info.search_variant(model)
            body["web_search_options"] = {}
        else:
            body["temperature"] = self.temperature

        if stream:
            body["stream"] = True

        return WireRequest(url=API_URL, body=body, headers=self._headers(api_key))

    def build_vision_request(
        self, api_key: str, model: str, base64_image: str, system_prompt: str
    ) -> WireRequest:
        body = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {
                    "role": "user",
                    "content": [
                        _image_part(base64_image),
                        {"type": "text", "text": VISION_INSTRUCTION},
                    ],
                },
            ],
            "max_tokens": self.vision_max_tokens,
            "temperature": self.temperature,
        }
        return WireRequest(url=API_URL, body=body, headers=self._headers(api_key))

    def extract_text(self, data: Dict[str, Any]) -> str:
        choices = data.get("choices") or []
        if not choices:
            return ""
        message = choices[0].get("message") or {}
        return message.get("content") or ""
