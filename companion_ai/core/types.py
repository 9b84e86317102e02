"""Provider-neutral request and response types."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union


ROLES = ("user", "assistant", "system")


@dataclass(frozen=True)
class ProviderConfig:
    """Which provider to call, with which key and model."""
    provider: str
    api_key: str
    model: str = ""


@dataclass(frozen=True)
class ChatMessage:
    """One conversation turn; may carry a base64 JPEG alongside the text."""
    role: str
    content: str
    image_base64: Optional[str] = None

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Invalid message role: {self.role}")

    @property
    def has_image(self) -> bool:
        return bool(self.image_base64)

    def to_dict(self) -> Dict[str, Any]:
        data = {"role": self.role, "content": self.content}
        if self.image_base64:
            data["image_base64"] = self.image_base64
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChatMessage":
        return cls(
            role=data["role"],
            content=data.get("content", ""),
            image_base64=data.get("image_base64"),
        )


MessageLike = Union[ChatMessage, Dict[str, Any]]


def coerce_messages(messages: Iterable[MessageLike]) -> List[ChatMessage]:
    """Return a new list of ChatMessage objects; the caller's sequence is untouched."""
    return [
        message if isinstance(message, ChatMessage) else ChatMessage.from_dict(message)
        for message in messages
    ]


@dataclass(frozen=True)
class StreamDelta:
    """One incremental fragment of streamed response text."""
    text: str
    index: int = 0
    is_first: bool = False
