"""Base interface for AI provider adapters."""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional

import httpx
import structlog

from ...core.exceptions import ProviderError, TransportError
from ...core.types import ChatMessage, StreamDelta
from ...prompts.composer import (
    SystemPromptContext,
    build_screen_analysis_prompt,
    build_system_prompt,
)
from ..catalog import ProviderInfo
from .streaming import StreamDemultiplexer, StreamDialect


logger = structlog.get_logger()


NO_RESPONSE = "No response generated."
NO_ANALYSIS = "No analysis available."
VISION_INSTRUCTION = "What do you see? Give a brief tip if relevant."
IMAGE_MEDIA_TYPE = "image/jpeg"


@dataclass
class WireRequest:
    """A provider-specific HTTP request, ready to send."""
    url: str
    body: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)


class AIProvider(ABC):
    """
    Abstract base class for AI provider adapters.

    Subclasses describe their wire dialect (request shape, response text
    location, stream framing); this class owns the HTTP exchange and the
    shared error contract.
    """

    info: ProviderInfo
    stream_dialect: StreamDialect

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        timeout: float = 60.0,
        max_tokens: int = 500,
        vision_max_tokens: int = 200,
        temperature: float = 0.7,
    ):
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.vision_max_tokens = vision_max_tokens
        self.temperature = temperature
        self._client = client
        self._owns_client = client is None
        self._client_lock = threading.Lock()

    @property
    def name(self) -> str:
        return self.info.name

    @property
    def client(self) -> httpx.Client:
        with self._client_lock:
            if self._client is None:
                self._client = httpx.Client(timeout=self.timeout)
            return self._client

    @abstractmethod
    def build_chat_request(
        self,
        api_key: str,
        model: str,
        messages: List[ChatMessage],
        system_prompt: str,
        stream: bool = False,
        web_search: bool = False,
    ) -> WireRequest:
        """Translate a neutral chat request into this provider's dialect."""
        pass

    @abstractmethod
    def build_vision_request(
        self, api_key: str, model: str, base64_image: str, system_prompt: str
    ) -> WireRequest:
        """Build a single-image analysis request."""
        pass

    @abstractmethod
    def extract_text(self, data: Dict[str, Any]) -> str:
        """Pull the response text out of a complete (non-streamed) reply."""
        pass

    def search_enabled(self, model: str, web_search: bool) -> bool:
        """Whether to attach search augmentation; unsupported models are ignored."""
        if not web_search:
            return False
        if not self.info.supports_search(model):
            logger.debug(
                "Web search not supported for model, ignoring",
                provider=self.name,
                model=model,
            )
            return False
        return True

    def complete(
        self,
        api_key: str,
        model: str,
        messages: List[ChatMessage],
        prompt_context: SystemPromptContext,
        web_search: bool = False,
    ) -> str:
        """Send one blocking chat request and return the full reply text."""
        request = self.build_chat_request(
            api_key,
            model,
            messages,
            build_system_prompt(prompt_context),
            stream=False,
            web_search=web_search,
        )
        logger.info("Sending chat request", provider=self.name, model=model)
        data = self._post(request)
        return self.extract_text(data) or NO_RESPONSE

    def iter_stream(
        self,
        api_key: str,
        model: str,
        messages: List[ChatMessage],
        prompt_context: SystemPromptContext,
        web_search: bool = False,
        cancel: Optional[threading.Event] = None,
    ) -> Iterator[StreamDelta]:
        """
        Stream a chat reply, yielding each non-empty text fragment in order.

        Args:
            cancel: Optional caller-owned event checked between chunk reads;
                once set, the stream stops after the current chunk.
        """
        request = self.build_chat_request(
            api_key,
            model,
            messages,
            build_system_prompt(prompt_context),
            stream=True,
            web_search=web_search,
        )
        logger.info("Opening chat stream", provider=self.name, model=model)

        demux = StreamDemultiplexer(self.stream_dialect)
        index = 0
        cancelled = False
        try:
            with self.client.stream(
                "POST",
                request.url,
                params=request.params,
                headers=request.headers,
                json=request.body,
            ) as response:
                if not response.is_success:
                    response.read()
                    raise self._error_from_response(response)

                for chunk in response.iter_bytes():
                    for text in demux.feed(chunk):
                        yield StreamDelta(text=text, index=index, is_first=index == 0)
                        index += 1
                    if cancel is not None and cancel.is_set():
                        logger.info("Stream cancelled", provider=self.name)
                        cancelled = True
                        break

                # A cancelled stream ends with the last delta already yielded
                if not cancelled:
                    for text in demux.close():
                        yield StreamDelta(text=text, index=index, is_first=index == 0)
                        index += 1
        except httpx.HTTPError as e:
            logger.error("Stream transport failed", provider=self.name, error=str(e))
            raise TransportError(
                self.name, f"{self.info.error_label} stream failed", e
            ) from e

        logger.debug(
            "Stream finished",
            provider=self.name,
            deltas=index,
            frames_dropped=demux.frames_dropped,
        )

    def stream(
        self,
        api_key: str,
        model: str,
        messages: List[ChatMessage],
        prompt_context: SystemPromptContext,
        on_delta: Optional[Callable[[str], None]] = None,
        web_search: bool = False,
        cancel: Optional[threading.Event] = None,
    ) -> str:
        """Stream a chat reply through ``on_delta`` and return the full text."""
        parts = []
        for delta in self.iter_stream(
            api_key, model, messages, prompt_context, web_search=web_search, cancel=cancel
        ):
            parts.append(delta.text)
            if on_delta is not None:
                on_delta(delta.text)
        return "".join(parts) or NO_RESPONSE

    def analyze_image(
        self,
        api_key: str,
        model: str,
        base64_image: str,
        analysis_context: SystemPromptContext,
    ) -> str:
        """Ask the model for a brief observation about a screenshot."""
        request = self.build_vision_request(
            api_key, model, base64_image, build_screen_analysis_prompt(analysis_context)
        )
        logger.info("Sending screen analysis request", provider=self.name, model=model)
        data = self._post(request)
        return self.extract_text(data) or NO_ANALYSIS

    def _post(self, request: WireRequest) -> Dict[str, Any]:
        try:
            response = self.client.post(
                request.url,
                params=request.params,
                headers=request.headers,
                json=request.body,
            )
        except httpx.HTTPError as e:
            logger.error("Request transport failed", provider=self.name, error=str(e))
            raise TransportError(
                self.name, f"{self.info.error_label} request failed", e
            ) from e

        if not response.is_success:
            raise self._error_from_response(response)

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(
                self.name, f"{self.info.error_label} returned an unreadable response", e
            ) from e
        if not isinstance(data, dict):
            raise TransportError(
                self.name, f"{self.info.error_label} returned an unexpected response"
            )
        return data

    def _error_from_response(self, response: httpx.Response) -> ProviderError:
        message = None
        try:
            payload = response.json()
        except ValueError:
            payload = None

        # Gemini occasionally wraps the error object in a one-element list
        if isinstance(payload, list) and payload:
            payload = payload[0]
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict):
                message = error.get("message")

        if not message:
            message = f"{self.info.error_label} API error: {response.status_code}"

        logger.error(
            "Provider returned an error",
            provider=self.name,
            status=response.status_code,
            error=message,
        )
        return ProviderError(self.name, response.status_code, message)

    def close(self) -> None:
        """Close the HTTP client if this adapter created it."""
        with self._client_lock:
            if self._client is not None and self._owns_client:
                self._client.close()
                self._client = None
