"""Generative assistant collaborators for receipt extraction.

Two transports sit behind small protocols so the extraction pipeline never
depends on a concrete client:

- ``LocalModelAssistant`` talks to an on-device model service over HTTP.
- ``OpenAIChatAssistant`` calls a cloud chat-completion model in JSON mode.
"""

from typing import Any, Protocol

import httpx
import openai

from tallyscan.runtime.logging import get_logger
from tallyscan.runtime.settings import DEFAULT_OPENAI_MODEL, AssistantSettings

logger = get_logger(__name__)

HEALTH_CHECK_TIMEOUT = 5.0

Message = dict[str, str]


class AssistantUnavailable(RuntimeError):
    """Raised when an assistant cannot be reached or returns an error."""


class AssistantResponseError(ValueError):
    """Raised when an assistant answers with something other than the expected JSON."""


class OnDeviceAssistant(Protocol):
    def is_available(self) -> bool: ...

    async def generate(self, messages: list[Message]) -> list[dict[str, Any]]: ...


class CloudAssistant(Protocol):
    async def complete_json(self, messages: list[Message]) -> str: ...


class LocalModelAssistant:
    """
    Client for a local model service.

    The service exposes ``GET /health`` and ``POST /generate`` taking
    ``{"messages": [...]}`` and answering ``{"content": [{"type": "text", "text": ...}]}``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def is_available(self) -> bool:
        try:
            with httpx.Client(base_url=self.base_url, timeout=HEALTH_CHECK_TIMEOUT, transport=self._transport) as client:
                response = client.get("/health")
        except httpx.RequestError as e:
            logger.debug("Local model service not reachable at %s: %s", self.base_url, e)
            return False
        return response.status_code == 200

    async def generate(self, messages: list[Message]) -> list[dict[str, Any]]:
        logger.info("Sending receipt to local model service at %s...", self.base_url)
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post("/generate", json={"messages": messages})
        except httpx.RequestError as e:
            raise AssistantUnavailable(f"Failed to connect to local model service: {e}") from e

        if response.status_code != 200:
            raise AssistantUnavailable(f"Local model service error: {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise AssistantResponseError("Local model service returned non-JSON body") from e

        content = payload.get("content") if isinstance(payload, dict) else payload
        if not isinstance(content, list):
            raise AssistantResponseError("Local model service response has no content list")
        return [entry for entry in content if isinstance(entry, dict)]


class OpenAIChatAssistant:
    """Cloud chat-completion assistant constrained to a single JSON object."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_OPENAI_MODEL,
        timeout: float = 60.0,
        client: Any | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> Any:
        """Get or create the OpenAI client (lazy initialization)."""
        if self._client is None:
            self._client = openai.AsyncOpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client

    async def complete_json(self, messages: list[Message]) -> str:
        logger.info("Sending receipt to OpenAI model %s...", self.model)
        client = self._get_client()
        try:
            completion = await client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=0.0,
                response_format={"type": "json_object"},
            )
        except openai.OpenAIError as e:
            raise AssistantUnavailable(f"OpenAI request failed: {e}") from e

        content = completion.choices[0].message.content
        if not content:
            raise AssistantResponseError("OpenAI returned an empty message")
        return content.strip()


def build_assistants(settings: AssistantSettings) -> tuple[OnDeviceAssistant | None, CloudAssistant | None]:
    """Build the configured assistant collaborators; unconfigured ones are None."""
    on_device: OnDeviceAssistant | None = None
    cloud: CloudAssistant | None = None

    if settings.use_on_device and settings.local_model_url:
        on_device = LocalModelAssistant(settings.local_model_url, timeout=settings.local_model_timeout)

    if settings.use_cloud and settings.openai_api_key:
        cloud = OpenAIChatAssistant(
            settings.openai_api_key,
            model=settings.openai_model,
            timeout=settings.openai_timeout,
        )
    elif settings.use_cloud:
        logger.debug("No OpenAI API key configured; cloud assistant disabled")

    return on_device, cloud
