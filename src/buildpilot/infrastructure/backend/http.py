"""
HTTP backend adapter.

Talks to the template/chat service over JSON:

    POST /template {prompt}     -> {prompts: [...], uiPrompts: [...]}
    POST /chat     {messages}   -> {response: "..."}
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from buildpilot.domain.exceptions import BackendError
from buildpilot.domain.interfaces import BackendInterface
from buildpilot.domain.models import ConversationMessage, TemplateResponse

logger = logging.getLogger(__name__)

DEFAULT_BACKEND_URL = "http://localhost:3000"


@dataclass
class HttpBackendConfig:
    """Configuration for HttpBackend.

    This typed config ensures unknown fields are rejected at construction time.
    """

    base_url: str = DEFAULT_BACKEND_URL
    timeout: float = 120.0


class HttpBackend(BackendInterface):
    """Template/chat backend reached over HTTP with httpx."""

    config_class = HttpBackendConfig

    def __init__(
        self,
        config: HttpBackendConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        **kwargs: Any,
    ):
        """
        Args:
            config: Typed configuration object (preferred)
            transport: Custom httpx transport (tests use httpx.MockTransport)
            **kwargs: Config fields when no config object is given
        """
        if config is None:
            config = HttpBackendConfig(**kwargs)

        self._base_url = config.base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=config.timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def close(self) -> None:
        await self._client.aclose()

    async def template(self, prompt: str) -> TemplateResponse:
        data = await self._post("/template", {"prompt": prompt})
        return TemplateResponse(
            prompts=_string_tuple(data, "prompts"),
            ui_prompts=_string_tuple(data, "uiPrompts"),
        )

    async def chat(self, messages: Sequence[ConversationMessage]) -> str:
        data = await self._post(
            "/chat", {"messages": [m.to_dict() for m in messages]}
        )
        response = data.get("response")
        if not isinstance(response, str):
            raise BackendError("/chat returned no 'response' text")
        return response

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        logger.debug("POST %s%s", self._base_url, path)
        try:
            response = await self._client.post(path, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise BackendError(f"{path} returned HTTP {status}", status_code=status) from e
        except httpx.HTTPError as e:
            raise BackendError(f"{path} request failed: {type(e).__name__}: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise BackendError(f"{path} returned invalid JSON") from e

        if not isinstance(data, dict):
            raise BackendError(f"{path} returned {type(data).__name__}, expected object")
        result: dict[str, Any] = data
        return result


def _string_tuple(data: dict[str, Any], key: str) -> tuple[str, ...]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise BackendError(f"/template field '{key}' must be a list of strings")
    return tuple(value)
