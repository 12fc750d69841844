"""Built-in httpx client for the Anthropic messages API.

Provides a sync HTTP transport with a buffered ``send()`` and a
line-streaming ``stream()``. Reads the API key from the constructor or
the environment; endpoint, protocol version and timeout come from
AgentConfig.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import httpx

from johnathan.exceptions import LLMConfigError, LLMResponseError, TransportError
from johnathan.models.config import AgentConfig

logger = logging.getLogger(__name__)

API_KEY_ENV = "ANTHROPIC_API_KEY"


class AnthropicClient:
    """Sync httpx client for the messages endpoint.

    Implements the Transport protocol. There is no retry: any HTTP or
    network failure surfaces immediately as TransportError.

    Usage::

        with AnthropicClient(AgentConfig()) as client:
            with client.stream(request) as lines:
                response = aggregate_stream(decode_events(lines))
    """

    def __init__(
        self,
        config: AgentConfig | None = None,
        *,
        api_key: str | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Endpoint, protocol version and timeout. Defaults to
                ``AgentConfig()``.
            api_key: API key. Falls back to the ANTHROPIC_API_KEY
                environment variable.
            http_client: Pre-built httpx client (e.g. with a mock
                transport). Request headers are still applied per call.

        Raises:
            LLMConfigError: If no API key is provided or found in environment.
        """
        self._config = config or AgentConfig()
        self._api_key = api_key or os.environ.get(API_KEY_ENV, "")
        if not self._api_key:
            raise LLMConfigError(
                f"No API key provided. Pass api_key= or set {API_KEY_ENV} "
                "environment variable."
            )
        self._headers = {
            "x-api-key": self._api_key,
            "anthropic-version": self._config.api_version,
            "content-type": "application/json",
        }
        self._client = http_client or httpx.Client(timeout=self._config.timeout)

    @property
    def config(self) -> AgentConfig:
        return self._config

    def send(self, request: dict) -> dict:
        """Send a non-streaming request.

        Args:
            request: Request body (``model``, ``max_tokens``, ``messages``...).

        Returns:
            The decoded JSON response body.

        Raises:
            TransportError: On network failure or an error status.
            LLMResponseError: If the body is not a JSON object.
        """
        try:
            response = self._client.post(
                self._config.api_url, json=request, headers=self._headers
            )
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP request failed: {e}") from e

        _raise_for_status(response, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise LLMResponseError(f"Failed to parse response: {e}") from e
        if not isinstance(data, dict):
            raise LLMResponseError(f"Unexpected response format: {data!r}")
        return data

    @contextmanager
    def stream(self, request: dict) -> Iterator[Iterator[str]]:
        """Send a streaming request and yield its text lines.

        The response is closed when the ``with`` block exits, drained or
        not. Read failures while iterating raise TransportError.

        Raises:
            TransportError: On network failure or an error status.
        """
        payload: dict[str, Any] = {**request, "stream": True}
        try:
            with self._client.stream(
                "POST", self._config.api_url, json=payload, headers=self._headers
            ) as response:
                if response.status_code >= 400:
                    body = response.read().decode("utf-8", errors="replace")
                    _raise_for_status(response, body)
                yield _iter_lines(response)
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP request failed: {e}") from e

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> AnthropicClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def _iter_lines(response: httpx.Response) -> Iterator[str]:
    try:
        yield from response.iter_lines()
    except httpx.HTTPError as e:
        raise TransportError(f"Stream read failed: {e}") from e


def _raise_for_status(response: httpx.Response, body: str) -> None:
    if response.status_code < 400:
        return
    logger.debug("API error %s: %s", response.status_code, body)
    raise TransportError(
        f"API error {response.status_code}: {body}",
        status_code=response.status_code,
    )
