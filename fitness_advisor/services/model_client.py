"""Client for the external text-generation endpoint."""
from __future__ import annotations

import logging
import time

import httpx

from fitness_advisor.config import get_settings


logger = logging.getLogger(__name__)


class ModelClientError(RuntimeError):
    """Raised when the model endpoint cannot produce a usable response body."""


class ModelClient:
    """Posts prompts to a ``generateContent``-style endpoint and returns the raw body."""

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if api_url is None or api_key is None or timeout is None:
            settings = get_settings()
            api_url = api_url or settings.llm_api_url
            api_key = api_key or settings.llm_api_key
            timeout = timeout if timeout is not None else settings.llm_timeout_seconds

        self.api_url = api_url
        self.timeout = timeout
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": api_key,
            },
        )

    @staticmethod
    def build_request_body(prompt: str) -> dict:
        return {"contents": [{"parts": [{"text": prompt}]}]}

    def invoke(self, prompt: str) -> str:
        """Send one prompt and return the response body text.

        ``timeout`` bounds the whole exchange, not only each network phase:
        a reply still streaming in past the deadline is abandoned.

        Raises:
            ModelClientError: on timeout, network error, non-2xx status or an
                empty body.
        """
        deadline = time.monotonic() + self.timeout
        try:
            with self._client.stream(
                "POST", self.api_url, json=self.build_request_body(prompt)
            ) as response:
                response.raise_for_status()
                chunks = []
                for chunk in response.iter_bytes():
                    chunks.append(chunk)
                    if time.monotonic() > deadline:
                        raise ModelClientError(
                            f"Model request exceeded its {self.timeout}s deadline"
                        )
                body = b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")
        except httpx.TimeoutException as err:
            raise ModelClientError(f"Model request timed out after {self.timeout}s") from err
        except httpx.HTTPStatusError as err:
            raise ModelClientError(
                f"Model request failed with HTTP {err.response.status_code}"
            ) from err
        except httpx.RequestError as err:
            raise ModelClientError(f"Model request failed: {err}") from err

        if not body or not body.strip():
            raise ModelClientError("Model returned an empty body")

        logger.debug("Model response received (%d chars)", len(body))
        return body

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ModelClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
