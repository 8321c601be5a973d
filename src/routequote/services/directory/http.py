"""Shared HTTP plumbing for the hub directory and settings collaborators."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from ...config import settings

logger = logging.getLogger(__name__)


class JSONServiceClient:
    """Small JSON GET client with bounded retry and backoff."""

    service_name = "service"

    def __init__(
        self,
        base_url: str | None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError(f"{self.service_name} base URL is not configured.")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.http_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.http_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
            transport=self._transport,
        )

    def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    return response.json()
                except httpx.HTTPStatusError as exc:
                    # client errors will not improve on retry
                    if exc.response.status_code < 500:
                        raise ValueError(
                            f"{self.service_name} rejected request to {url}: HTTP {exc.response.status_code}"
                        ) from exc
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"{self.service_name} at {self.base_url} kept failing: HTTP {exc.response.status_code}"
                        ) from exc
                    time.sleep(self.backoff_seconds * attempt)
                except (httpx.TimeoutException, httpx.NetworkError) as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"Failed to reach {self.service_name} at {self.base_url}: {exc}"
                        ) from exc
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(
                        f"{self.service_name} request failed, retrying in {wait_time:.1f}s "
                        f"(attempt {attempt}/{self.max_retries}): {exc}"
                    )
                    time.sleep(wait_time)
        finally:
            client.close()
