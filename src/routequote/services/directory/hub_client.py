"""HTTP client for the hub directory service."""

from __future__ import annotations

from typing import Any

import httpx

from ...config import settings
from .http import JSONServiceClient


class HubDirectoryClient(JSONServiceClient):
    service_name = "Hub directory"

    def __init__(self, base_url: str | None = None, **kwargs: Any) -> None:
        super().__init__(base_url or settings.hub_directory_url, **kwargs)

    def list_hubs(self) -> list[dict]:
        """Raw hub records. Accepts both ``{"success", "data"}`` envelopes and bare lists."""
        payload = self.get_json("/hubs")
        if isinstance(payload, dict):
            if payload.get("success") is False:
                raise ValueError(f"Hub directory reported failure: {payload.get('error') or 'unknown error'}")
            payload = payload.get("data") or []
        if not isinstance(payload, list):
            raise ValueError("Hub directory returned an unexpected payload.")
        return [record for record in payload if isinstance(record, dict)]


def check_health(base_url: str | None = None) -> bool:
    base = base_url or settings.hub_directory_url
    if not base:
        return False
    try:
        response = httpx.get(f"{base.rstrip('/')}/hubs", timeout=5.0)
        response.raise_for_status()
        return True
    except httpx.HTTPError:
        return False
