"""httpx wrapper for talking to a running tzclock server.

Why a wrapper:
- Standardizes timeouts and headers for every caller (doctor probe, scripts).
- Easy to swap for a mocked transport in tests.
"""

from __future__ import annotations

from typing import Any

import httpx

from core.config import AppSettings


def base_url_for(settings: AppSettings) -> str:
    host = "127.0.0.1" if settings.host in ("0.0.0.0", "::") else settings.host
    return f"http://{host}:{settings.port}"


def build_async_client(
    settings: AppSettings | None = None,
    *,
    base_url: str | None = None,
    timeout_seconds: float = 5.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` pointed at the API.

    Why a builder:
    - Centralizes timeouts/headers so every probe behaves the same.
    - `transport` lets tests route requests in-process.
    """

    settings = settings or AppSettings()
    return httpx.AsyncClient(
        base_url=base_url or base_url_for(settings),
        timeout=httpx.Timeout(timeout_seconds),
        headers={
            "User-Agent": f"tzclock-cli ({settings.service_name})",
            "Accept": "application/json",
        },
        transport=transport,
    )


async def fetch_health(client: httpx.AsyncClient) -> dict[str, Any]:
    """GET /health and return the decoded payload; raises on non-2xx."""

    response = await client.get("/health")
    response.raise_for_status()
    payload = response.json()
    if not isinstance(payload, dict):
        raise ValueError("unexpected /health payload")
    return payload
