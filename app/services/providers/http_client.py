from __future__ import annotations

from typing import Any

import httpx


async def get_json(
    url: str,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    timeout: float = 10,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    """GET ``url`` and decode the JSON body.

    Raises ``httpx.HTTPError`` on transport failures and non-2xx responses,
    ``ValueError`` when the body is not JSON. No retries.
    """
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        response = await client.get(url, headers=headers, params=params)
        response.raise_for_status()
        return response.json()
