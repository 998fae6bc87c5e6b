from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from app.core.config import Settings, get_settings
from app.core.errors import ExternalSourceUnavailable
from app.services.providers.http_client import get_json

SOURCE_NAME = "Exchange Rate API"


class ExchangeRateProvider:
    """Rates keyed by currency code, relative to the base currency of the upstream table."""

    def __init__(self, settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.settings = settings or get_settings()
        self.transport = transport

    async def fetch_rates(self) -> dict[str, Decimal]:
        try:
            payload = await get_json(
                self.settings.exchange_api_url,
                timeout=self.settings.http_timeout_seconds,
                transport=self.transport,
            )
        except (httpx.HTTPError, ValueError) as exc:
            raise ExternalSourceUnavailable(SOURCE_NAME) from exc

        rates = payload.get("rates") if isinstance(payload, dict) else None
        if not isinstance(rates, dict):
            raise ExternalSourceUnavailable(SOURCE_NAME, "Exchange Rate API returned an unexpected data structure")

        parsed = {}
        for code, value in rates.items():
            rate = self._to_rate(value)
            if rate is not None:
                parsed[str(code)] = rate
        return parsed

    def _to_rate(self, value: Any) -> Decimal | None:
        if isinstance(value, bool):
            return None
        try:
            rate = Decimal(str(value))
        except (InvalidOperation, ValueError):
            return None
        if not rate.is_finite() or rate <= 0:
            return None
        return rate
