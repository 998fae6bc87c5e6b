from __future__ import annotations

from typing import Any

import httpx

from app.core.config import Settings, get_settings
from app.core.errors import ExternalSourceUnavailable
from app.services.providers.http_client import get_json
from app.services.providers.types import CountryDescriptor

SOURCE_NAME = "Rest Countries API"


class CountriesProvider:
    def __init__(self, settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.settings = settings or get_settings()
        self.transport = transport

    async def fetch_countries(self) -> list[CountryDescriptor]:
        try:
            payload = await get_json(
                self.settings.countries_api_url,
                timeout=self.settings.http_timeout_seconds,
                transport=self.transport,
            )
        except (httpx.HTTPError, ValueError) as exc:
            raise ExternalSourceUnavailable(SOURCE_NAME) from exc

        if not isinstance(payload, list):
            raise ExternalSourceUnavailable(SOURCE_NAME, "Rest Countries API returned an unexpected data structure")
        return [descriptor for descriptor in map(self._parse, payload) if descriptor is not None]

    def _parse(self, item: Any) -> CountryDescriptor | None:
        if not isinstance(item, dict) or not self._text(item.get("name")):
            return None
        currencies = item.get("currencies") or []
        if not isinstance(currencies, list):
            raise ExternalSourceUnavailable(SOURCE_NAME, "Rest Countries API returned an unexpected data structure")
        codes = []
        for currency in currencies:
            code = currency.get("code") if isinstance(currency, dict) else None
            codes.append(self._text(code) or "")
        return CountryDescriptor(
            name=item["name"],
            capital=self._text(item.get("capital")),
            region=self._text(item.get("region")),
            population=self._population(item.get("population")),
            flag_url=self._text(item.get("flag")),
            currency_codes=codes,
        )

    def _text(self, value: Any) -> str | None:
        return value if isinstance(value, str) and value else None

    def _population(self, value: Any) -> int | None:
        if value is None or isinstance(value, bool):
            return None
        try:
            return max(int(value), 0)
        except (TypeError, ValueError):
            return None
