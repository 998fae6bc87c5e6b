from __future__ import annotations

import asyncio
from decimal import Decimal

from app.services.providers.countries import CountriesProvider
from app.services.providers.exchange_rates import ExchangeRateProvider
from app.services.providers.types import CountryDescriptor


class ReferenceDataGateway:
    def __init__(
        self,
        countries: CountriesProvider | None = None,
        rates: ExchangeRateProvider | None = None,
    ) -> None:
        self.countries = countries or CountriesProvider()
        self.rates = rates or ExchangeRateProvider()

    async def fetch(self) -> tuple[list[CountryDescriptor], dict[str, Decimal]]:
        """Fetch both datasets concurrently; the first failure propagates."""
        countries, rates = await asyncio.gather(self.countries.fetch_countries(), self.rates.fetch_rates())
        return countries, rates
