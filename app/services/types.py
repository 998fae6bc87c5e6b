from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class JoinedCountry:
    name: str
    capital: str | None
    region: str | None
    population: int
    currency_code: str | None
    exchange_rate: Decimal | None
    estimated_gdp: Decimal | None
    flag_url: str | None
    last_refreshed_at: datetime


@dataclass
class RefreshResult:
    total_countries: int
    last_refreshed_at: datetime
