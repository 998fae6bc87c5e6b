from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class CountryDescriptor:
    name: str
    capital: str | None = None
    region: str | None = None
    population: int | None = None
    flag_url: str | None = None
    currency_codes: list[str] = field(default_factory=list)
