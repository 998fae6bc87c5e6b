from __future__ import annotations

import uuid
from datetime import datetime
from pydantic import BaseModel, field_serializer

from app.schemas.common import BaseSchema, isoformat_utc


class CountryRead(BaseSchema):
    id: uuid.UUID
    name: str
    capital: str | None = None
    region: str | None = None
    population: int
    currency_code: str | None = None
    exchange_rate: float | None = None
    estimated_gdp: float | None = None
    flag_url: str | None = None
    last_refreshed_at: datetime | None = None

    @field_serializer("last_refreshed_at")
    def _serialize_refreshed_at(self, value: datetime | None) -> str | None:
        return isoformat_utc(value)


class RefreshResponse(BaseModel):
    message: str
    total_countries: int
    last_refreshed_at: datetime

    @field_serializer("last_refreshed_at")
    def _serialize_refreshed_at(self, value: datetime) -> str | None:
        return isoformat_utc(value)
