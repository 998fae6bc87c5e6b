from __future__ import annotations

from datetime import datetime
from pydantic import field_serializer

from app.schemas.common import BaseSchema, isoformat_utc


class StatusRead(BaseSchema):
    total_countries: int
    last_refreshed_at: datetime | None = None

    @field_serializer("last_refreshed_at")
    def _serialize_refreshed_at(self, value: datetime | None) -> str | None:
        return isoformat_utc(value)
