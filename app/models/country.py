from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from sqlalchemy import BigInteger, DateTime, Index, Numeric, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Country(Base):
    __tablename__ = "countries"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    capital: Mapped[str | None] = mapped_column(String(128))
    region: Mapped[str | None] = mapped_column(String(64))
    population: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    currency_code: Mapped[str | None] = mapped_column(String(8))
    exchange_rate: Mapped[Decimal | None] = mapped_column(Numeric(24, 10))
    estimated_gdp: Mapped[Decimal | None] = mapped_column(Numeric(30, 2))
    flag_url: Mapped[str | None] = mapped_column(String(255))
    last_refreshed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


Index("uq_countries_name_lower", func.lower(Country.name), unique=True)
Index("ix_countries_region_lower", func.lower(Country.region))
