from __future__ import annotations

import uuid
from sqlalchemy import Select, delete, func, select
from sqlalchemy.dialects.postgresql import Insert, insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.country import Country
from app.models.enums import CountrySort
from app.services.types import JoinedCountry

UPSERT_FIELDS = (
    "capital",
    "region",
    "population",
    "currency_code",
    "exchange_rate",
    "estimated_gdp",
    "flag_url",
    "last_refreshed_at",
)


def list_query(region: str | None = None, currency: str | None = None, sort: CountrySort | None = None) -> Select:
    stmt = select(Country)
    if region:
        stmt = stmt.where(func.lower(Country.region) == region.lower())
    if currency:
        stmt = stmt.where(func.lower(Country.currency_code) == currency.lower())

    if sort is CountrySort.GDP_DESC:
        return stmt.order_by(Country.estimated_gdp.desc().nulls_last(), Country.name)
    if sort is CountrySort.GDP_ASC:
        return stmt.order_by(Country.estimated_gdp.asc().nulls_last(), Country.name)
    return stmt.order_by(Country.name)


def upsert_statement(record: JoinedCountry) -> Insert:
    """INSERT ... ON CONFLICT on ``lower(name)``; the stored name keeps its original casing."""
    values = {"id": uuid.uuid4(), "name": record.name}
    values.update({field: getattr(record, field) for field in UPSERT_FIELDS})
    stmt = pg_insert(Country).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=[func.lower(Country.name)],
        set_={field: getattr(stmt.excluded, field) for field in UPSERT_FIELDS},
    )


class CountryRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list(
        self,
        region: str | None = None,
        currency: str | None = None,
        sort: CountrySort | None = None,
    ) -> list[Country]:
        result = await self.session.execute(list_query(region, currency, sort))
        return list(result.scalars().all())

    async def get_by_name(self, name: str) -> Country | None:
        result = await self.session.execute(select(Country).where(func.lower(Country.name) == name.lower()))
        return result.scalar_one_or_none()

    async def delete_by_name(self, name: str) -> bool:
        result = await self.session.execute(delete(Country).where(func.lower(Country.name) == name.lower()))
        await self.session.commit()
        return result.rowcount > 0

    async def upsert(self, record: JoinedCountry) -> None:
        # No commit: the refresh pipeline owns the transaction.
        await self.session.execute(upsert_statement(record))

    async def top_by_gdp(self, limit: int = 5) -> list[Country]:
        result = await self.session.execute(list_query(sort=CountrySort.GDP_DESC).limit(limit))
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Country))
        return int(result.scalar_one())
