from __future__ import annotations

from datetime import datetime
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.refresh_status import STATUS_ROW_ID, RefreshStatus


class StatusRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self) -> RefreshStatus | None:
        result = await self.session.execute(select(RefreshStatus).where(RefreshStatus.id == STATUS_ROW_ID))
        return result.scalar_one_or_none()

    async def ensure(self) -> None:
        await self.session.execute(
            pg_insert(RefreshStatus)
            .values(id=STATUS_ROW_ID, total_countries=0, last_refreshed_at=None)
            .on_conflict_do_nothing(index_elements=["id"])
        )
        await self.session.commit()

    async def update(self, total_countries: int, last_refreshed_at: datetime) -> None:
        """Overwrite the singleton row. Does not commit."""
        stmt = pg_insert(RefreshStatus).values(
            id=STATUS_ROW_ID, total_countries=total_countries, last_refreshed_at=last_refreshed_at
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={"total_countries": stmt.excluded.total_countries, "last_refreshed_at": stmt.excluded.last_refreshed_at},
        )
        await self.session.execute(stmt)
