from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_session
from app.repositories.country_repo import CountryRepository
from app.repositories.status_repo import StatusRepository
from app.services.refresh import RefreshService


async def get_db_session() -> AsyncIterator[AsyncSession]:
    async for session in get_session():
        yield session


def get_country_repo(session: AsyncSession = Depends(get_db_session)) -> CountryRepository:
    return CountryRepository(session)


def get_status_repo(session: AsyncSession = Depends(get_db_session)) -> StatusRepository:
    return StatusRepository(session)


def get_refresh_service(session: AsyncSession = Depends(get_db_session)) -> RefreshService:
    return RefreshService(session)
