from __future__ import annotations

import asyncio
import random
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.errors import ExternalSourceUnavailable, InternalError
from app.core.logging import get_logger
from app.models.enums import RefreshStage
from app.repositories.country_repo import CountryRepository
from app.repositories.status_repo import StatusRepository
from app.services.gdp import estimate_gdp
from app.services.providers.gateway import ReferenceDataGateway
from app.services.providers.types import CountryDescriptor
from app.services.summary_image import render_summary_image
from app.services.types import JoinedCountry, RefreshResult

logger = get_logger()

LEADER_COUNT = 5

_refresh_lock = asyncio.Lock()


def join_countries(
    descriptors: list[CountryDescriptor],
    rates: dict[str, Decimal],
    rng: random.Random,
    refreshed_at: datetime,
) -> list[JoinedCountry]:
    """Attach the first currency's rate and an estimated GDP to every country, in input order."""
    records = []
    for descriptor in descriptors:
        currency_code = None
        if descriptor.currency_codes and descriptor.currency_codes[0]:
            currency_code = descriptor.currency_codes[0].upper()

        exchange_rate = rates.get(currency_code) if currency_code else None
        population = descriptor.population or 0

        estimated_gdp = estimate_gdp(population, exchange_rate, rng)
        if currency_code is None:
            estimated_gdp = Decimal(0)

        records.append(
            JoinedCountry(
                name=descriptor.name,
                capital=descriptor.capital,
                region=descriptor.region,
                population=population,
                currency_code=currency_code,
                exchange_rate=exchange_rate,
                estimated_gdp=estimated_gdp,
                flag_url=descriptor.flag_url,
                last_refreshed_at=refreshed_at,
            )
        )
    return records


def _now() -> datetime:
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond - now.microsecond % 1000)


class RefreshService:
    def __init__(
        self,
        session: AsyncSession,
        gateway: ReferenceDataGateway | None = None,
        rng: random.Random | None = None,
        image_path: Path | None = None,
    ) -> None:
        self.session = session
        self.settings = get_settings()
        self.gateway = gateway or ReferenceDataGateway()
        self.rng = rng or random.Random()
        self.image_path = image_path or self.settings.summary_image_path
        self.country_repo = CountryRepository(session)
        self.status_repo = StatusRepository(session)
        self.stage: RefreshStage | None = None

    async def refresh(self) -> RefreshResult:
        async with _refresh_lock:
            return await self._run()

    async def _run(self) -> RefreshResult:
        refreshed_at = _now()

        self._enter(RefreshStage.FETCHING)
        try:
            descriptors, rates = await self.gateway.fetch()
        except ExternalSourceUnavailable as exc:
            self._enter(RefreshStage.FAILED, kind=exc.kind.value, source=exc.source)
            logger.warning("refresh_fetch_failed", source=exc.source, details=exc.details)
            raise

        self._enter(RefreshStage.JOINING, countries=len(descriptors), rates=len(rates))
        records = join_countries(descriptors, rates, self.rng, refreshed_at)

        self._enter(RefreshStage.PERSISTING, records=len(records))
        try:
            for record in records:
                await self.country_repo.upsert(record)
            total = await self.country_repo.count()
            await self.status_repo.update(total, refreshed_at)

            self._enter(RefreshStage.REPORTING, total_countries=total)
            leaders = await self.country_repo.top_by_gdp(LEADER_COUNT)
            await asyncio.to_thread(
                render_summary_image,
                total,
                [(country.name, country.estimated_gdp) for country in leaders],
                refreshed_at,
                self.image_path,
            )
            await self.session.commit()
        except Exception as exc:
            failed_stage = self.stage
            await self.session.rollback()
            self._enter(RefreshStage.FAILED, kind=InternalError.kind.value)
            logger.exception("refresh_persist_failed", stage=failed_stage.value)
            raise InternalError(details="A database or processing error occurred during refresh.") from exc

        self._enter(RefreshStage.DONE, total_countries=total)
        return RefreshResult(total_countries=total, last_refreshed_at=refreshed_at)

    def _enter(self, stage: RefreshStage, **fields) -> None:
        self.stage = stage
        logger.info("refresh_stage", stage=stage.value, **fields)
