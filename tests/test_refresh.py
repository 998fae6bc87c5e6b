import asyncio
import random
from dataclasses import asdict
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
import uuid

import pytest

from app.core.errors import ExternalSourceUnavailable, InternalError
from app.models.enums import ErrorKind, RefreshStage
from app.services.providers.types import CountryDescriptor
from app.services.refresh import RefreshService, join_countries

NOW = datetime(2025, 10, 22, 18, 0, tzinfo=timezone.utc)


class FakeStore:
    def __init__(self, countries=None):
        self.countries = {c.name.lower(): c for c in countries or []}
        self.status = SimpleNamespace(total_countries=len(self.countries), last_refreshed_at=None)
        self.begin()

    def begin(self):
        self.pending_countries = dict(self.countries)
        self.pending_status = self.status


class FakeSession:
    def __init__(self, store):
        self.store = store
        self.commits = 0
        self.rollbacks = 0

    async def commit(self):
        self.store.countries = self.store.pending_countries
        self.store.status = self.store.pending_status
        self.store.begin()
        self.commits += 1

    async def rollback(self):
        self.store.begin()
        self.rollbacks += 1


class FakeCountryRepo:
    def __init__(self, store, fail_after=None):
        self.store = store
        self.fail_after = fail_after
        self.upserts = 0

    async def upsert(self, record):
        if self.fail_after is not None and self.upserts >= self.fail_after:
            raise RuntimeError("connection lost")
        self.upserts += 1
        key = record.name.lower()
        existing = self.store.pending_countries.get(key)
        row = asdict(record)
        row["id"] = existing.id if existing else uuid.uuid4()
        row["name"] = existing.name if existing else record.name
        self.store.pending_countries[key] = SimpleNamespace(**row)

    async def count(self):
        return len(self.store.pending_countries)

    async def top_by_gdp(self, limit=5):
        rows = sorted(
            self.store.pending_countries.values(),
            key=lambda c: (c.estimated_gdp is None, -(c.estimated_gdp or 0)),
        )
        return rows[:limit]


class FakeStatusRepo:
    def __init__(self, store):
        self.store = store

    async def update(self, total_countries, last_refreshed_at):
        self.store.pending_status = SimpleNamespace(
            total_countries=total_countries, last_refreshed_at=last_refreshed_at
        )


class FakeGateway:
    def __init__(self, countries=None, rates=None, error=None):
        self.countries = countries or []
        self.rates = rates or {}
        self.error = error
        self.calls = 0

    async def fetch(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.countries, self.rates


def make_service(store, gateway, tmp_path, fail_after=None):
    session = FakeSession(store)
    service = RefreshService(session, gateway=gateway, rng=random.Random(3), image_path=tmp_path / "cache" / "summary.png")
    service.country_repo = FakeCountryRepo(store, fail_after=fail_after)
    service.status_repo = FakeStatusRepo(store)
    return service, session


def test_join_rules():
    descriptors = [
        CountryDescriptor(name="Nocurrency", population=500, currency_codes=[]),
        CountryDescriptor(name="Unknownrate", population=500, currency_codes=["XYZ"]),
        CountryDescriptor(name="Empty", population=0, currency_codes=["EUR"]),
        CountryDescriptor(name="Nopop", population=None, currency_codes=["EUR"]),
        CountryDescriptor(name="Multi", population=10, currency_codes=["usd", "EUR"]),
    ]
    rates = {"EUR": Decimal("0.9"), "USD": Decimal("1")}

    records = join_countries(descriptors, rates, random.Random(1), NOW)

    assert [r.name for r in records] == ["Nocurrency", "Unknownrate", "Empty", "Nopop", "Multi"]
    nocurrency, unknown, empty, nopop, multi = records
    assert nocurrency.currency_code is None
    assert nocurrency.exchange_rate is None
    assert nocurrency.estimated_gdp == 0
    assert unknown.currency_code == "XYZ"
    assert unknown.exchange_rate is None
    assert unknown.estimated_gdp is None
    assert empty.estimated_gdp == 0
    assert nopop.population == 0
    assert nopop.estimated_gdp == 0
    assert multi.currency_code == "USD"
    assert multi.exchange_rate == Decimal("1")
    assert Decimal("10000") <= multi.estimated_gdp <= Decimal("20000")
    assert all(r.last_refreshed_at == NOW for r in records)


def test_join_matches_rate_keys_exactly():
    descriptors = [CountryDescriptor(name="Lowerland", population=10, currency_codes=["abc"])]
    records = join_countries(descriptors, {"abc": Decimal("1")}, random.Random(1), NOW)
    assert records[0].currency_code == "ABC"
    assert records[0].exchange_rate is None
    assert records[0].estimated_gdp is None


@pytest.mark.asyncio
async def test_refresh_persists_status_and_image(tmp_path):
    store = FakeStore()
    gateway = FakeGateway(
        countries=[
            CountryDescriptor(name="Testland", population=1_000_000, currency_codes=["abc"]),
            CountryDescriptor(name="Island", population=20, currency_codes=[]),
        ],
        rates={"ABC": Decimal("2.0")},
    )
    service, session = make_service(store, gateway, tmp_path)

    result = await service.refresh()

    assert session.commits == 1
    assert session.rollbacks == 0
    assert service.stage is RefreshStage.DONE
    assert result.total_countries == 2
    assert store.status.total_countries == 2
    assert store.status.last_refreshed_at == result.last_refreshed_at
    row = store.countries["testland"]
    assert row.currency_code == "ABC"
    assert row.exchange_rate == Decimal("2.0")
    assert Decimal("500000000") <= row.estimated_gdp <= Decimal("1000000000")
    assert store.countries["island"].estimated_gdp == 0
    assert (tmp_path / "cache" / "summary.png").is_file()


@pytest.mark.asyncio
async def test_refresh_overwrites_existing_row_case_insensitively(tmp_path):
    existing = SimpleNamespace(id=uuid.uuid4(), name="France", population=1, estimated_gdp=Decimal("1"))
    store = FakeStore([existing])
    gateway = FakeGateway(
        countries=[CountryDescriptor(name="FRANCE", population=100, currency_codes=["EUR"])],
        rates={"EUR": Decimal("0.5")},
    )
    service, _ = make_service(store, gateway, tmp_path)

    result = await service.refresh()

    assert result.total_countries == 1
    row = store.countries["france"]
    assert row.id == existing.id
    assert row.name == "France"
    assert row.population == 100


@pytest.mark.asyncio
async def test_external_failure_leaves_store_untouched(tmp_path):
    existing = SimpleNamespace(id=uuid.uuid4(), name="Oldland", population=5, estimated_gdp=None)
    store = FakeStore([existing])
    gateway = FakeGateway(error=ExternalSourceUnavailable("Exchange Rate API"))
    service, session = make_service(store, gateway, tmp_path)

    with pytest.raises(ExternalSourceUnavailable) as exc_info:
        await service.refresh()

    assert exc_info.value.kind is ErrorKind.EXTERNAL_UNAVAILABLE
    assert exc_info.value.source == "Exchange Rate API"
    assert service.stage is RefreshStage.FAILED
    assert service.country_repo.upserts == 0
    assert session.commits == 0
    assert list(store.countries) == ["oldland"]
    assert not (tmp_path / "cache" / "summary.png").exists()


@pytest.mark.asyncio
async def test_persistence_failure_rolls_back_everything(tmp_path):
    existing = SimpleNamespace(id=uuid.uuid4(), name="Oldland", population=5, estimated_gdp=None)
    store = FakeStore([existing])
    previous_status = store.status
    gateway = FakeGateway(
        countries=[
            CountryDescriptor(name="Alpha", population=10, currency_codes=["EUR"]),
            CountryDescriptor(name="Beta", population=10, currency_codes=["EUR"]),
            CountryDescriptor(name="Gamma", population=10, currency_codes=["EUR"]),
        ],
        rates={"EUR": Decimal("1")},
    )
    service, session = make_service(store, gateway, tmp_path, fail_after=2)

    with pytest.raises(InternalError) as exc_info:
        await service.refresh()

    assert exc_info.value.status_code == 500
    assert service.stage is RefreshStage.FAILED
    assert session.rollbacks == 1
    assert session.commits == 0
    assert list(store.countries) == ["oldland"]
    assert store.status is previous_status


@pytest.mark.asyncio
async def test_image_failure_aborts_before_commit(tmp_path, monkeypatch):
    store = FakeStore()
    gateway = FakeGateway(
        countries=[CountryDescriptor(name="Alpha", population=10, currency_codes=["EUR"])],
        rates={"EUR": Decimal("1")},
    )
    service, session = make_service(store, gateway, tmp_path)

    def broken_render(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr("app.services.refresh.render_summary_image", broken_render)

    with pytest.raises(InternalError):
        await service.refresh()

    assert session.commits == 0
    assert session.rollbacks == 1
    assert store.countries == {}
    assert store.status.total_countries == 0


@pytest.mark.asyncio
async def test_concurrent_refreshes_are_serialized(tmp_path):
    store = FakeStore()
    active = 0
    peak = 0

    class SlowGateway(FakeGateway):
        async def fetch(self):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return await super().fetch()

    gateway = SlowGateway(
        countries=[CountryDescriptor(name="Alpha", population=10, currency_codes=["EUR"])],
        rates={"EUR": Decimal("1")},
    )
    first, _ = make_service(store, gateway, tmp_path)
    second, _ = make_service(store, gateway, tmp_path)

    await asyncio.gather(first.refresh(), second.refresh())

    assert gateway.calls == 2
    assert peak == 1


@pytest.mark.asyncio
async def test_status_counts_all_rows_after_refresh(tmp_path):
    existing = SimpleNamespace(id=uuid.uuid4(), name="Oldland", population=5, estimated_gdp=None)
    store = FakeStore([existing])
    gateway = FakeGateway(
        countries=[CountryDescriptor(name="Alpha", population=10, currency_codes=["EUR"])],
        rates={"EUR": Decimal("1")},
    )
    service, _ = make_service(store, gateway, tmp_path)

    result = await service.refresh()

    assert result.total_countries == 2
    assert store.status.total_countries == 2
