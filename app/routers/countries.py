from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from app.core.config import get_settings
from app.core.deps import get_country_repo, get_refresh_service
from app.core.errors import NotFoundError
from app.models.enums import CountrySort
from app.repositories.country_repo import CountryRepository
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.country import CountryRead, RefreshResponse
from app.services.refresh import RefreshService

router = APIRouter(
    prefix="/countries",
    tags=["countries"],
    responses={500: {"model": ErrorResponse}},
)

COUNTRY_NOT_FOUND = "Country not found"


@router.post("/refresh", response_model=RefreshResponse, responses={503: {"model": ErrorResponse}})
async def refresh_countries(service: RefreshService = Depends(get_refresh_service)):
    result = await service.refresh()
    return RefreshResponse(
        message="Country data and exchange rates refreshed successfully.",
        total_countries=result.total_countries,
        last_refreshed_at=result.last_refreshed_at,
    )


@router.get("/image", response_class=FileResponse, responses={404: {"model": ErrorResponse}})
async def summary_image():
    path = get_settings().summary_image_path
    if not path.is_file():
        raise NotFoundError("Summary image not found")
    return FileResponse(path, media_type="image/png")


@router.get("", response_model=list[CountryRead])
async def list_countries(
    region: str | None = None,
    currency: str | None = None,
    sort: str | None = None,
    repo: CountryRepository = Depends(get_country_repo),
):
    return await repo.list(region=region, currency=currency, sort=CountrySort.parse(sort))


@router.get("/{name}", response_model=CountryRead, responses={404: {"model": ErrorResponse}})
async def get_country(name: str, repo: CountryRepository = Depends(get_country_repo)):
    country = await repo.get_by_name(name)
    if not country:
        raise NotFoundError(COUNTRY_NOT_FOUND)
    return country


@router.delete("/{name}", response_model=MessageResponse, responses={404: {"model": ErrorResponse}})
async def delete_country(name: str, repo: CountryRepository = Depends(get_country_repo)):
    if not await repo.delete_by_name(name):
        raise NotFoundError(COUNTRY_NOT_FOUND)
    return MessageResponse(message="Country deleted successfully.")
