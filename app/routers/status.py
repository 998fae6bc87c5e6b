from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.deps import get_status_repo
from app.core.errors import InternalError
from app.repositories.status_repo import StatusRepository
from app.schemas.common import ErrorResponse
from app.schemas.status import StatusRead

router = APIRouter(prefix="/status", tags=["status"], responses={500: {"model": ErrorResponse}})


@router.get("", response_model=StatusRead)
async def get_status(repo: StatusRepository = Depends(get_status_repo)):
    status = await repo.get()
    if status is None:
        raise InternalError(details="Status record missing from database.")
    return status
