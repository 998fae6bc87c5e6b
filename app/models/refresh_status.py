from __future__ import annotations

from datetime import datetime
from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base

STATUS_ROW_ID = 1


class RefreshStatus(Base):
    __tablename__ = "refresh_status"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=STATUS_ROW_ID)
    total_countries: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_refreshed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
