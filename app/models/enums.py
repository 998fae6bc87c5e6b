from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    EXTERNAL_UNAVAILABLE = "external_unavailable"
    INTERNAL = "internal"


class RefreshStage(str, Enum):
    FETCHING = "FETCHING"
    JOINING = "JOINING"
    PERSISTING = "PERSISTING"
    REPORTING = "REPORTING"
    DONE = "DONE"
    FAILED = "FAILED"


class CountrySort(str, Enum):
    GDP_DESC = "gdp_desc"
    GDP_ASC = "gdp_asc"

    @classmethod
    def parse(cls, value: str | None) -> CountrySort | None:
        try:
            return cls(value) if value else None
        except ValueError:
            return None
