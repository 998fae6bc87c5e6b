from app.models.country import Country  # noqa: F401
from app.models.refresh_status import RefreshStatus  # noqa: F401
from app.models.enums import CountrySort, ErrorKind, RefreshStage  # noqa: F401
