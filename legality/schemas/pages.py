"""Page view schemas returned by the route guard to the portal shell."""

from pydantic import BaseModel

from legality.schemas.auth import RouterStatusResponse
from legality.schemas.profile import ProfileResponse


class PageView(BaseModel):
    """Which screen the shell renders for path, for the current profile."""

    view: str
    path: str
    status: RouterStatusResponse
    profile: ProfileResponse | None = None


class PageError(BaseModel):
    """Bootstrap failure screen: message plus a manual reload action."""

    view: str = "error"
    message: str
    action: str = "reload"
