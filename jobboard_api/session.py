from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .schemas import ProfileOut


@dataclass(frozen=True)
class UserSession:
    """The signed-in user a request acts for.

    Resolved once per request from the bearer token and handed explicitly to
    whatever needs it; there is no module-level "current user".
    """

    user_id: str
    email: str
    role: str
    access_token: str
    profile: Optional[ProfileOut] = None
    expires_at: Optional[datetime] = None

    @property
    def is_candidate(self) -> bool:
        return self.role == "candidate"

    @property
    def is_employer(self) -> bool:
        return self.role == "employer"
