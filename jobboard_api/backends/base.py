"""Backend interface.

The job board never talks to storage directly: every read and write goes
through a ``Backend``. Implementations raise the exceptions below instead of
returning empty results, so callers can tell "nothing matched" from "the
backend is down".
"""
from typing import List, Optional, Tuple

from ..query import JobQuery
from ..schemas import ApplicationOut, JobOut, ProfileOut
from ..session import UserSession


class BackendError(Exception):
    """Base class for backend failures."""


class BackendUnavailableError(BackendError):
    """The backend could not be reached or answered with a server error."""


class ConfigurationError(BackendError):
    """The backend settings are missing or still hold placeholder values."""


class NotFoundError(BackendError):
    pass


class AlreadyAppliedError(BackendError):
    """The (job, candidate) pair already has an application."""


class AuthError(BackendError):
    """Bad credentials or an unknown/expired token."""


class DuplicateAccountError(BackendError):
    pass


class Backend:
    """Row storage plus authentication, as consumed by the views."""

    # ---- jobs ----
    def select_jobs(self, query: JobQuery) -> Tuple[List[JobOut], Optional[int]]:
        """Run ``query``; the second item is the exact total when ``query.count_total``."""
        raise NotImplementedError

    def get_job(self, job_id: str, status: Optional[str] = "active") -> Optional[JobOut]:
        raise NotImplementedError

    # ---- applications ----
    def find_application(self, job_id: str, session: UserSession) -> Optional[ApplicationOut]:
        """The application the session's user made for ``job_id``, if any."""
        raise NotImplementedError

    def insert_application(
        self, session: UserSession, job_id: str, cover_letter: str, resume_url: str
    ) -> ApplicationOut:
        raise NotImplementedError

    # ---- auth ----
    def sign_up(
        self,
        email: str,
        password: str,
        role: str,
        full_name: Optional[str] = None,
        company_name: Optional[str] = None,
    ) -> UserSession:
        raise NotImplementedError

    def sign_in(self, email: str, password: str) -> UserSession:
        raise NotImplementedError

    def sign_out(self, access_token: str) -> None:
        raise NotImplementedError

    def resolve_session(self, access_token: str) -> Optional[UserSession]:
        """Session for ``access_token``, or None when it is unknown or expired."""
        raise NotImplementedError

    def get_profile(self, user_id: str) -> Optional[ProfileOut]:
        raise NotImplementedError

    def close(self) -> None:
        pass
