"""REST backend for the hosted data/auth service.

Rows are read and written through PostgREST (``/rest/v1``) and accounts go
through GoTrue (``/auth/v1``). Failures are raised, never papered over with
empty results: an unreachable service is ``BackendUnavailableError``.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

import httpx

from ..config import Settings
from ..logging_config import get_logger
from ..query import AnyOf, Eq, ILike, JobQuery, Predicate
from ..schemas import ApplicationOut, JobOut, ProfileOut
from ..session import UserSession
from .base import (
    AlreadyAppliedError,
    AuthError,
    Backend,
    BackendError,
    BackendUnavailableError,
    ConfigurationError,
    DuplicateAccountError,
    NotFoundError,
)

logger = get_logger(__name__)

_PLACEHOLDERS = ("your_supabase_project_url_here", "your_supabase_anon_key_here")
_RESERVED = set(',.:()"')


def validate_backend_config(url: str, anon_key: str) -> None:
    """Raise ConfigurationError unless ``url``/``anon_key`` look usable."""
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"BACKEND_URL is not an absolute http(s) URL: {url!r}")
    if not anon_key:
        raise ConfigurationError("BACKEND_ANON_KEY is empty")
    for marker in _PLACEHOLDERS:
        if marker in url or marker in anon_key:
            raise ConfigurationError("backend settings still contain placeholder values")


def create_client(settings: Settings) -> httpx.Client:
    validate_backend_config(settings.BACKEND_URL, settings.BACKEND_ANON_KEY)
    headers = {
        "apikey": settings.BACKEND_ANON_KEY,
        "Accept": "application/json",
        "User-Agent": "JobBoardAPI/0.1 httpx",
    }
    return httpx.Client(
        base_url=settings.BACKEND_URL.rstrip("/"),
        headers=headers,
        timeout=settings.BACKEND_TIMEOUT_SECONDS,
    )


# -----------------------
# Query translation
# -----------------------
def _value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _literal(value: Any) -> str:
    """Value as written inside an ``or=(...)`` list, quoted when it holds reserved characters."""
    text = _value(value)
    if any(ch in _RESERVED for ch in text):
        return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return text


def _like_pattern(term: str) -> str:
    """``*term*`` with LIKE metacharacters escaped.

    PostgREST turns every ``*`` into ``%`` and offers no escape for it, so a
    literal ``*`` becomes the single-character wildcard ``_``.
    """
    escaped = term.replace("\\", "\\\\").replace("%", r"\%").replace("_", r"\_").replace("*", "_")
    return f"*{escaped}*"


def _condition(pred: Predicate) -> str:
    """``column.op.value`` form used inside ``or=(...)``."""
    if isinstance(pred, Eq):
        return f"{pred.column}.eq.{_literal(pred.value)}"
    if isinstance(pred, ILike):
        return f"{pred.column}.ilike.{_literal(_like_pattern(pred.term))}"
    if isinstance(pred, AnyOf):
        return "or(" + ",".join(_condition(o) for o in pred.options) + ")"
    raise BackendError(f"unsupported predicate: {pred!r}")


def to_params(query: JobQuery) -> List[Tuple[str, str]]:
    """PostgREST query parameters for ``query`` (a list, since keys may repeat).

    Top-level filters take their value verbatim; quoting only applies inside
    the ``or=(...)`` list.
    """
    params: List[Tuple[str, str]] = [("select", "*")]
    for pred in query.predicates:
        if isinstance(pred, Eq):
            params.append((pred.column, f"eq.{_value(pred.value)}"))
        elif isinstance(pred, ILike):
            params.append((pred.column, f"ilike.{_like_pattern(pred.term)}"))
        elif isinstance(pred, AnyOf):
            params.append(("or", "(" + ",".join(_condition(o) for o in pred.options) + ")"))
        else:
            raise BackendError(f"unsupported predicate: {pred!r}")
    if query.order:
        params.append(("order", ",".join(f"{k.column}.{'desc' if k.descending else 'asc'}" for k in query.order)))
    if query.range is not None:
        params.append(("offset", str(query.range.start)))
        params.append(("limit", str(query.range.limit)))
    return params


def parse_content_range(header: Optional[str]) -> Optional[int]:
    """Total from a ``Content-Range: 0-11/25`` header (``*/0`` for no rows)."""
    if not header or "/" not in header:
        return None
    total = header.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None


class RestBackend(Backend):
    def __init__(self, client: httpx.Client, anon_key: str):
        self.client = client
        self.anon_key = anon_key

    # -----------------------
    # HTTP plumbing
    # -----------------------
    def _headers(self, token: Optional[str] = None, **extra: str) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {token or self.anon_key}"}
        headers.update(extra)
        return headers

    def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            resp = self.client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            raise BackendUnavailableError(f"{method} {path} failed: {e!s}") from e
        if resp.status_code >= 500:
            raise BackendUnavailableError(f"{method} {path} -> {resp.status_code}")
        return resp

    @staticmethod
    def _check(resp: httpx.Response) -> httpx.Response:
        if resp.status_code >= 400:
            raise BackendError(f"{resp.request.method} {resp.request.url.path} -> {resp.status_code}: {resp.text[:200]}")
        return resp

    # ---- jobs ----
    def select_jobs(self, query: JobQuery) -> Tuple[List[JobOut], Optional[int]]:
        headers = self._headers()
        if query.count_total:
            headers["Prefer"] = "count=exact"
        resp = self._check(self._send("GET", "/rest/v1/jobs", params=to_params(query), headers=headers))
        rows = [JobOut.model_validate(r) for r in resp.json()]
        total = parse_content_range(resp.headers.get("content-range")) if query.count_total else None
        return rows, total

    def get_job(self, job_id: str, status: Optional[str] = "active") -> Optional[JobOut]:
        params = [("select", "*"), ("id", f"eq.{_literal(job_id)}"), ("limit", "1")]
        if status is not None:
            params.append(("status", f"eq.{status}"))
        resp = self._check(self._send("GET", "/rest/v1/jobs", params=params, headers=self._headers()))
        rows = resp.json()
        return JobOut.model_validate(rows[0]) if rows else None

    # ---- applications ----
    def find_application(self, job_id: str, session: UserSession) -> Optional[ApplicationOut]:
        params = [
            ("select", "*"),
            ("job_id", f"eq.{_literal(job_id)}"),
            ("candidate_id", f"eq.{_literal(session.user_id)}"),
            ("limit", "1"),
        ]
        resp = self._check(self._send(
            "GET", "/rest/v1/applications", params=params, headers=self._headers(session.access_token)
        ))
        rows = resp.json()
        return ApplicationOut.model_validate(rows[0]) if rows else None

    def insert_application(self, session, job_id, cover_letter, resume_url) -> ApplicationOut:
        if self.get_job(job_id) is None:
            raise NotFoundError(f"job {job_id} not found")
        payload = {
            "job_id": job_id,
            "candidate_id": session.user_id,
            "cover_letter": cover_letter,
            "resume_url": resume_url,
            "status": "pending",
        }
        resp = self._send(
            "POST",
            "/rest/v1/applications",
            json=payload,
            headers=self._headers(session.access_token, Prefer="return=representation"),
        )
        if resp.status_code == 409:
            raise AlreadyAppliedError(f"candidate {session.user_id} already applied to job {job_id}")
        rows = self._check(resp).json()
        logger.info("application stored job=%s candidate=%s", job_id, session.user_id)
        return ApplicationOut.model_validate(rows[0] if isinstance(rows, list) else rows)

    # ---- auth ----
    def sign_up(self, email, password, role, full_name=None, company_name=None) -> UserSession:
        body = {"email": email, "password": password, "data": {"full_name": full_name, "role": role}}
        resp = self._send("POST", "/auth/v1/signup", json=body, headers=self._headers())
        if resp.status_code in (400, 422) and "registered" in resp.text.lower():
            raise DuplicateAccountError(f"an account already exists for {email}")
        data = self._check(resp).json()
        if not data.get("access_token"):
            raise AuthError("account created but no session was issued (email confirmation pending?)")
        user = data["user"]
        profile = {
            "user_id": user["id"],
            "email": email,
            "role": role,
            "full_name": full_name,
            "company_name": company_name,
        }
        self._check(self._send(
            "POST",
            "/rest/v1/profiles",
            json=profile,
            headers=self._headers(data["access_token"], Prefer="return=minimal"),
        ))
        return self._session_from_token_payload(data)

    def sign_in(self, email: str, password: str) -> UserSession:
        resp = self._send(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            headers=self._headers(),
        )
        if resp.status_code in (400, 401):
            raise AuthError("invalid email or password")
        return self._session_from_token_payload(self._check(resp).json())

    def sign_out(self, access_token: str) -> None:
        resp = self._send("POST", "/auth/v1/logout", headers=self._headers(access_token))
        if resp.status_code not in (401, 403):
            self._check(resp)

    def resolve_session(self, access_token: str) -> Optional[UserSession]:
        resp = self._send("GET", "/auth/v1/user", headers=self._headers(access_token))
        if resp.status_code in (401, 403):
            return None
        user = self._check(resp).json()
        return self._build_session(user, access_token, None)

    def get_profile(self, user_id: str, token: Optional[str] = None) -> Optional[ProfileOut]:
        params = [("select", "*"), ("user_id", f"eq.{_literal(user_id)}"), ("limit", "1")]
        resp = self._check(self._send("GET", "/rest/v1/profiles", params=params, headers=self._headers(token)))
        rows = resp.json()
        return ProfileOut.model_validate(rows[0]) if rows else None

    def _session_from_token_payload(self, data: Dict[str, Any]) -> UserSession:
        expires_at = None
        if data.get("expires_in"):
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=int(data["expires_in"]))
        return self._build_session(data["user"], data["access_token"], expires_at)

    def _build_session(self, user: Dict[str, Any], token: str, expires_at: Optional[datetime]) -> UserSession:
        profile = self.get_profile(user["id"], token)
        role = profile.role if profile else (user.get("user_metadata") or {}).get("role", "candidate")
        return UserSession(
            user_id=user["id"],
            email=user.get("email", ""),
            role=role,
            access_token=token,
            profile=profile,
            expires_at=expires_at,
        )
