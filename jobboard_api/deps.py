# jobboard_api/deps.py
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from .backends.base import Backend, BackendError
from .backends.rest import RestBackend
from .backends.sql import SqlBackend
from .config import settings
from .db import SessionLocal
from .logging_config import get_logger
from .session import UserSession

logger = get_logger(__name__)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_backend(request: Request, db: Session = Depends(get_db)) -> Backend:
    """REST backend when BACKEND_URL is configured, otherwise the SQL database."""
    client = getattr(request.app.state, "rest_client", None)
    if settings.use_rest_backend and client is not None:
        return RestBackend(client, settings.BACKEND_ANON_KEY)
    return SqlBackend(db)


def bearer_token(authorization: str | None = Header(None)) -> Optional[str]:
    """Token from ``Authorization: Bearer ...``; any other header reads as anonymous."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        logger.debug("ignoring non-bearer Authorization header")
        return None
    return token.strip()


def get_optional_session(
    token: Optional[str] = Depends(bearer_token),
    backend: Backend = Depends(get_backend),
) -> Optional[UserSession]:
    """Session for the request, or None for anonymous visitors.

    An unknown or expired token is treated as anonymous.
    """
    if token is None:
        return None
    try:
        return backend.resolve_session(token)
    except BackendError as e:
        logger.warning("session lookup failed: %s", e)
        raise HTTPException(status_code=503, detail="Authentication service unavailable")


def require_session(session: Optional[UserSession] = Depends(get_optional_session)) -> UserSession:
    if session is None:
        raise HTTPException(status_code=401, detail="Sign in required")
    return session


def require_candidate(session: UserSession = Depends(require_session)) -> UserSession:
    """Client-side role gate; the backend enforces the real rule."""
    if not session.is_candidate:
        raise HTTPException(status_code=403, detail="Only candidates can apply for jobs.")
    return session
