from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ..backends.base import AuthError, Backend, BackendError, DuplicateAccountError
from ..deps import bearer_token, get_backend, require_session
from ..logging_config import get_logger
from ..schemas import ProfileOut, SignInRequest, SignUpRequest, TokenResponse
from ..session import UserSession

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)


def _token_response(session: UserSession) -> TokenResponse:
    if session.profile is None:
        raise HTTPException(status_code=500, detail="Account has no profile")
    return TokenResponse(
        access_token=session.access_token,
        expires_at=session.expires_at,
        profile=session.profile,
    )


@router.post("/signup", response_model=TokenResponse, status_code=201)
def sign_up(payload: SignUpRequest, backend: Backend = Depends(get_backend)):
    try:
        session = backend.sign_up(
            payload.email,
            payload.password,
            payload.role,
            full_name=payload.full_name,
            company_name=payload.company_name,
        )
    except DuplicateAccountError:
        raise HTTPException(status_code=409, detail="An account with this email already exists")
    except AuthError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BackendError as e:
        logger.error("sign up failed: %s", e)
        raise HTTPException(status_code=502, detail="Could not create the account")
    return _token_response(session)


@router.post("/signin", response_model=TokenResponse)
def sign_in(payload: SignInRequest, backend: Backend = Depends(get_backend)):
    try:
        session = backend.sign_in(payload.email, payload.password)
    except AuthError:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    except BackendError as e:
        logger.error("sign in failed: %s", e)
        raise HTTPException(status_code=502, detail="Could not sign in")
    return _token_response(session)


@router.post("/signout", status_code=204)
def sign_out(token: Optional[str] = Depends(bearer_token), backend: Backend = Depends(get_backend)):
    if token is None:
        return None
    try:
        backend.sign_out(token)
    except BackendError as e:
        logger.error("sign out failed: %s", e)
        raise HTTPException(status_code=502, detail="Could not sign out")
    return None


@router.get("/me", response_model=ProfileOut)
def me(session: UserSession = Depends(require_session)):
    if session.profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return session.profile
