"""SQLAlchemy backend: jobs, applications and accounts in a SQL database."""
import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..logging_config import get_logger
from ..models import ApplicationORM, AuthSessionORM, JobORM, ProfileORM, UserORM
from ..query import AnyOf, Eq, ILike, JobQuery, Predicate
from ..schemas import ApplicationOut, JobOut, ProfileOut
from ..session import UserSession
from .base import (
    AlreadyAppliedError,
    AuthError,
    Backend,
    BackendError,
    BackendUnavailableError,
    DuplicateAccountError,
    NotFoundError,
)

logger = get_logger(__name__)

PBKDF2_ITERATIONS = 260_000
_LIKE_ESCAPE = "\\"


# -----------------------
# Passwords
# -----------------------
def hash_password(password: str, *, salt: Optional[str] = None, iterations: int = PBKDF2_ITERATIONS) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("ascii"), iterations)
    return f"pbkdf2_sha256${iterations}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt, expected = encoded.split("$", 3)
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    candidate = hash_password(password, salt=salt, iterations=int(iterations))
    return hmac.compare_digest(candidate.rsplit("$", 1)[1], expected)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _escape_like(term: str) -> str:
    return term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2).replace("%", r"\%").replace("_", r"\_")


# -----------------------
# Query translation
# -----------------------
def _column(name: str):
    try:
        return JobORM.__table__.c[name]
    except KeyError:
        raise BackendError(f"unknown jobs column: {name!r}") from None


def to_clause(pred: Predicate):
    if isinstance(pred, Eq):
        return _column(pred.column) == pred.value
    if isinstance(pred, ILike):
        return _column(pred.column).ilike(f"%{_escape_like(pred.term)}%", escape=_LIKE_ESCAPE)
    if isinstance(pred, AnyOf):
        return or_(*(to_clause(o) for o in pred.options))
    raise BackendError(f"unsupported predicate: {pred!r}")


def build_select(query: JobQuery):
    clauses = [to_clause(p) for p in query.predicates]
    stmt = select(JobORM).where(*clauses)
    order = [_column(k.column).desc() if k.descending else _column(k.column).asc() for k in query.order]
    # id keeps page boundaries stable when the sort keys tie
    stmt = stmt.order_by(*order, JobORM.id.asc())
    if query.range is not None:
        stmt = stmt.offset(query.range.start).limit(query.range.limit)
    return stmt, clauses


class SqlBackend(Backend):
    def __init__(self, db: Session, session_ttl: Optional[timedelta] = None):
        self.db = db
        self.session_ttl = session_ttl or timedelta(hours=settings.SESSION_TTL_HOURS)

    def _fail(self, exc: SQLAlchemyError) -> BackendError:
        self.db.rollback()
        if isinstance(exc, OperationalError):
            return BackendUnavailableError(str(exc.orig or exc))
        return BackendError(str(exc))

    # ---- jobs ----
    def select_jobs(self, query: JobQuery) -> Tuple[List[JobOut], Optional[int]]:
        stmt, clauses = build_select(query)
        try:
            rows = self.db.scalars(stmt).all()
            total = None
            if query.count_total:
                total = self.db.scalar(select(func.count()).select_from(JobORM).where(*clauses))
        except SQLAlchemyError as e:
            raise self._fail(e) from e
        return [JobOut.model_validate(r) for r in rows], total

    def get_job(self, job_id: str, status: Optional[str] = "active") -> Optional[JobOut]:
        stmt = select(JobORM).where(JobORM.id == job_id)
        if status is not None:
            stmt = stmt.where(JobORM.status == status)
        try:
            row = self.db.scalars(stmt).first()
        except SQLAlchemyError as e:
            raise self._fail(e) from e
        return JobOut.model_validate(row) if row is not None else None

    # ---- applications ----
    def find_application(self, job_id: str, session: UserSession) -> Optional[ApplicationOut]:
        stmt = select(ApplicationORM).where(
            ApplicationORM.job_id == job_id, ApplicationORM.candidate_id == session.user_id
        )
        try:
            row = self.db.scalars(stmt).first()
        except SQLAlchemyError as e:
            raise self._fail(e) from e
        return ApplicationOut.model_validate(row) if row is not None else None

    def insert_application(self, session, job_id, cover_letter, resume_url) -> ApplicationOut:
        if self.get_job(job_id) is None:
            raise NotFoundError(f"job {job_id} not found")
        app_row = ApplicationORM(
            job_id=job_id,
            candidate_id=session.user_id,
            cover_letter=cover_letter,
            resume_url=resume_url,
            status="pending",
        )
        try:
            self.db.add(app_row)
            self.db.flush()
            self.db.execute(
                update(JobORM)
                .where(JobORM.id == job_id)
                .values(applications_count=JobORM.applications_count + 1)
            )
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise AlreadyAppliedError(f"candidate {session.user_id} already applied to job {job_id}") from e
        except SQLAlchemyError as e:
            raise self._fail(e) from e
        self.db.refresh(app_row)
        logger.info("application stored job=%s candidate=%s", job_id, session.user_id)
        return ApplicationOut.model_validate(app_row)

    # ---- auth ----
    def sign_up(self, email, password, role, full_name=None, company_name=None) -> UserSession:
        email = email.strip().lower()
        user = UserORM(email=email, password_hash=hash_password(password))
        try:
            self.db.add(user)
            self.db.flush()
            self.db.add(ProfileORM(
                user_id=user.id,
                email=email,
                role=role,
                full_name=full_name,
                company_name=company_name,
            ))
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateAccountError(f"an account already exists for {email}") from e
        except SQLAlchemyError as e:
            raise self._fail(e) from e
        logger.info("account created user=%s role=%s", user.id, role)
        return self._open_session(user)

    def sign_in(self, email: str, password: str) -> UserSession:
        try:
            user = self.db.scalars(select(UserORM).where(UserORM.email == email.strip().lower())).first()
        except SQLAlchemyError as e:
            raise self._fail(e) from e
        if user is None or not verify_password(password, user.password_hash):
            raise AuthError("invalid email or password")
        return self._open_session(user)

    def _open_session(self, user: UserORM) -> UserSession:
        token = secrets.token_urlsafe(32)
        expires_at = datetime.now(timezone.utc) + self.session_ttl
        try:
            self.db.add(AuthSessionORM(token=token, user_id=user.id, expires_at=expires_at))
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail(e) from e
        session = self.resolve_session(token)
        if session is None:
            raise BackendError("session vanished right after creation")
        return session

    def sign_out(self, access_token: str) -> None:
        try:
            row = self.db.get(AuthSessionORM, access_token)
            if row is not None:
                self.db.delete(row)
                self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail(e) from e

    def resolve_session(self, access_token: str) -> Optional[UserSession]:
        try:
            row = self.db.get(AuthSessionORM, access_token)
            if row is None:
                return None
            if _as_utc(row.expires_at) <= datetime.now(timezone.utc):
                return None
            user = self.db.get(UserORM, row.user_id)
            profile = self.get_profile(row.user_id)
        except SQLAlchemyError as e:
            raise self._fail(e) from e
        if user is None or profile is None:
            return None
        return UserSession(
            user_id=user.id,
            email=user.email,
            role=profile.role,
            access_token=access_token,
            profile=profile,
            expires_at=_as_utc(row.expires_at),
        )

    def get_profile(self, user_id: str) -> Optional[ProfileOut]:
        try:
            row = self.db.scalars(select(ProfileORM).where(ProfileORM.user_id == user_id)).first()
        except SQLAlchemyError as e:
            raise self._fail(e) from e
        return ProfileOut.model_validate(row) if row is not None else None

    def close(self) -> None:
        self.db.close()
