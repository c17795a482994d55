"""Fetchers: run one backend request per view change and publish its state.

Each fetcher hands out a ticket per request from a monotonic generation
counter. Only the newest ticket may publish; a response that resolves after
a newer request was issued is dropped.
"""
from __future__ import annotations

import enum
import itertools
import threading
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .backends.base import Backend, BackendError
from .filters import FilterState
from .logging_config import get_logger
from .query import (
    FEATURED_LIMIT,
    LISTING_PAGE_SIZE,
    RECENT_LIMIT,
    compose_featured_query,
    compose_listing_query,
    compose_recent_query,
)
from .schemas import ApplicationOut, JobOut
from .session import UserSession

logger = get_logger(__name__)


class LoadState(str, enum.Enum):
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class DetailState(str, enum.Enum):
    LOADING = "loading"
    LOADED = "loaded"
    NOT_FOUND = "not_found"
    ERROR = "error"


class ApplicationCheck(str, enum.Enum):
    APPLIED = "applied"
    NOT_APPLIED = "not_applied"
    UNKNOWN = "unknown"      # the lookup itself failed


class ApplyAction(str, enum.Enum):
    SIGN_IN = "sign_in"
    APPLY = "apply"
    ALREADY_APPLIED = "already_applied"
    EDIT = "edit"
    NONE = "none"


class _Generations:
    def __init__(self):
        self._counter = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()

    def issue(self) -> int:
        with self._lock:
            self._latest = next(self._counter)
            return self._latest

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._latest


# -----------------------
# Listing
# -----------------------
@dataclass
class ListingResult:
    state: LoadState
    jobs: List[JobOut] = field(default_factory=list)
    total: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.jobs


class ListingFetcher:
    def __init__(self, backend: Backend, page_size: int = LISTING_PAGE_SIZE):
        self.backend = backend
        self.page_size = page_size
        self._generations = _Generations()
        self.result = ListingResult(LoadState.LOADING)

    def begin(self) -> int:
        self.result = ListingResult(LoadState.LOADING)
        return self._generations.issue()

    def complete(self, ticket: int, jobs: List[JobOut], total: int) -> bool:
        if not self._generations.is_current(ticket):
            logger.debug("dropping stale listing response ticket=%d", ticket)
            return False
        self.result = ListingResult(LoadState.SUCCESS, list(jobs), total)
        return True

    def fail(self, ticket: int, exc: Exception) -> bool:
        if not self._generations.is_current(ticket):
            logger.debug("dropping stale listing failure ticket=%d: %s", ticket, exc)
            return False
        # shown as "No jobs found"
        self.result = ListingResult(LoadState.ERROR)
        return True

    def fetch(self, state: FilterState) -> ListingResult:
        ticket = self.begin()
        query = compose_listing_query(state, self.page_size)
        try:
            jobs, total = self.backend.select_jobs(query)
        except BackendError as e:
            logger.error("job listing fetch failed (%s): %s", query.describe(), e)
            self.fail(ticket, e)
        else:
            self.complete(ticket, jobs, total if total is not None else len(jobs))
        return self.result


# -----------------------
# Detail
# -----------------------
@dataclass
class JobDetail:
    state: DetailState
    job: Optional[JobOut] = None
    application: Optional[ApplicationCheck] = None
    action: ApplyAction = ApplyAction.NONE


def apply_action_for(job: JobOut, session: Optional[UserSession], check: Optional[ApplicationCheck]) -> ApplyAction:
    """Which apply control the detail page shows."""
    if session is None:
        return ApplyAction.SIGN_IN
    if session.is_candidate:
        if check is ApplicationCheck.APPLIED:
            return ApplyAction.ALREADY_APPLIED
        return ApplyAction.APPLY
    if session.is_employer and session.user_id == job.employer_id:
        return ApplyAction.EDIT
    return ApplyAction.NONE


class JobDetailFetcher:
    def __init__(self, backend: Backend):
        self.backend = backend
        self._generations = _Generations()
        self.detail = JobDetail(DetailState.LOADING)

    def check_application(self, job_id: str, session: UserSession) -> ApplicationCheck:
        try:
            found: Optional[ApplicationOut] = self.backend.find_application(job_id, session)
        except BackendError as e:
            logger.warning("application lookup failed job=%s candidate=%s: %s", job_id, session.user_id, e)
            return ApplicationCheck.UNKNOWN
        return ApplicationCheck.APPLIED if found is not None else ApplicationCheck.NOT_APPLIED

    def fetch(self, job_id: str, session: Optional[UserSession] = None) -> JobDetail:
        ticket = self._generations.issue()
        self.detail = JobDetail(DetailState.LOADING)
        try:
            job = self.backend.get_job(job_id, status="active")
        except BackendError as e:
            logger.error("job detail fetch failed job=%s: %s", job_id, e)
            return self._publish(ticket, JobDetail(DetailState.ERROR))
        if job is None:
            return self._publish(ticket, JobDetail(DetailState.NOT_FOUND))

        check = None
        if session is not None and session.is_candidate:
            check = self.check_application(job_id, session)
        detail = JobDetail(DetailState.LOADED, job, check, apply_action_for(job, session, check))
        return self._publish(ticket, detail)

    def _publish(self, ticket: int, detail: JobDetail) -> JobDetail:
        if self._generations.is_current(ticket):
            self.detail = detail
        else:
            logger.debug("dropping stale detail response ticket=%d", ticket)
        return self.detail


# -----------------------
# Home
# -----------------------
class HomeFetcher:
    def __init__(self, backend: Backend):
        self.backend = backend

    def _section(self, name: str, query) -> List[JobOut]:
        try:
            jobs, _ = self.backend.select_jobs(query)
        except BackendError as e:
            logger.error("home %s fetch failed: %s", name, e)
            return []
        return jobs

    def fetch(self, featured_limit: int = FEATURED_LIMIT, recent_limit: int = RECENT_LIMIT) -> Tuple[List[JobOut], List[JobOut]]:
        featured = self._section("featured", compose_featured_query(featured_limit))
        recent = self._section("recent", compose_recent_query(recent_limit))
        return featured, recent
