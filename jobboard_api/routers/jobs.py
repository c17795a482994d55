from fastapi import APIRouter, Depends, HTTPException, Request
from typing import Optional

from ..backends.base import AlreadyAppliedError, Backend, BackendError, NotFoundError
from ..deps import get_backend, get_optional_session, require_candidate
from ..fetchers import DetailState, JobDetailFetcher, LoadState
from ..logging_config import get_logger
from ..presentation import experience_label, to_card, type_label
from ..schemas import (
    CATEGORIES,
    EXPERIENCE_LEVELS,
    JOB_TYPES,
    ApplicationOut,
    ApplyRequest,
    FilterOption,
    FilterOptionsOut,
    JobDetailResponse,
    JobListResponse,
    PaginationOut,
)
from ..session import UserSession
from ..views import JobsView

router = APIRouter(prefix="/jobs", tags=["jobs"])
logger = get_logger(__name__)


@router.get("", response_model=JobListResponse)
def list_jobs(request: Request, backend: Backend = Depends(get_backend)):
    """Listing for ``search``, ``location``, ``category``, ``type``, ``experience`` and ``page``.

    Empty parameters mean no constraint; a missing or malformed page is page 1.
    """
    view = JobsView.from_query_params(backend, request.query_params, base_url=router.prefix)
    result = view.load()
    pages = view.pagination
    return JobListResponse(
        state="error" if result.state is LoadState.ERROR else "success",
        jobs=[to_card(j) for j in result.jobs],
        total=result.total,
        filters=view.query_params,
        query_string=view.state.to_query_string(),
        clear_url=view.state.cleared().page_url(router.prefix, 1),
        pagination=PaginationOut(
            page=pages.current,
            page_size=pages.page_size,
            total=pages.total,
            total_pages=pages.total_pages,
            window=pages.window(),
            has_previous=pages.has_previous,
            has_next=pages.has_next,
            previous_url=view.page_url(pages.previous_page) if pages.has_previous else None,
            next_url=view.page_url(pages.next_page) if pages.has_next else None,
            page_urls={n: view.page_url(n) for n in pages.window()},
        ),
    )


@router.get("/filters", response_model=FilterOptionsOut)
def filter_options():
    return FilterOptionsOut(
        categories=[FilterOption(value=c, label=c) for c in CATEGORIES],
        types=[FilterOption(value=t, label=type_label(t)) for t in JOB_TYPES],
        experience_levels=[FilterOption(value=e, label=experience_label(e)) for e in EXPERIENCE_LEVELS],
    )


@router.get("/{job_id}", response_model=JobDetailResponse)
def get_job(
    job_id: str,
    backend: Backend = Depends(get_backend),
    session: Optional[UserSession] = Depends(get_optional_session),
):
    detail = JobDetailFetcher(backend).fetch(job_id, session)
    if detail.state is DetailState.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Job not found")
    if detail.state is DetailState.ERROR:
        raise HTTPException(status_code=503, detail="Could not load this job right now")
    return JobDetailResponse(
        job=to_card(detail.job),
        application_status=detail.application.value if detail.application else None,
        apply_action=detail.action.value,
    )


@router.post("/{job_id}/apply", response_model=ApplicationOut, status_code=201)
def apply(
    job_id: str,
    payload: ApplyRequest,
    backend: Backend = Depends(get_backend),
    session: UserSession = Depends(require_candidate),
):
    try:
        return backend.insert_application(session, job_id, payload.cover_letter, payload.resume_url)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")
    except AlreadyAppliedError:
        raise HTTPException(status_code=409, detail="You have already applied for this job")
    except BackendError as e:
        logger.error("apply failed job=%s candidate=%s: %s", job_id, session.user_id, e)
        raise HTTPException(status_code=502, detail="Could not submit your application")
