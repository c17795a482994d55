"""
Tests for fetchers.py and views.py - load states, stale responses and
filter/page synchronisation.
"""

from datetime import datetime, timezone

import pytest

from jobboard_api.fetchers import (
    ApplicationCheck,
    ApplyAction,
    DetailState,
    HomeFetcher,
    JobDetailFetcher,
    ListingFetcher,
    LoadState,
    apply_action_for,
)
from jobboard_api.filters import FilterState
from jobboard_api.query import ACTIVE
from jobboard_api.schemas import JobOut
from jobboard_api.session import UserSession
from jobboard_api.views import JobsView

from fakes import FakeBackend


def _job(job_id="job-1", employer_id="emp-1", **extra):
    data = dict(
        id=job_id,
        employer_id=employer_id,
        title="Engineer",
        company="Acme",
        location="Berlin",
        type="full-time",
        category="Technology",
        experience_level="mid",
        description="Build",
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )
    data.update(extra)
    return JobOut(**data)


def _session(user_id, role="candidate"):
    return UserSession(user_id=user_id, email=f"{user_id}@example.com", role=role, access_token=f"tok-{user_id}")


class TestListingFetcher:
    def test_success(self):
        fetcher = ListingFetcher(FakeBackend([_job()]))
        result = fetcher.fetch(FilterState())
        assert result.state is LoadState.SUCCESS
        assert result.total == 1

    def test_begin_publishes_loading(self):
        fetcher = ListingFetcher(FakeBackend())
        fetcher.begin()
        assert fetcher.result.state is LoadState.LOADING

    def test_error_degrades_to_empty_result(self, caplog):
        fetcher = ListingFetcher(FakeBackend([_job()], fail=True))
        result = fetcher.fetch(FilterState(search="x"))
        assert result.state is LoadState.ERROR
        assert result.is_empty
        assert result.total == 0
        assert "job listing fetch failed" in caplog.text

    def test_stale_response_is_dropped(self):
        fetcher = ListingFetcher(FakeBackend())
        old = fetcher.begin()
        new = fetcher.begin()

        assert fetcher.complete(new, [_job("fresh")], 1) is True
        assert fetcher.complete(old, [_job("stale")], 1) is False
        assert fetcher.fail(old, RuntimeError("late")) is False
        assert [j.id for j in fetcher.result.jobs] == ["fresh"]

    def test_one_request_per_fetch(self):
        backend = FakeBackend()
        fetcher = ListingFetcher(backend)
        fetcher.fetch(FilterState())
        fetcher.fetch(FilterState())
        assert len(backend.queries) == 2


class TestJobsView:
    def _jobs(self, n):
        return [_job(f"job-{i}") for i in range(n)]

    def test_filter_change_resets_page_and_refetches(self):
        backend = FakeBackend(self._jobs(40))
        view = JobsView(backend, FilterState(page=3))
        view.load()
        view.change_filter("location", "Berlin")

        assert view.state.page == 1
        assert view.query_params == {"location": "Berlin"}
        assert backend.queries[-1].range.start == 0

    def test_clear_filters_refetches_with_status_only(self):
        backend = FakeBackend(self._jobs(5))
        view = JobsView(backend, FilterState(search="dev", category="Design", page=2))
        view.clear_filters()

        assert view.query_params == {}
        assert backend.queries[-1].predicates == (ACTIVE,)

    def test_navigation_keeps_filters_and_clamps(self):
        backend = FakeBackend(self._jobs(25))
        view = JobsView(backend, FilterState(search="dev"))
        view.load()

        view.go_to_page(4)
        assert view.state.page == 3
        assert view.state.search == "dev"

        calls = len(backend.queries)
        view.next_page()
        assert len(backend.queries) == calls  # already on the last page
        view.previous_page()
        assert view.state.page == 2

    def test_out_of_range_page_is_clamped_on_load(self):
        backend = FakeBackend(self._jobs(25))
        view = JobsView.from_query_params(backend, {"page": "4"})
        result = view.load()

        assert view.state.page == 3
        assert len(result.jobs) == 1
        assert len(backend.queries) == 2

    def test_in_range_load_is_a_single_request(self):
        backend = FakeBackend(self._jobs(25))
        JobsView(backend, FilterState(page=2)).load()
        assert len(backend.queries) == 1

    def test_page_url(self):
        view = JobsView(FakeBackend(), FilterState(type="remote"))
        assert view.page_url(2) == "/jobs?type=remote&page=2"


class TestJobDetailFetcher:
    def test_candidate_who_applied(self):
        backend = FakeBackend([_job("job-x")])
        backend.applications.add(("job-x", "ana"))

        detail = JobDetailFetcher(backend).fetch("job-x", _session("ana"))

        assert detail.state is DetailState.LOADED
        assert detail.application is ApplicationCheck.APPLIED
        assert detail.action is ApplyAction.ALREADY_APPLIED

    def test_other_candidate_can_apply(self):
        backend = FakeBackend([_job("job-x")])
        backend.applications.add(("job-x", "ana"))

        detail = JobDetailFetcher(backend).fetch("job-x", _session("bo"))

        assert detail.application is ApplicationCheck.NOT_APPLIED
        assert detail.action is ApplyAction.APPLY

    @pytest.mark.parametrize("job_id,status", [("missing", "active"), ("job-x", "closed")])
    def test_not_found_is_terminal(self, job_id, status):
        backend = FakeBackend([_job("job-x", status=status)])
        detail = JobDetailFetcher(backend).fetch(job_id)
        assert detail.state is DetailState.NOT_FOUND

    def test_backend_error(self):
        detail = JobDetailFetcher(FakeBackend([_job()], fail=True)).fetch("job-1")
        assert detail.state is DetailState.ERROR

    def test_failed_lookup_is_unknown_not_applied(self):
        backend = FakeBackend([_job("job-x")])
        backend.fail_applications = True

        detail = JobDetailFetcher(backend).fetch("job-x", _session("ana"))

        assert detail.application is ApplicationCheck.UNKNOWN
        assert detail.action is ApplyAction.APPLY

    def test_anonymous_and_employers_skip_lookup(self):
        backend = FakeBackend([_job("job-x", employer_id="boss")])
        backend.fail_applications = True  # would show up as UNKNOWN if called

        anonymous = JobDetailFetcher(backend).fetch("job-x")
        owner = JobDetailFetcher(backend).fetch("job-x", _session("boss", role="employer"))
        other = JobDetailFetcher(backend).fetch("job-x", _session("rival", role="employer"))

        assert anonymous.application is None
        assert anonymous.action is ApplyAction.SIGN_IN
        assert owner.action is ApplyAction.EDIT
        assert other.action is ApplyAction.NONE


class TestApplyAction:
    def test_candidate_without_check(self):
        assert apply_action_for(_job(), _session("ana"), None) is ApplyAction.APPLY


class TestHomeFetcher:
    def test_sections(self):
        backend = FakeBackend([_job(f"job-{i}") for i in range(8)])
        featured, recent = HomeFetcher(backend).fetch()
        assert len(featured) == 3
        assert len(recent) == 6
        assert len(backend.queries) == 2

    def test_failure_degrades_to_empty(self):
        featured, recent = HomeFetcher(FakeBackend(fail=True)).fetch()
        assert featured == [] and recent == []
