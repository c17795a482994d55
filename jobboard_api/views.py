from typing import Mapping, Optional

from .backends.base import Backend
from .fetchers import ListingFetcher, ListingResult, LoadState
from .filters import FilterState
from .logging_config import get_logger
from .pagination import Pagination
from .query import LISTING_PAGE_SIZE

logger = get_logger(__name__)


class JobsView:
    """Browse-jobs page: filter state, the listing fetcher and pagination.

    Every change goes through ``_apply``, which updates the state and runs
    exactly one fetch for it.
    """

    def __init__(self, backend: Backend, state: Optional[FilterState] = None, base_url: str = "/jobs"):
        self.fetcher = ListingFetcher(backend, LISTING_PAGE_SIZE)
        self.state = state or FilterState()
        self.base_url = base_url

    @classmethod
    def from_query_params(cls, backend: Backend, params: Mapping[str, str], base_url: str = "/jobs") -> "JobsView":
        return cls(backend, FilterState.from_query_params(params), base_url)

    @property
    def result(self) -> ListingResult:
        return self.fetcher.result

    @property
    def pagination(self) -> Pagination:
        return Pagination(total=self.result.total, page_size=LISTING_PAGE_SIZE, current=self.state.page)

    @property
    def query_params(self) -> dict:
        return self.state.to_query_params()

    def load(self) -> ListingResult:
        result = self._apply(self.state)
        if result.state is LoadState.SUCCESS:
            last = self.pagination.total_pages
            if self.state.page > last:
                # asked for a page past the end, e.g. after rows were removed
                logger.info("page %d out of range, showing page %d", self.state.page, last)
                result = self._apply(self.state.with_page(last))
        return result

    def change_filter(self, key: str, value: str) -> ListingResult:
        return self._apply(self.state.with_filter(key, value))

    def clear_filters(self) -> ListingResult:
        return self._apply(self.state.cleared())

    def go_to_page(self, page: int) -> ListingResult:
        target = self.pagination.clamp(page)
        if target == self.state.page and self.result.state is not LoadState.LOADING:
            return self.result
        return self._apply(self.state.with_page(target))

    def next_page(self) -> ListingResult:
        return self.go_to_page(self.state.page + 1)

    def previous_page(self) -> ListingResult:
        return self.go_to_page(self.state.page - 1)

    def page_url(self, page: int) -> str:
        return self.state.page_url(self.base_url, page)

    def _apply(self, state: FilterState) -> ListingResult:
        self.state = state
        return self.fetcher.fetch(state)
