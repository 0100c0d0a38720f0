"""
Stale-response guard for list screens.

Changing page, filter or search term while a fetch is still in flight
must not let the older response overwrite the newer one. Every dispatch
takes a sequence number for its query key; a response is applied only if
its number is still the latest for that key.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

from civicportal.endpoints import DEFAULT_PAGE_SIZE
from civicportal.logging_config import logger
from civicportal.models import Page


T = TypeVar("T")

DEFAULT_DEBOUNCE_SECONDS = 0.5


class RequestSequencer:
    """Monotonic sequence numbers per logical query key"""

    def __init__(self):
        self._latest: Dict[str, int] = {}

    def begin(self, key: str = "default") -> int:
        token = self._latest.get(key, 0) + 1
        self._latest[key] = token
        return token

    def is_current(self, key: str, token: int) -> bool:
        return self._latest.get(key) == token

    def invalidate(self, key: str = "default") -> None:
        """Make every in-flight request for key stale"""
        self.begin(key)


@dataclass
class QueryState:
    page: int = 0
    size: int = DEFAULT_PAGE_SIZE
    sort_by: str = "id"
    sort_dir: str = "desc"
    search: str = ""
    filters: Dict[str, Any] = field(default_factory=dict)


class PagedQuery(Generic[T]):
    """
    Paging/filter/search state for one listing plus its latest result.

    ``fetcher`` receives a QueryState snapshot and returns a Page (or None
    when the session was torn down).
    """

    def __init__(self, fetcher: Callable[[QueryState], Awaitable[Optional[Page[T]]]],
                 key: str = "default", size: int = DEFAULT_PAGE_SIZE,
                 sort_by: str = "id", sort_dir: str = "desc",
                 sequencer: Optional[RequestSequencer] = None):
        self.fetcher = fetcher
        self.key = key
        self.state = QueryState(size=size, sort_by=sort_by, sort_dir=sort_dir)
        self.sequencer = sequencer or RequestSequencer()
        self.result: Optional[Page[T]] = None

    def _snapshot(self) -> QueryState:
        return QueryState(
            page=self.state.page,
            size=self.state.size,
            sort_by=self.state.sort_by,
            sort_dir=self.state.sort_dir,
            search=self.state.search,
            filters=dict(self.state.filters),
        )

    async def fetch(self) -> Optional[Page[T]]:
        """
        Dispatch one fetch for the current state.

        Returns the page if it is still the newest request for this key
        when it completes; a stale response is dropped and None returned.
        """
        token = self.sequencer.begin(self.key)
        page = await self.fetcher(self._snapshot())
        if not self.sequencer.is_current(self.key, token):
            logger.debug(f"Discarding stale response for {self.key} (request #{token})")
            return None
        if page is not None:
            self.result = page
        return page

    # ==================== Navigation ====================

    def next_page(self) -> bool:
        if self.result is not None and self.result.last:
            return False
        self.state.page += 1
        return True

    def previous_page(self) -> bool:
        if self.state.page == 0:
            return False
        self.state.page -= 1
        return True

    def go_to_page(self, page: int) -> None:
        self.state.page = max(0, page)

    def set_filter(self, name: str, value: Any) -> None:
        if value is None or value == "" or str(value).lower() == "all":
            self.state.filters.pop(name, None)
        else:
            self.state.filters[name] = value
        self.state.page = 0

    def set_search(self, term: str) -> None:
        self.state.search = term.strip()
        self.state.page = 0

    def set_sort(self, sort_by: str, sort_dir: str = "desc") -> None:
        self.state.sort_by = sort_by
        self.state.sort_dir = sort_dir
        self.state.page = 0


class Debouncer:
    """
    Run an async callback only after calls stop arriving for ``delay``.

    Each ``call`` cancels the previously scheduled one.
    """

    def __init__(self, callback: Callable[..., Awaitable[Any]],
                 delay: float = DEFAULT_DEBOUNCE_SECONDS):
        self.callback = callback
        self.delay = delay
        self._pending: Optional[asyncio.Task] = None

    def call(self, *args, **kwargs) -> asyncio.Task:
        self.cancel()
        self._pending = asyncio.create_task(self._run(*args, **kwargs))
        return self._pending

    async def _run(self, *args, **kwargs):
        await asyncio.sleep(self.delay)
        return await self.callback(*args, **kwargs)

    def cancel(self) -> None:
        if self._pending and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()
