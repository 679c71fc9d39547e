"""
Incremental gallery loading.

PaginationController owns the list the gallery grid renders. A filter
change throws the list away and loads page one; a scroll-proximity signal
appends the next page. Every fetch is tagged with the filter generation it
was issued for, and a result whose generation has since been superseded is
dropped on arrival instead of being merged into the new list.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from ..errors import StoreError
from ..models.gallery_model import GalleryFilter, GalleryItem
from .query import PageCursor, build_query, sort_field_for
from .store import GalleryStore, Page

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 12


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING_INITIAL = "loading_initial"
    LOADING_MORE = "loading_more"
    ERROR = "error"


@dataclass
class ListState:
    """Loaded items in server order. No re-sorting, no de-duplication.

    Listeners are told when the list is replaced or cleared, which is when
    positions held into it stop being valid. Appends keep positions intact.
    """

    items: List[GalleryItem] = field(default_factory=list)
    has_more: bool = True
    cursor: Optional[PageCursor] = None
    _listeners: List[Callable[[], None]] = field(default_factory=list, init=False, repr=False, compare=False)

    def __len__(self) -> int:
        return len(self.items)

    def add_listener(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener()

    def replace(self, items: List[GalleryItem]) -> None:
        self.items = list(items)
        self._changed()

    def append(self, items: List[GalleryItem]) -> None:
        self.items.extend(items)

    def reset(self) -> None:
        self.items = []
        self.has_more = True
        self.cursor = None
        self._changed()


class PaginationController:
    def __init__(
        self,
        store: GalleryStore,
        gallery_filter: Optional[GalleryFilter] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.store = store
        self.filter = gallery_filter or GalleryFilter()
        self.page_size = page_size
        self.state = ListState()
        self.status = LoadState.LOADING_INITIAL
        self.error: Optional[StoreError] = None
        self._generation = 0
        self._failed_mode: Optional[LoadState] = None

    @property
    def items(self) -> List[GalleryItem]:
        return self.state.items

    @property
    def has_more(self) -> bool:
        return self.state.has_more

    @property
    def loading(self) -> bool:
        return self.status in (LoadState.LOADING_INITIAL, LoadState.LOADING_MORE)

    @property
    def generation(self) -> int:
        return self._generation

    async def start(self) -> None:
        """Initial load for the current filter (mount)."""
        await self.set_filter(self.filter)

    async def set_filter(self, gallery_filter: GalleryFilter) -> None:
        self.filter = gallery_filter
        self._generation += 1
        self.state.reset()
        self.error = None
        self.status = LoadState.LOADING_INITIAL
        await self._fetch(LoadState.LOADING_INITIAL)

    async def load_more(self) -> bool:
        """Fetch the next page. Returns False when the signal was ignored."""
        if self.status != LoadState.IDLE or not self.state.has_more:
            return False
        self.status = LoadState.LOADING_MORE
        await self._fetch(LoadState.LOADING_MORE)
        return True

    async def on_scroll_proximity(self) -> bool:
        """The sentinel below the grid entered the viewport."""
        return await self.load_more()

    async def retry(self) -> bool:
        """Re-issue the fetch that put the controller into ERROR."""
        if self.status != LoadState.ERROR:
            return False
        mode = self._failed_mode or LoadState.LOADING_INITIAL
        self.error = None
        self.status = mode
        await self._fetch(mode)
        return True

    async def _fetch(self, mode: LoadState) -> None:
        generation = self._generation
        cursor = self.state.cursor if mode == LoadState.LOADING_MORE else None

        try:
            query = build_query(self.filter, cursor, self.page_size)
            page = await self.store.query(query)
        except StoreError as exc:
            self._fail(generation, mode, exc)
            return
        except Exception as exc:
            if generation == self._generation:
                logger.exception("Unexpected error while fetching gallery page")
            self._fail(generation, mode, StoreError(f"Unexpected gallery fetch failure: {exc}"))
            return

        if generation != self._generation:
            logger.debug(
                f"Discarding stale gallery page (generation {generation}, current {self._generation})"
            )
            return

        self._apply(mode, page)

    def _fail(self, generation: int, mode: LoadState, exc: StoreError) -> None:
        if generation != self._generation:
            logger.debug(f"Ignoring failure of superseded gallery fetch (generation {generation})")
            return
        logger.warning(f"Gallery fetch failed: {exc}")
        self.error = exc
        self._failed_mode = mode
        self.status = LoadState.ERROR

    def _apply(self, mode: LoadState, page: Page) -> None:
        if page.items:
            if mode == LoadState.LOADING_MORE:
                self.state.append(page.items)
            else:
                self.state.replace(page.items)
        if page.next_cursor is not None:
            self.state.cursor = page.next_cursor
        elif page.items:
            self.state.cursor = PageCursor.after(
                page.items[-1], sort_field_for(self.filter), self.filter.sort_direction
            )
        # a short page ends the list; skipped malformed documents still count toward the page
        self.state.has_more = page.fetched == self.page_size
        self._failed_mode = None
        self.status = LoadState.IDLE
