"""State behind a searchable / sortable / paginated list.

The controller owns page, search (raw and debounced), sort and the extra
filters of one list, and issues exactly one fetch for every effective change:

- typing:      set_search_query() re-arms a debounce timer; when it settles
               the search is applied and the page goes back to 1
- sorting:     handle_sort() on the active field flips the direction, on a new
               field uses the configured default and goes back to page 1
- paging:      set_page()
- filters:     set_filter() / set_filters(), back to page 1
- reconcile:   refresh() re-issues the current filters unchanged

Fetches are not cancelled; every fetch gets a sequence number and only the
most recent one may write items / meta / error.

Must be driven from a running asyncio loop.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Generic, Mapping, TypeVar

from ..api._api_result import GENERIC_ERROR, Payload, err
from ..api.types import PaginatedResponse, PaginationMeta, SortDirection
from ..settings import get_settings


logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")

FetchFn = Callable[[dict[str, Any]], Awaitable[Payload[PaginatedResponse[Any]]]]
DeleteFn = Callable[[int], Awaitable[Payload[None]]]

SORT_DIRECTIONS: tuple[str, ...] = ("asc", "desc")


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


@dataclass(frozen=True, slots=True)
class ListQueryConfig:
    """Initial state of a list. Read-only, hashable, round-trips through to_dict()."""

    default_sort_field: str | None = None
    default_sort_direction: SortDirection = "asc"
    debounce_ms: int | None = None
    per_page: int | None = None
    additional_filters: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.default_sort_direction not in SORT_DIRECTIONS:
            raise ValueError(f"Invalid sort direction: {self.default_sort_direction!r}")
        if self.debounce_ms is not None and self.debounce_ms < 0:
            raise ValueError(f"debounce_ms must be >= 0, got {self.debounce_ms}")
        if self.per_page is not None and self.per_page < 1:
            raise ValueError(f"per_page must be >= 1, got {self.per_page}")
        object.__setattr__(
            self, "additional_filters", MappingProxyType(dict(self.additional_filters))
        )

    def __hash__(self) -> int:
        return hash(
            (
                self.default_sort_field,
                self.default_sort_direction,
                self.debounce_ms,
                self.per_page,
                frozenset(self.additional_filters.items()),
            )
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "default_sort_field": self.default_sort_field,
            "default_sort_direction": self.default_sort_direction,
            "debounce_ms": self.debounce_ms,
            "per_page": self.per_page,
            "additional_filters": dict(self.additional_filters),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ListQueryConfig:
        return cls(**{k: data[k] for k in cls.__dataclass_fields__ if k in data})


class ListQueryController(Generic[ItemT]):
    def __init__(
        self,
        fetch_fn: FetchFn,
        config: ListQueryConfig | None = None,
        *,
        on_change: Callable[[], None] | None = None,
    ):
        self.config = config or ListQueryConfig()
        self._fetch_fn = fetch_fn
        self._on_change = on_change

        debounce_ms = self.config.debounce_ms
        if debounce_ms is None:
            debounce_ms = get_settings().SEARCH_DEBOUNCE_MS
        self._debounce_s = debounce_ms / 1000

        # data
        self.items: list[ItemT] = []
        self.meta: PaginationMeta | None = None
        self.is_loading = False
        self.error: str | None = None

        # query
        self.current_page = 1
        self.search_query = ""
        self.debounced_search = ""
        self.sort_by: str | None = self.config.default_sort_field
        self.sort_direction: SortDirection = self.config.default_sort_direction
        self.additional_filters: dict[str, Any] = {
            k: v for k, v in self.config.additional_filters.items() if not _is_empty(v)
        }

        self._seq = 0
        self._debounce_handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------
    def build_filters(self) -> dict[str, Any]:
        filters: dict[str, Any] = {"page": self.current_page}
        if self.debounced_search:
            filters["search"] = self.debounced_search
        if self.config.per_page:
            filters["per_page"] = self.config.per_page
        if self.sort_by:
            filters["sort_by"] = self.sort_by
            filters["sort_direction"] = self.sort_direction
        filters.update(self.additional_filters)
        return filters

    def sort_indicator(self, field_name: str) -> SortDirection | None:
        """Direction shown on a column header, None when it is not the sort column."""
        if self.sort_by != field_name:
            return None
        return self.sort_direction

    @property
    def search_pending(self) -> bool:
        return self._debounce_handle is not None

    # ------------------------------------------------------------------
    # State changes
    # ------------------------------------------------------------------
    def set_search_query(self, text: str) -> None:
        self.search_query = text
        self._cancel_debounce()
        loop = asyncio.get_running_loop()
        self._debounce_handle = loop.call_later(self._debounce_s, self._settle_search)

    def _settle_search(self) -> None:
        self._debounce_handle = None
        changed = self.debounced_search != self.search_query or self.current_page != 1
        self.debounced_search = self.search_query
        self.current_page = 1
        if changed:
            self._schedule_fetch()

    def set_page(self, page: int) -> asyncio.Task[None] | None:
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if page == self.current_page:
            return None
        self.current_page = page
        return self._schedule_fetch()

    def handle_sort(self, field_name: str) -> asyncio.Task[None]:
        if self.sort_by == field_name:
            self.sort_direction = "desc" if self.sort_direction == "asc" else "asc"
        else:
            self.sort_by = field_name
            self.sort_direction = self.config.default_sort_direction
            self.current_page = 1
        return self._schedule_fetch()

    def set_filter(self, key: str, value: Any) -> asyncio.Task[None] | None:
        return self.set_filters(**{key: value})

    def set_filters(self, **values: Any) -> asyncio.Task[None] | None:
        """Update extra filters; None or '' removes one. Back to page 1 on change."""
        changed = False
        for key, value in values.items():
            if _is_empty(value):
                if key in self.additional_filters:
                    del self.additional_filters[key]
                    changed = True
            elif self.additional_filters.get(key) != value:
                self.additional_filters[key] = value
                changed = True

        if not changed:
            return None
        self.current_page = 1
        return self._schedule_fetch()

    def refresh(self) -> asyncio.Task[None]:
        return self._schedule_fetch()

    async def load(self) -> None:
        await self._schedule_fetch()

    async def run_delete(
        self,
        delete_fn: DeleteFn,
        item_id: int,
        *,
        close: Callable[[], None] | None = None,
        notify_error: Callable[[str], None] | None = None,
    ) -> Payload[None]:
        """Delete one row, then reconcile the list.

        The confirmation is closed first in both outcomes; a failure is
        reported after that, a success refreshes the list.
        """
        result = await delete_fn(item_id)

        if close is not None:
            close()

        if result["success"] is True:
            await self.refresh()
        else:
            logger.info("delete failed id=%s: %s", item_id, result["error"])
            if notify_error is not None:
                notify_error(result["error"])
        return result

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------
    def _schedule_fetch(self) -> asyncio.Task[None]:
        self._seq += 1
        seq = self._seq
        filters = self.build_filters()

        self.is_loading = True
        self.error = None

        task = asyncio.get_running_loop().create_task(self._run_fetch(seq, filters))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_fetch(self, seq: int, filters: dict[str, Any]) -> None:
        logger.debug("list fetch seq=%s filters=%s", seq, filters)
        items: list[ItemT] = []
        meta: PaginationMeta | None = None
        try:
            result = await self._fetch_fn(filters)
            if result["success"] is True:
                page = result["data"]
                items = list(page["data"])
                meta = page["meta"]
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            # fetch_fn is normally a manager and never raises; a bad page lands here too
            logger.exception("list fetch failed seq=%s filters=%s: %s", seq, filters, exc)
            result = err(code="internal_error", error=GENERIC_ERROR)

        if seq != self._seq:
            logger.debug("stale list response dropped seq=%s latest=%s", seq, self._seq)
            return

        if result["success"] is True:
            self.items = items
            self.meta = meta
            self.error = None
        else:
            self.items = []
            self.meta = None
            self.error = result.get("error") or GENERIC_ERROR

        self.is_loading = False
        if self._on_change is not None:
            self._on_change()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def _cancel_debounce(self) -> None:
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None

    async def wait_idle(self) -> None:
        """Wait until no fetch is in flight."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        self._cancel_debounce()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
