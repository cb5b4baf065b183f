"""Lookup session: the search/detail state machine.

Each user action maps to one command method:

* ``submit_query(text)``  - validate, search, render cards progressively
* ``request_detail(id)``  - fetch details and open the detail view
* ``close_detail()``      - close the detail view

States move ``IDLE -> LOADING -> SUCCESS | EMPTY | FAILED -> IDLE``. A
successful search returns to IDLE once every card is rendered; EMPTY and
FAILED return to IDLE when their transient message expires. A new query
cancels the render of the previous one before the results are cleared, and
late answers to a superseded query are dropped.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Protocol

from cinefind.context import AppContext
from cinefind.errors import CineFindError, NoResults, TransportError, ValidationError
from cinefind.models import DetailRecord, SearchResultItem
from cinefind.providers.base import Provider
from cinefind.renderer import ProgressiveRenderer, RenderStatus, ResultContainer
from cinefind.views import build_card

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2

EMPTY_QUERY_MESSAGE = "Please enter a movie title."
SHORT_QUERY_MESSAGE = f"Enter at least {MIN_QUERY_LENGTH} characters to search."
MISSING_KEY_MESSAGE = "API key not configured. Set OMDB_API_KEY in your .env file."
MISSING_ID_MESSAGE = "Please choose a movie first."
SEARCH_FAILED_MESSAGE = TransportError.default_message
DETAIL_NOT_FOUND_MESSAGE = "Could not load movie details."
DETAIL_FAILED_MESSAGE = "Error fetching movie details."


class SearchState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    EMPTY = "empty"
    FAILED = "failed"


class Banner(Protocol):
    """Loading indicator and transient error message."""

    def show_loading(self) -> None: ...

    def hide_loading(self) -> None: ...

    def show_error(self, message: str) -> None: ...

    def hide_error(self) -> None: ...


class DetailView(Protocol):
    """Surface that shows one DetailRecord at a time."""

    def open(self, record: DetailRecord) -> None: ...

    def close(self) -> None: ...


def validate_query(text: str | None, api_key: str | None) -> str:
    """Return the cleaned query or raise ValidationError."""
    query = (text or "").strip()
    if not query:
        raise ValidationError(EMPTY_QUERY_MESSAGE)
    if len(query) < MIN_QUERY_LENGTH:
        raise ValidationError(SHORT_QUERY_MESSAGE)
    if not api_key:
        raise ValidationError(MISSING_KEY_MESSAGE)
    return query


class LookupSession:
    """Drives one search/detail cycle at a time against a provider."""

    def __init__(
        self,
        context: AppContext,
        provider: Provider,
        results: ResultContainer,
        banner: Banner,
        detail_view: DetailView,
        renderer: ProgressiveRenderer | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.context = context
        self.provider = provider
        self.results = results
        self.banner = banner
        self.detail_view = detail_view
        self.renderer = renderer or ProgressiveRenderer(
            results, build_card, interval=context.config.pacing_seconds, sleep=sleep
        )
        self.state = SearchState.IDLE
        self.items: tuple[SearchResultItem, ...] = ()
        self._sleep = sleep
        self._generation = 0
        self._render_task: asyncio.Task | None = None
        self._message_task: asyncio.Task | None = None

    # ===== COMMANDS =====

    async def submit_query(self, text: str) -> SearchState:
        """Search for ``text`` and render the results progressively."""
        try:
            query = validate_query(text, self.context.api_key)
        except ValidationError as e:
            logger.info("Query rejected: %s", e.message)
            self._surface(e.message)
            return self.state

        self._generation += 1
        generation = self._generation

        await self._cancel_render()
        self.results.clear()
        self.items = ()
        self._clear_message()
        self._transition(SearchState.LOADING)
        self.banner.show_loading()

        try:
            page = await self.provider.search(query)
        except CineFindError as e:
            if generation != self._generation:
                return self.state
            self.banner.hide_loading()
            logger.error("Search for %r failed: %s", query, e.message)
            self._surface(SEARCH_FAILED_MESSAGE, SearchState.FAILED)
            return self.state

        if generation != self._generation:
            logger.debug("Dropping results of superseded search %r", query)
            return self.state

        self.banner.hide_loading()

        if not page.ok or not page.items:
            self._surface(NoResults(page.error).message, SearchState.EMPTY)
            return self.state

        self.items = page.items
        self._transition(SearchState.SUCCESS)

        task = asyncio.create_task(self.renderer.render(page.items))
        self._render_task = task
        try:
            status = await task
        except asyncio.CancelledError:
            if self._render_task is task:
                raise
            logger.debug("Render of %r cancelled by a newer search", query)
            return self.state

        self._render_task = None
        if status is RenderStatus.EMPTY:
            self._surface(NoResults().message, SearchState.EMPTY)
            return self.state

        self._transition(SearchState.IDLE)
        return self.state

    async def request_detail(self, item_id: str) -> DetailRecord | None:
        """Fetch details for ``item_id`` and open the detail view.

        A detail request made while a search is loading or still rendering
        its cards leaves ``state`` to that search. So does one whose search
        is superseded before the details arrive.
        """
        item_id = (item_id or "").strip()
        if not self.context.has_credential:
            self._surface(MISSING_KEY_MESSAGE)
            return None
        if not item_id:
            self._surface(MISSING_ID_MESSAGE)
            return None

        searching = self._search_active()
        generation = self._generation

        def owns_state() -> bool:
            return not searching and generation == self._generation

        self._clear_message()
        if owns_state():
            self._transition(SearchState.LOADING)
            self.banner.show_loading()

        try:
            record = await self.provider.fetch_details(item_id)
        except CineFindError as e:
            logger.error("Details for %s failed: %s", item_id, e.message)
            if owns_state():
                self.banner.hide_loading()
                self._surface(DETAIL_FAILED_MESSAGE, SearchState.FAILED)
            else:
                self._surface(DETAIL_FAILED_MESSAGE)
            return None

        if owns_state():
            self.banner.hide_loading()

        if record is None:
            self._surface(DETAIL_NOT_FOUND_MESSAGE, SearchState.FAILED if owns_state() else None)
            return None

        self.detail_view.open(record)
        if owns_state():
            self._transition(SearchState.IDLE)
        return record

    def close_detail(self) -> None:
        """Close the detail view."""
        self.detail_view.close()

    async def settle(self) -> None:
        """Wait until the pending transient message has expired."""
        task = self._message_task
        if task is not None:
            await asyncio.wait({task})

    async def aclose(self) -> None:
        """Cancel any pending render and message timer."""
        await self._cancel_render()
        task, self._message_task = self._message_task, None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})

    # ===== INTERNALS =====

    def _search_active(self) -> bool:
        render = self._render_task
        return self.state is SearchState.LOADING or (render is not None and not render.done())

    def _transition(self, state: SearchState) -> None:
        if state is not self.state:
            logger.debug("State %s -> %s", self.state.value, state.value)
        self.state = state

    def _surface(self, message: str, state: SearchState | None = None) -> None:
        self._clear_message()
        self.banner.show_error(message)
        if state is not None:
            self._transition(state)
        self._message_task = asyncio.create_task(self._expire_message())

    async def _expire_message(self) -> None:
        await self._sleep(self.context.config.message_seconds)
        self.banner.hide_error()
        if self.state in (SearchState.EMPTY, SearchState.FAILED):
            self._transition(SearchState.IDLE)
        if self._message_task is asyncio.current_task():
            self._message_task = None

    def _clear_message(self) -> None:
        task, self._message_task = self._message_task, None
        if task is not None and not task.done():
            task.cancel()
        self.banner.hide_error()

    async def _cancel_render(self) -> None:
        task, self._render_task = self._render_task, None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})
