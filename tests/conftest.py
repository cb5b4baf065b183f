"""Shared fixtures and fakes for the CineFind test suite."""

from __future__ import annotations

import io
from collections.abc import AsyncIterator, Iterator

import httpx
import pytest
from rich.console import Console

from cinefind.config import Config, reset_config
from cinefind.context import AppContext
from cinefind.models import DetailRecord, SearchPage
from cinefind.providers.base import Provider

BATMAN = {
    "imdbID": "tt1",
    "Title": "Batman",
    "Year": "1989",
    "Type": "movie",
    "Poster": "N/A",
}

BATMAN_DETAILS = {
    **BATMAN,
    "Rated": "PG-13",
    "Released": "23 Jun 1989",
    "Runtime": "126 min",
    "Genre": "Action, Adventure",
    "Director": "Tim Burton",
    "Writer": "Bob Kane, Sam Hamm",
    "Actors": "Michael Keaton, Jack Nicholson",
    "Plot": "The Dark Knight of Gotham City begins his war on crime.",
    "Language": "English, French",
    "Country": "United States, United Kingdom",
    "Awards": "Won 1 Oscar. 9 wins & 26 nominations total",
    "Ratings": [
        {"Source": "Internet Movie Database", "Value": "7.5/10"},
        {"Source": "Rotten Tomatoes", "Value": "77%"},
    ],
    "Metascore": "69",
    "imdbRating": "7.5",
    "imdbVotes": "412,000",
    "BoxOffice": "$251,409,241",
    "Response": "True",
}


class ChunkedStream(httpx.AsyncByteStream):
    """Async body delivered in the given chunks."""

    def __init__(self, chunks: list[bytes]):
        self.chunks = chunks

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            yield chunk


class SyncOnlyStream(httpx.SyncByteStream):
    """Body that can only be read synchronously."""

    def __init__(self, body: bytes):
        self.body = body

    def __iter__(self) -> Iterator[bytes]:
        yield self.body


def split_bytes(data: bytes, *cuts: int) -> list[bytes]:
    """Split ``data`` at the given offsets."""
    bounds = [0, *cuts, len(data)]
    return [data[a:b] for a, b in zip(bounds, bounds[1:])]


async def aiter_chunks(chunks: list[bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


class FakeContainer:
    def __init__(self):
        self.elements: list = []
        self.clear_count = 0
        self.events: list = []

    def append(self, element) -> None:
        self.elements.append(element)
        self.events.append(("append", element))

    def clear(self) -> None:
        self.elements.clear()
        self.clear_count += 1
        self.events.append(("clear", None))


class FakeBanner:
    def __init__(self):
        self.loading = False
        self.message: str | None = None
        self.messages: list[str] = []

    def show_loading(self) -> None:
        self.loading = True

    def hide_loading(self) -> None:
        self.loading = False

    def show_error(self, message: str) -> None:
        self.message = message
        self.messages.append(message)

    def hide_error(self) -> None:
        self.message = None


class FakeDetailView:
    def __init__(self):
        self.record: DetailRecord | None = None
        self.opened: list[DetailRecord] = []

    def open(self, record: DetailRecord) -> None:
        self.record = record
        self.opened.append(record)

    def close(self) -> None:
        self.record = None


class FakeProvider(Provider):
    """Provider answering from canned payloads."""

    def __init__(self, search_payload=None, detail_payload=None, error: Exception | None = None):
        self.search_payload = search_payload if search_payload is not None else {"Response": "True", "Search": [BATMAN]}
        self.detail_payload = detail_payload if detail_payload is not None else BATMAN_DETAILS
        self.error = error
        self.queries: list[str] = []
        self.detail_ids: list[str] = []

    @classmethod
    def from_context(cls, context: AppContext) -> "FakeProvider":
        return cls()

    @property
    def name(self) -> str:
        return "Fake"

    async def search(self, query: str) -> SearchPage:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return SearchPage.from_api(self.search_payload)

    async def fetch_details(self, item_id: str) -> DetailRecord | None:
        self.detail_ids.append(item_id)
        if self.error is not None:
            raise self.error
        if self.detail_payload.get("Response") != "True":
            return None
        return DetailRecord.from_api(self.detail_payload)


class FakeClock:
    """Records requested delays instead of sleeping."""

    def __init__(self):
        self.delays: list[float] = []

    async def sleep(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep tests away from the real config dir, env file and API key."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("APPDATA", str(tmp_path / "config"))
    monkeypatch.delenv("OMDB_API_KEY", raising=False)
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def context() -> AppContext:
    return AppContext(
        config=Config(pacing_ms=50, message_seconds=5.0),
        api_key="test-key",
        console=Console(file=io.StringIO(), width=100),
    )


def render_text(renderable, width: int = 100) -> str:
    """Render a rich renderable to plain text."""
    console = Console(file=io.StringIO(), width=width, color_system=None)
    console.print(renderable)
    return console.file.getvalue()
