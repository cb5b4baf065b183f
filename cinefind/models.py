"""Data models for CineFind - built from OMDb payloads."""

from dataclasses import dataclass, field
from typing import Any, Literal

NOT_AVAILABLE = "N/A"

ItemKind = Literal["movie", "series", "episode"]
KINDS: tuple[str, ...] = ("movie", "series", "episode")


def is_available(value: str | None) -> bool:
    """True when the API actually provided a value."""
    return bool(value) and value != NOT_AVAILABLE


def _text(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None or value == "":
        return NOT_AVAILABLE
    return str(value)


def _kind(data: dict[str, Any]) -> str:
    kind = str(data.get("Type", "movie")).lower()
    # OMDb also knows "game"; anything unknown is shown as a movie
    return kind if kind in KINDS else "movie"


@dataclass(frozen=True)
class RatingEntry:
    """Rating from a single source, e.g. Rotten Tomatoes."""
    source: str
    value: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "RatingEntry":
        return cls(source=_text(data, "Source"), value=_text(data, "Value"))


@dataclass(frozen=True)
class SearchResultItem:
    """Search result item."""
    id: str
    title: str
    year: str
    kind: ItemKind
    poster_url: str = NOT_AVAILABLE

    @property
    def has_poster(self) -> bool:
        return is_available(self.poster_url)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "SearchResultItem":
        return cls(
            id=_text(data, "imdbID"),
            title=_text(data, "Title"),
            year=_text(data, "Year"),
            kind=_kind(data),
            poster_url=_text(data, "Poster"),
        )


@dataclass(frozen=True)
class DetailRecord(SearchResultItem):
    """Full movie details.

    Every long-form field is a string and may hold the ``"N/A"`` sentinel;
    keys missing from the payload are normalised to the sentinel too.
    """
    rated: str = NOT_AVAILABLE
    released: str = NOT_AVAILABLE
    runtime: str = NOT_AVAILABLE
    genre: str = NOT_AVAILABLE
    director: str = NOT_AVAILABLE
    writer: str = NOT_AVAILABLE
    actors: str = NOT_AVAILABLE
    plot: str = NOT_AVAILABLE
    language: str = NOT_AVAILABLE
    country: str = NOT_AVAILABLE
    awards: str = NOT_AVAILABLE
    box_office: str = NOT_AVAILABLE
    imdb_rating: str = NOT_AVAILABLE
    imdb_votes: str = NOT_AVAILABLE
    metascore: str = NOT_AVAILABLE
    ratings: tuple[RatingEntry, ...] = field(default_factory=tuple)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "DetailRecord":
        return cls(
            id=_text(data, "imdbID"),
            title=_text(data, "Title"),
            year=_text(data, "Year"),
            kind=_kind(data),
            poster_url=_text(data, "Poster"),
            rated=_text(data, "Rated"),
            released=_text(data, "Released"),
            runtime=_text(data, "Runtime"),
            genre=_text(data, "Genre"),
            director=_text(data, "Director"),
            writer=_text(data, "Writer"),
            actors=_text(data, "Actors"),
            plot=_text(data, "Plot"),
            language=_text(data, "Language"),
            country=_text(data, "Country"),
            awards=_text(data, "Awards"),
            box_office=_text(data, "BoxOffice"),
            imdb_rating=_text(data, "imdbRating"),
            imdb_votes=_text(data, "imdbVotes"),
            metascore=_text(data, "Metascore"),
            ratings=tuple(RatingEntry.from_api(r) for r in data.get("Ratings") or []),
        )


@dataclass(frozen=True)
class SearchPage:
    """One page of search results as returned by the API."""
    ok: bool
    items: tuple[SearchResultItem, ...] = ()
    error: str | None = None
    total_results: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "SearchPage":
        ok = data.get("Response") == "True"
        items = tuple(SearchResultItem.from_api(d) for d in data.get("Search") or []) if ok else ()
        try:
            total = int(data.get("totalResults", 0))
        except (TypeError, ValueError):
            total = 0
        return cls(ok=ok, items=items, error=data.get("Error") or None, total_results=total)
