"""Display helpers for CineFind: cards, detail view and console surfaces."""

import math

from rich.console import Console, Group, RenderableType
from rich.padding import Padding
from rich.panel import Panel
from rich.status import Status
from rich.table import Table
from rich.text import Text

from cinefind.models import DetailRecord, SearchResultItem, is_available

POSTER_PLACEHOLDER = "🎬 no poster"
CARD_WIDTH = 64
MAX_STARS = 5


# ===== ELEMENT BUILDERS =====

def build_card(item: SearchResultItem) -> Panel:
    """Build the result card for one search item."""
    body = Text()
    body.append(f"📅 {item.year}", style="green")
    body.append("  ")
    body.append(item.kind, style="magenta")
    body.append("\n")
    if item.has_poster:
        body.append(item.poster_url, style="dim underline")
    else:
        body.append(POSTER_PLACEHOLDER, style="dim")

    return Panel(
        body,
        title=Text(item.title, style="bold cyan"),
        title_align="left",
        subtitle=Text(item.id, style="dim"),
        subtitle_align="right",
        width=CARD_WIDTH,
    )


def generate_stars(rating: str | float | None) -> str:
    """Turn a 10-point rating into a 5-star string."""
    try:
        value = float(rating)
    except (TypeError, ValueError):
        value = math.nan
    if math.isnan(value):
        return "☆" * MAX_STARS

    normalized = min(max(value, 0.0), 10.0) / 2
    full = math.floor(normalized)
    half = normalized % 1 >= 0.5
    empty = MAX_STARS - full - (1 if half else 0)
    return "⭐" * full + ("✨" if half else "") + "☆" * empty


def _section(label: str, value: str) -> RenderableType:
    return Padding(
        Group(Text(label, style="bold magenta"), Text(value)),
        (1, 0, 0, 0),
    )


def _rating_section(record: DetailRecord) -> RenderableType:
    lines: list[RenderableType] = [
        Text(generate_stars(record.imdb_rating)),
        Text(f"{record.imdb_rating}/10", style="bold yellow"),
        Text(f"IMDb ({record.imdb_votes} votes)", style="dim"),
    ]
    if record.ratings:
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("Source", style="cyan")
        table.add_column("Value", style="green")
        for rating in record.ratings:
            table.add_row(rating.source, rating.value)
        lines.append(table)
    return Padding(Group(*lines), (1, 0, 0, 0))


def build_detail_view(record: DetailRecord) -> Panel:
    """Build the details panel.

    Optional sections whose value is the ``"N/A"`` sentinel are left out
    entirely; the rating section only appears when IMDb has a rating.
    """
    meta = Text(
        f"📅 {record.year}  ⏱️ {record.runtime}  🎭 {record.rated}  🎬 {record.kind}",
        style="dim",
    )
    poster = Text(record.poster_url if record.has_poster else POSTER_PLACEHOLDER, style="dim")

    parts: list[RenderableType] = [meta, poster]

    if is_available(record.imdb_rating):
        parts.append(_rating_section(record))

    parts.append(_section("📖 Plot", record.plot))

    optional = [
        ("🎭 Genre", record.genre),
        ("🎬 Director", record.director),
        ("✍️ Writer", record.writer),
        ("🌟 Cast", record.actors),
        ("🗣️ Language", record.language),
        ("🌍 Country", record.country),
        ("🏆 Awards", record.awards),
        ("💰 Box office", record.box_office),
    ]
    for label, value in optional:
        if is_available(value):
            parts.append(_section(label, value))

    return Panel(
        Group(*parts),
        title=Text(record.title, style="bold cyan"),
        subtitle=Text(record.id, style="dim"),
        padding=(1, 2),
    )


# ===== CONSOLE SURFACES =====

class ConsoleResults:
    """Result container that prints each appended card as it arrives."""

    def __init__(self, console: Console):
        self.console = console
        self.elements: list[RenderableType] = []

    def append(self, element: RenderableType) -> None:
        self.elements.append(element)
        self.console.print(element)

    def clear(self) -> None:
        self.elements.clear()


class ConsoleBanner:
    """Loading spinner and transient error line."""

    def __init__(self, console: Console, loading_message: str = "Searching..."):
        self.console = console
        self.loading_message = loading_message
        self.message: str | None = None
        self._status: Status | None = None

    @property
    def loading(self) -> bool:
        return self._status is not None

    def show_loading(self) -> None:
        if self._status is None:
            self._status = self.console.status(f"[dim]{self.loading_message}[/]")
            self._status.start()

    def hide_loading(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None

    def show_error(self, message: str) -> None:
        self.message = message
        self.console.print(Text(message, style="bold red"))

    def hide_error(self) -> None:
        # printed lines cannot be taken back; just forget the message
        self.message = None


class ConsoleDetailView:
    """Prints the details panel; closing forgets the shown record."""

    def __init__(self, console: Console):
        self.console = console
        self.record: DetailRecord | None = None

    @property
    def is_open(self) -> bool:
        return self.record is not None

    def open(self, record: DetailRecord) -> None:
        self.record = record
        self.console.print(build_detail_view(record))

    def close(self) -> None:
        self.record = None
