"""Progressive rendering of result lists."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from enum import Enum
from typing import Any, Protocol, TypeVar

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 0.05

T = TypeVar("T")


class ResultContainer(Protocol):
    """Where rendered elements go."""

    def append(self, element: Any) -> None: ...

    def clear(self) -> None: ...


class RenderStatus(str, Enum):
    COMPLETED = "completed"
    EMPTY = "empty"


class ProgressiveRenderer:
    """Append one element per item to a container, pausing between items.

    Items are rendered strictly in input order, one at a time. The pause is
    awaited through ``sleep`` so a fake clock can be injected in tests.
    """

    def __init__(
        self,
        container: ResultContainer,
        render_item: Callable[[Any], Any],
        interval: float = DEFAULT_INTERVAL,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if interval < 0:
            raise ValueError("interval must be non-negative")
        self.container = container
        self.render_item = render_item
        self.interval = interval
        self._sleep = sleep

    async def render(self, items: Iterable[T]) -> RenderStatus:
        """Render ``items`` and report whether there was anything to render."""
        count = 0
        for item in items:
            element = self.render_item(item)
            self.container.append(element)
            count += 1
            await self._sleep(self.interval)

        if count == 0:
            logger.debug("Nothing to render")
            return RenderStatus.EMPTY

        logger.debug("Rendered %d element(s)", count)
        return RenderStatus.COMPLETED
