"""OMDb provider - https://www.omdbapi.com/."""

import logging
from typing import Any

import httpx

from cinefind.context import AppContext
from cinefind.errors import MalformedPayload, TransportError
from cinefind.models import DetailRecord, SearchPage
from cinefind.providers.base import Provider
from cinefind.reader import read_json

logger = logging.getLogger(__name__)

API_URL = "https://www.omdbapi.com/"

HEADERS = {
    "Accept": "application/json",
}


class OMDbProvider(Provider):
    """OMDb metadata provider.

    Every call opens its own client and reads the body through the
    incremental reader, so the search and detail paths never share state.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = API_URL,
        plot: str = "full",
        timeout: float | None = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key
        self._api_url = api_url
        self._plot = plot
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_context(cls, context: AppContext) -> "OMDbProvider":
        return cls(
            api_key=context.api_key or "",
            api_url=context.config.api_url,
            plot=context.config.plot,
            timeout=context.config.timeout,
        )

    @property
    def name(self) -> str:
        return "OMDb"

    async def _get_json(self, params: dict[str, str]) -> dict[str, Any]:
        logger.debug("GET %s %s", self._api_url, params)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, headers=HEADERS, transport=self._transport
            ) as client:
                async with client.stream(
                    "GET", self._api_url, params={"apikey": self._api_key, **params}
                ) as response:
                    logger.debug("OMDb answered %s", response.status_code)
                    data = await read_json(response)
        except httpx.HTTPError as e:
            logger.error("OMDb request failed: %s", e)
            raise TransportError() from e

        if not isinstance(data, dict):
            raise MalformedPayload("Expected a JSON object from OMDb.")
        return data

    async def search(self, query: str) -> SearchPage:
        """Search titles by free text. Only the first page is fetched."""
        data = await self._get_json({"s": query})
        try:
            page = SearchPage.from_api(data)
        except (AttributeError, TypeError, ValueError) as e:
            logger.error("Unexpected search payload for %r: %s", query, e)
            raise MalformedPayload() from e
        logger.info("Search %r: ok=%s, %d item(s)", query, page.ok, len(page.items))
        return page

    async def fetch_details(self, item_id: str) -> DetailRecord | None:
        """Fetch full details for an IMDb id."""
        data = await self._get_json({"i": item_id, "plot": self._plot})
        if data.get("Response") != "True":
            logger.info("No details for %s: %s", item_id, data.get("Error"))
            return None
        try:
            return DetailRecord.from_api(data)
        except (AttributeError, TypeError, ValueError) as e:
            logger.error("Unexpected details payload for %s: %s", item_id, e)
            raise MalformedPayload() from e
