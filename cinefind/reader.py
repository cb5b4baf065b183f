"""Incremental response body reader.

Pulls an HTTP response body chunk by chunk, decodes every chunk with a
stateful incremental decoder (so multi-byte characters split across chunk
boundaries survive) and parses the reassembled text as JSON once the body
is exhausted.

When a response has no readable async body the reader falls back to a
single whole-body parse; callers get the same parsed object either way.
"""

import codecs
import json
import logging
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

import httpx

from cinefind.errors import MalformedPayload, StreamUnsupported, TransportError

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"


def _response_encoding(response: httpx.Response) -> str:
    encoding = response.charset_encoding or DEFAULT_ENCODING
    try:
        codecs.lookup(encoding)
    except LookupError:
        logger.debug("Unknown charset %r, decoding as %s", encoding, DEFAULT_ENCODING)
        return DEFAULT_ENCODING
    return encoding


async def decode_chunks(chunks: AsyncIterable[bytes], encoding: str = DEFAULT_ENCODING) -> str:
    """Decode an async stream of byte chunks into one string."""
    decoder = codecs.getincrementaldecoder(encoding)()
    parts: list[str] = []
    count = 0
    try:
        async for chunk in chunks:
            if not chunk:
                continue
            count += 1
            parts.append(decoder.decode(chunk))
        # flush; raises if the body ended inside a multi-byte sequence
        parts.append(decoder.decode(b"", final=True))
    except UnicodeDecodeError as exc:
        raise MalformedPayload(f"Response body is not valid {encoding}.") from exc

    logger.debug("Decoded %d chunk(s) into %d characters", count, sum(len(p) for p in parts))
    return "".join(parts)


def parse_payload(text: str) -> Any:
    """Parse the accumulated body text as JSON."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedPayload() from exc


def iter_response_chunks(response: httpx.Response) -> AsyncIterator[bytes]:
    """Return the response body as an async chunk iterator.

    Raises:
        StreamUnsupported: the body was already consumed, or the response
            only carries a synchronous stream.
    """
    if response.is_stream_consumed:
        raise StreamUnsupported("Response body was already consumed.")
    if not isinstance(response.stream, httpx.AsyncByteStream):
        raise StreamUnsupported()
    return response.aiter_bytes()


def read_whole_body(response: httpx.Response) -> bytes:
    """Read the complete body in one go, for responses without a chunked body."""
    try:
        return response.content
    except httpx.ResponseNotRead:
        pass

    if isinstance(response.stream, httpx.SyncByteStream) and not response.is_stream_consumed:
        return response.read()

    raise TransportError("Response body is not available.")


async def read_json(response: httpx.Response) -> Any:
    """Read the response body incrementally and parse it as JSON."""
    encoding = _response_encoding(response)

    try:
        chunks = iter_response_chunks(response)
    except StreamUnsupported as exc:
        logger.debug("%s Falling back to whole-body read.", exc.message)
        body = read_whole_body(response)
        try:
            text = body.decode(encoding)
        except UnicodeDecodeError as decode_exc:
            raise MalformedPayload(f"Response body is not valid {encoding}.") from decode_exc
        return parse_payload(text)

    text = await decode_chunks(chunks, encoding)
    return parse_payload(text)
