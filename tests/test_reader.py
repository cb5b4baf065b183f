"""Tests for the incremental response reader."""

from __future__ import annotations

import json

import httpx
import pytest

from cinefind.errors import MalformedPayload, StreamUnsupported, TransportError
from cinefind.reader import decode_chunks, iter_response_chunks, parse_payload, read_json

from conftest import ChunkedStream, SyncOnlyStream, aiter_chunks, split_bytes

PAYLOAD = {
    "Response": "True",
    "Search": [
        {"imdbID": "tt0211915", "Title": "Amélie", "Year": "2001", "Type": "movie", "Poster": "N/A"},
        {"imdbID": "tt0245429", "Title": "千と千尋の神隠し", "Year": "2001", "Type": "movie", "Poster": "N/A"},
        {"imdbID": "tt9999999", "Title": "Čapek 🎬", "Year": "2020", "Type": "series", "Poster": "N/A"},
    ],
}
BODY = json.dumps(PAYLOAD, ensure_ascii=False).encode("utf-8")
JSON_HEADERS = {"content-type": "application/json; charset=utf-8"}


class TestDecodeChunks:
    @pytest.mark.asyncio
    async def test_every_two_way_split_decodes_the_same(self):
        expected = BODY.decode("utf-8")
        for cut in range(len(BODY) + 1):
            assert await decode_chunks(aiter_chunks(split_bytes(BODY, cut))) == expected

    @pytest.mark.asyncio
    async def test_splits_inside_multibyte_characters(self):
        text = "千と千尋 🎬 Amélie"
        data = text.encode("utf-8")
        # one byte per chunk splits every multi-byte character
        chunks = [data[i:i + 1] for i in range(len(data))]
        assert await decode_chunks(aiter_chunks(chunks)) == text

    @pytest.mark.asyncio
    async def test_three_way_splits_around_emoji(self):
        text = "a🎬b"
        data = text.encode("utf-8")
        for first in range(len(data) + 1):
            for second in range(first, len(data) + 1):
                chunks = split_bytes(data, first, second)
                assert await decode_chunks(aiter_chunks(chunks)) == text

    @pytest.mark.asyncio
    async def test_empty_stream(self):
        assert await decode_chunks(aiter_chunks([])) == ""

    @pytest.mark.asyncio
    async def test_empty_chunks_are_skipped(self):
        assert await decode_chunks(aiter_chunks([b"", b'{"a"', b"", b": 1}", b""])) == '{"a": 1}'

    @pytest.mark.asyncio
    async def test_body_ending_mid_character_is_malformed(self):
        data = "🎬".encode("utf-8")[:-1]
        with pytest.raises(MalformedPayload):
            await decode_chunks(aiter_chunks([data]))

    @pytest.mark.asyncio
    async def test_invalid_bytes_are_malformed(self):
        with pytest.raises(MalformedPayload) as exc_info:
            await decode_chunks(aiter_chunks([b'{"a": "', b"\xff\xfe", b'"}']))
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)

    @pytest.mark.asyncio
    async def test_each_call_gets_its_own_decoder(self):
        data = "é".encode("utf-8")
        # a dangling lead byte in one call must not leak into the next
        with pytest.raises(MalformedPayload):
            await decode_chunks(aiter_chunks([data[:1]]))
        with pytest.raises(MalformedPayload):
            await decode_chunks(aiter_chunks([data[1:]]))
        assert await decode_chunks(aiter_chunks([b"ok"])) == "ok"

    @pytest.mark.asyncio
    async def test_latin1_encoding(self):
        data = "Amélie".encode("latin-1")
        assert await decode_chunks(aiter_chunks([data[:3], data[3:]]), "latin-1") == "Amélie"


class TestParsePayload:
    def test_valid_json(self):
        assert parse_payload('{"Response": "False"}') == {"Response": "False"}

    def test_invalid_json(self):
        with pytest.raises(MalformedPayload) as exc_info:
            parse_payload('{"Response": ')
        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)

    def test_empty_text_is_malformed(self):
        with pytest.raises(MalformedPayload):
            parse_payload("")


class TestReadJson:
    @pytest.mark.asyncio
    async def test_chunked_response(self):
        chunks = split_bytes(BODY, 7, 40, 41, 42, 100)
        response = httpx.Response(200, headers=JSON_HEADERS, stream=ChunkedStream(chunks))
        assert await read_json(response) == PAYLOAD

    @pytest.mark.asyncio
    async def test_chunked_response_through_client(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers=JSON_HEADERS, stream=ChunkedStream(split_bytes(BODY, 3, 50)))

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            async with client.stream("GET", "https://example.test/") as response:
                assert await read_json(response) == PAYLOAD

    @pytest.mark.asyncio
    async def test_buffered_and_chunked_paths_agree(self):
        buffered = httpx.Response(200, headers=JSON_HEADERS, content=BODY)
        with pytest.raises(StreamUnsupported):
            iter_response_chunks(buffered)

        chunked = httpx.Response(200, headers=JSON_HEADERS, stream=ChunkedStream(split_bytes(BODY, 1, 2, 3)))
        assert await read_json(buffered) == await read_json(chunked)

    @pytest.mark.asyncio
    async def test_sync_only_stream_falls_back_to_whole_body(self):
        response = httpx.Response(200, headers=JSON_HEADERS, stream=SyncOnlyStream(BODY))
        with pytest.raises(StreamUnsupported):
            iter_response_chunks(response)
        assert await read_json(response) == PAYLOAD

    @pytest.mark.asyncio
    async def test_consumed_body_without_content_is_a_transport_error(self):
        response = httpx.Response(200, headers=JSON_HEADERS, stream=ChunkedStream([BODY]))
        async for _ in response.aiter_raw():
            pass
        with pytest.raises(TransportError):
            await read_json(response)

    @pytest.mark.asyncio
    async def test_invalid_json_body(self):
        response = httpx.Response(200, headers=JSON_HEADERS, stream=ChunkedStream([b"<html>", b"oops</html>"]))
        with pytest.raises(MalformedPayload):
            await read_json(response)

    @pytest.mark.asyncio
    async def test_invalid_json_in_buffered_body(self):
        response = httpx.Response(200, headers=JSON_HEADERS, content=b"not json")
        with pytest.raises(MalformedPayload):
            await read_json(response)

    @pytest.mark.asyncio
    async def test_declared_charset_is_used(self):
        body = '{"Title": "Amélie"}'.encode("latin-1")
        response = httpx.Response(
            200,
            headers={"content-type": "application/json; charset=iso-8859-1"},
            stream=ChunkedStream([body[:14], body[14:]]),
        )
        assert await read_json(response) == {"Title": "Amélie"}

    @pytest.mark.asyncio
    async def test_unknown_charset_falls_back_to_utf8(self):
        response = httpx.Response(
            200,
            headers={"content-type": "application/json; charset=made-up"},
            stream=ChunkedStream([BODY]),
        )
        assert await read_json(response) == PAYLOAD
