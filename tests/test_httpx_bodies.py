"""Draining real ``httpx`` responses: mock transports, ASGI apps, encodings."""

from __future__ import annotations

import gzip
import typing

import httpx
import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import StreamingResponse
from starlette.routing import Route

import bstb
from bstb import StreamConverter
from bstb.process import aprocess_stream, process_stream
from tests.streams import achunks, afailing_chunks, failing_chunks

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def chunked_handler(*chunks: bytes) -> typing.Callable[[httpx.Request], httpx.Response]:
    """MockTransport handler streaming ``chunks`` to an async client."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=achunks(*chunks))

    return handler


def failing_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        content=afailing_chunks(
            b"Hello", exc=httpx.ReadError("connection lost", request=request)
        ),
    )


async def hello_world(scope, receive, send):
    await send(
        {
            "type": "http.response.start",
            "status": 200,
            "headers": [(b"content-type", b"text/plain")],
        }
    )
    for part in (b"Hello", b", ", b"World!"):
        await send({"type": "http.response.body", "body": part, "more_body": True})
    await send({"type": "http.response.body", "body": b""})


async def streamed_euro(request: Request) -> StreamingResponse:
    async def body() -> typing.AsyncIterator[bytes]:
        yield b"price: 5 \xe2\x82"
        yield b"\xac"

    return StreamingResponse(body(), media_type="text/plain; charset=utf-8")


starlette_app = Starlette(routes=[Route("/euro", streamed_euro)])


# ===========================================================================
# MockTransport
# ===========================================================================


class TestMockTransport:
    @pytest.mark.anyio
    async def test_streamed_response_to_string(self) -> None:
        transport = httpx.MockTransport(chunked_handler(b"Hello", b", ", b"World!"))
        async with httpx.AsyncClient(transport=transport) as client:
            async with client.stream("GET", "http://api/hello") as response:
                text = await StreamConverter().abody_to_string(response)
        assert text == "Hello, World!"

    @pytest.mark.anyio
    async def test_streamed_response_to_bytes(self) -> None:
        transport = httpx.MockTransport(chunked_handler(b"\x00\x01", b"\xff"))
        async with httpx.AsyncClient(transport=transport) as client:
            async with client.stream("GET", "http://api/bin") as response:
                data = await aprocess_stream(response)
        assert data == b"\x00\x01\xff"

    @pytest.mark.anyio
    async def test_split_code_point(self) -> None:
        transport = httpx.MockTransport(chunked_handler(b"\xe2\x82", b"\xac"))
        async with httpx.AsyncClient(transport=transport) as client:
            async with client.stream("GET", "http://api/euro") as response:
                assert await StreamConverter().abody_to_string(response) == "€"

    @pytest.mark.anyio
    async def test_read_error_mid_stream(self) -> None:
        async with httpx.AsyncClient(
            transport=httpx.MockTransport(failing_handler)
        ) as client:
            async with client.stream("GET", "http://api/broken") as response:
                with pytest.raises(bstb.TransportError) as exc_info:
                    await StreamConverter().abody_to_bytes(response)
        assert isinstance(exc_info.value.cause, httpx.ReadError)
        assert str(exc_info.value) == "Transport error: connection lost"

    @pytest.mark.anyio
    async def test_consumed_stream_is_transport_error(self) -> None:
        transport = httpx.MockTransport(chunked_handler(b"once"))
        async with httpx.AsyncClient(transport=transport) as client:
            async with client.stream("GET", "http://api/once") as response:
                assert await aprocess_stream(response) == b"once"
                with pytest.raises(bstb.TransportError) as exc_info:
                    await aprocess_stream(response)
        assert isinstance(exc_info.value.cause, httpx.StreamConsumed)

    @pytest.mark.anyio
    async def test_already_read_response(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="Hello, world!")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            response = await client.get("http://api/")
        assert await StreamConverter().abody_to_string(response) == "Hello, world!"

    @pytest.mark.anyio
    async def test_content_encoding_is_decoded(self) -> None:
        payload = "a" * 16384

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                headers={"content-encoding": "gzip"},
                content=gzip.compress(payload.encode()),
            )

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            async with client.stream("GET", "http://api/gz") as response:
                assert await StreamConverter().abody_to_string(response) == payload

    def test_sync_client(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=iter([b"Hello", b", ", b"World!"]))

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            with client.stream("GET", "http://api/hello") as response:
                assert StreamConverter().body_to_string(response) == "Hello, World!"

    def test_sync_client_read_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, content=failing_chunks(b"a", exc=httpx.ReadError("reset"))
            )

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            with client.stream("GET", "http://api/broken") as response:
                with pytest.raises(bstb.TransportError):
                    process_stream(response)


# ===========================================================================
# ASGI apps
# ===========================================================================


class TestASGI:
    @pytest.mark.anyio
    async def test_raw_asgi_app(self) -> None:
        transport = httpx.ASGITransport(app=hello_world)
        async with httpx.AsyncClient(
            transport=transport, base_url="http://testserver"
        ) as client:
            async with client.stream("GET", "/") as response:
                data = await StreamConverter().abody_to_bytes(response)
        assert data == b"Hello, World!"
        assert len(data) == 13

    @pytest.mark.anyio
    async def test_starlette_streaming_response(self) -> None:
        transport = httpx.ASGITransport(app=starlette_app)
        async with httpx.AsyncClient(
            transport=transport, base_url="http://testserver"
        ) as client:
            async with client.stream("GET", "/euro") as response:
                assert response.status_code == 200
                text = await StreamConverter().abody_to_string(response)
        assert text == "price: 5 €"
