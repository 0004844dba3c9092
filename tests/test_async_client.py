import base64
import json

import httpx
import pytest

from tinify_client import (
    AsyncSource,
    AsyncTinifyClient,
    Tinify,
    TinifyAccountError,
    TinifyConfigError,
    TinifyFileError,
    TinifyLogicError,
    TinifyTransportError,
    fit,
    to_webp,
)

LOCATION = "https://api.tinify.com/output/abc123"


class Recorder:
    """Mock API: replies with queued responses and keeps every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)


def make_client(*responses):
    recorder = Recorder(*responses)
    client = AsyncTinifyClient("test_key", transport=httpx.MockTransport(recorder))
    return client, recorder


def test_get_async_client():
    client = Tinify().set_key("test_key").get_async_client()

    assert isinstance(client, AsyncTinifyClient)
    assert client.api_key == "test_key"


def test_get_async_client_without_key():
    with pytest.raises(TinifyConfigError):
        Tinify().get_async_client()


@pytest.mark.asyncio
async def test_from_buffer():
    client, recorder = make_client(
        httpx.Response(201, content=b"compressed", headers={"Location": LOCATION})
    )
    async with client:
        source = await client.from_buffer(b"original")

    assert isinstance(source, AsyncSource)
    assert source.to_buffer() == b"compressed"
    assert source.location == LOCATION

    request = recorder.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.tinify.com/shrink"
    assert request.content == b"original"
    expected = base64.b64encode(b"api:test_key").decode()
    assert request.headers["Authorization"] == f"Basic {expected}"


@pytest.mark.asyncio
async def test_from_url():
    url = "https://tinypng.com/images/panda-happy.png"
    client, recorder = make_client(
        httpx.Response(201, content=b"panda", headers={"Location": LOCATION})
    )
    async with client:
        source = await client.from_url(url)

    assert source.buffer == b"panda"
    assert json.loads(recorder.requests[0].content) == {"source": {"url": url}}


@pytest.mark.asyncio
async def test_from_file_missing(tmp_path):
    client, recorder = make_client()
    async with client:
        with pytest.raises(TinifyFileError):
            await client.from_file(tmp_path / "missing.png")

    assert recorder.requests == []


@pytest.mark.asyncio
async def test_unauthorized():
    body = {"error": "Unauthorized", "message": "Credentials are invalid"}
    client, recorder = make_client(httpx.Response(401, json=body))
    async with client:
        with pytest.raises(TinifyAccountError) as exc_info:
            await client.from_buffer(b"original")

    assert exc_info.value.upstream.error == "Unauthorized"
    assert len(recorder.requests) == 1


@pytest.mark.asyncio
async def test_no_timeout_by_default():
    client = Tinify().set_key("test_key").get_async_client()
    async with client:
        assert client.timeout is None
        assert client.http.timeout == httpx.Timeout(None)


@pytest.mark.asyncio
async def test_timeout_passed_to_httpx():
    client = Tinify().set_key("test_key").get_async_client(timeout=12.5)
    async with client:
        assert client.timeout == 12.5
        assert client.http.timeout == httpx.Timeout(12.5)


@pytest.mark.asyncio
async def test_malformed_location():
    client, recorder = make_client(
        httpx.Response(201, content=b"compressed", headers={"Location": "http://[::1"})
    )
    async with client:
        with pytest.raises(TinifyTransportError) as exc_info:
            await client.from_buffer(b"original")

    assert isinstance(exc_info.value.__cause__, ValueError)
    assert len(recorder.requests) == 1


@pytest.mark.asyncio
async def test_connection_error():
    def refuse(request):
        raise httpx.ConnectError("refused", request=request)

    client = AsyncTinifyClient("test_key", transport=httpx.MockTransport(refuse))
    async with client:
        with pytest.raises(TinifyTransportError) as exc_info:
            await client.from_buffer(b"original")

    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_chain_posts_to_each_location():
    client, recorder = make_client(
        httpx.Response(201, content=b"compressed", headers={"Location": LOCATION}),
        httpx.Response(200, content=b"resized", headers={"Location": LOCATION + "/2"}),
        httpx.Response(200, content=b"converted"),
    )
    async with client:
        source = await client.from_buffer(b"original")
        resized = await source.resize(fit(400, 200))
        converted = await resized.convert(to_webp(), background="black")

    urls = [str(r.url) for r in recorder.requests]
    assert urls == ["https://api.tinify.com/shrink", LOCATION, LOCATION + "/2"]
    assert json.loads(recorder.requests[1].content) == {
        "resize": {"method": "fit", "width": 400, "height": 200}
    }
    assert json.loads(recorder.requests[2].content) == {
        "convert": {"type": "image/webp"},
        "transform": {"background": "black"},
    }
    assert resized.buffer == b"resized"
    assert converted.buffer == b"converted"
    assert converted.location is None
    assert source.buffer == b"compressed"


@pytest.mark.asyncio
async def test_operation_without_location():
    client, recorder = make_client()
    source = AsyncSource(client, b"compressed")
    async with client:
        with pytest.raises(TinifyLogicError):
            await source.resize(fit(10, 10))

    assert recorder.requests == []


@pytest.mark.asyncio
async def test_to_file(tmp_path):
    client, _ = make_client()
    path = tmp_path / "out.png"
    async with client:
        AsyncSource(client, b"compressed").to_file(path)

    assert path.read_bytes() == b"compressed"
