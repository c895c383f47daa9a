"""Tests for the Bangumi collection client."""

import httpx
import pytest

from bgm_overlap import bangumi
from bgm_overlap.exceptions import FormatError, TransportError

from conftest import raw_entry


def _client(handler) -> bangumi.BangumiClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return bangumi.BangumiClient(base_url="https://api.example/v0/", client=http)


@pytest.mark.asyncio
async def test_fetch_page_builds_request_and_parses() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"total": 2, "data": [raw_entry(1), raw_entry(2)]})

    client = _client(handler)
    page = await client.fetch_page("alice", 50)

    assert page.offset == 50
    assert page.total == 2
    assert [e["subject"]["id"] for e in page.entries] == [1, 2]

    request = seen[0]
    assert request.url.path == "/v0/users/alice/collections"
    assert request.url.params["type"] == "2"
    assert request.url.params["limit"] == "50"
    assert request.url.params["offset"] == "50"
    assert request.url.params["subject_type"] == ""


@pytest.mark.asyncio
async def test_fetch_page_quotes_username() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"total": 0, "data": []})

    await _client(handler).fetch_page("a/b", 0)
    assert seen[0].url.raw_path.startswith(b"/v0/users/a%2Fb/collections")


@pytest.mark.asyncio
async def test_fetch_page_http_error_is_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="user not found")

    with pytest.raises(TransportError) as excinfo:
        await _client(handler).fetch_page("ghost", 0)
    assert excinfo.value.status_code == 404
    assert "404" in str(excinfo.value)


@pytest.mark.asyncio
async def test_fetch_page_network_error_is_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError) as excinfo:
        await _client(handler).fetch_page("alice", 0)
    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_fetch_page_invalid_json_is_format_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    with pytest.raises(FormatError):
        await _client(handler).fetch_page("alice", 0)


@pytest.mark.parametrize(
    "payload",
    [[], {"data": []}, {"total": "3", "data": []}, {"total": 3, "data": None}],
)
@pytest.mark.asyncio
async def test_fetch_page_wrong_shape_is_format_error(payload) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    with pytest.raises(FormatError):
        await _client(handler).fetch_page("alice", 0)


def test_limit_is_capped_at_api_maximum() -> None:
    client = bangumi.BangumiClient(
        limit=500, client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: None))
    )
    assert client.limit == bangumi.MAX_PAGE_LIMIT
