import asyncio
import json
import time

import aiohttp
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from resolver.rpc_client import RpcClient
from utils.exceptions import RpcRequestError

CONTRACT = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eb48"
SLOT = "0x360894a13ba1a3210667c828492db98dca3e2076cc3735a920a3ca505d382bbc"
WORD = "0x000000000000000000000000" + "43506849d7c04f9138d1a2050bbf3a0c054402dd"


def http_response(status=200, body=None, json_error=None):
    """A session.post(...) return value usable with `async with`."""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=body, side_effect=json_error)

    context_manager = MagicMock()
    context_manager.__aenter__.return_value = response
    context_manager.__aexit__.return_value = None
    return context_manager


@pytest.fixture
def mock_session():
    session = MagicMock()
    session.closed = False
    return session


@pytest.fixture
def no_sleep():
    with patch("resolver.rpc_client.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


def make_client(session, rpc_url="https://node-a", max_retries=2):
    client = RpcClient(rpc_url=rpc_url, max_retries=max_retries, timeout=5, rpc_min_interval=0)
    client._session = session
    return client


def test_comma_separated_urls_are_split():
    client = RpcClient(rpc_url="https://node-a, https://node-b,")
    assert client.rpc_urls == ["https://node-a", "https://node-b"]


@pytest.mark.parametrize("rpc_url", ["", [], " , "])
def test_requires_at_least_one_url(rpc_url):
    with pytest.raises(ValueError):
        RpcClient(rpc_url=rpc_url)


@pytest.mark.asyncio
async def test_get_storage_at_sends_json_rpc_payload(mock_session, no_sleep):
    mock_session.post.return_value = http_response(body={"jsonrpc": "2.0", "id": 1, "result": WORD})
    client = make_client(mock_session)

    word = await client.get_storage_at(CONTRACT, SLOT)

    assert word == WORD
    url = mock_session.post.call_args.args[0]
    payload = mock_session.post.call_args.kwargs["json"]
    assert url == "https://node-a"
    assert payload["method"] == "eth_getStorageAt"
    assert payload["params"] == [CONTRACT, SLOT, "latest"]
    assert payload["jsonrpc"] == "2.0"


@pytest.mark.asyncio
async def test_call_sends_eth_call(mock_session, no_sleep):
    mock_session.post.return_value = http_response(body={"jsonrpc": "2.0", "id": 1, "result": WORD})
    client = make_client(mock_session)

    result = await client.call(CONTRACT, "0x5c60da1b")

    assert result == WORD
    payload = mock_session.post.call_args.kwargs["json"]
    assert payload["method"] == "eth_call"
    assert payload["params"] == [{"to": CONTRACT, "data": "0x5c60da1b"}, "latest"]


@pytest.mark.asyncio
async def test_fails_over_to_next_provider(mock_session, no_sleep):
    mock_session.post.side_effect = [
        http_response(status=503),
        http_response(body={"jsonrpc": "2.0", "id": 2, "result": WORD}),
    ]
    client = make_client(mock_session, rpc_url=["https://node-a", "https://node-b"])

    assert await client.get_storage_at(CONTRACT, SLOT) == WORD
    assert [c.args[0] for c in mock_session.post.call_args_list] == ["https://node-a", "https://node-b"]


@pytest.mark.asyncio
async def test_retries_network_errors_then_raises(mock_session, no_sleep):
    mock_session.post.side_effect = aiohttp.ClientConnectionError("connection refused")
    client = make_client(mock_session, max_retries=3)

    with pytest.raises(RpcRequestError) as exc_info:
        await client.get_storage_at(CONTRACT, SLOT)

    assert exc_info.value.method == "eth_getStorageAt"
    assert mock_session.post.call_count == 3


@pytest.mark.asyncio
async def test_retriable_json_rpc_error_is_retried(mock_session, no_sleep):
    mock_session.post.side_effect = [
        http_response(body={"jsonrpc": "2.0", "id": 1, "error": {"code": -32603, "message": "internal error"}}),
        http_response(body={"jsonrpc": "2.0", "id": 2, "result": WORD}),
    ]
    client = make_client(mock_session)

    assert await client.get_storage_at(CONTRACT, SLOT) == WORD
    assert mock_session.post.call_count == 2


@pytest.mark.asyncio
async def test_reverted_call_is_not_retried(mock_session, no_sleep):
    mock_session.post.return_value = http_response(
        body={"jsonrpc": "2.0", "id": 1, "error": {"code": 3, "message": "execution reverted"}}
    )
    client = make_client(mock_session, max_retries=3)

    with pytest.raises(RpcRequestError, match="eth_call"):
        await client.call(CONTRACT, "0x5c60da1b")

    assert mock_session.post.call_count == 1


@pytest.mark.asyncio
async def test_invalid_json_is_retried(mock_session, no_sleep):
    mock_session.post.side_effect = [
        http_response(json_error=json.JSONDecodeError("Expecting value", "<html>", 0)),
        http_response(body={"jsonrpc": "2.0", "id": 2, "result": WORD}),
    ]
    client = make_client(mock_session)

    assert await client.get_storage_at(CONTRACT, SLOT) == WORD


@pytest.mark.asyncio
async def test_rate_limited_response_slows_down_client(mock_session, no_sleep):
    mock_session.post.side_effect = [
        http_response(status=429),
        http_response(body={"jsonrpc": "2.0", "id": 2, "result": WORD}),
    ]
    client = make_client(mock_session)

    assert await client.get_storage_at(CONTRACT, SLOT) == WORD
    assert client._min_interval > 0
    no_sleep.assert_awaited()


@pytest.mark.asyncio
async def test_async_context_manager_closes_session(mock_session):
    mock_session.close = AsyncMock()
    client = make_client(mock_session)

    async with client:
        pass

    mock_session.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_min_interval_holds_for_concurrent_requests(mock_session):
    sent_at = []

    def post(url, json=None):
        sent_at.append(time.monotonic())
        return http_response(body={"jsonrpc": "2.0", "id": json["id"], "result": WORD})

    mock_session.post.side_effect = post
    client = RpcClient(rpc_url="https://node-a", max_retries=1, timeout=5, rpc_min_interval=0.05)
    client._session = mock_session

    words = await asyncio.gather(*(client.get_storage_at(CONTRACT, SLOT) for _ in range(4)))

    assert words == [WORD] * 4
    gaps = [later - earlier for earlier, later in zip(sent_at, sent_at[1:])]
    assert len(gaps) == 3
    assert all(gap >= 0.045 for gap in gaps)


@pytest.mark.asyncio
async def test_rate_limited_last_attempt_does_not_back_off(mock_session, no_sleep):
    mock_session.post.return_value = http_response(status=429)
    client = make_client(mock_session, max_retries=2)

    with patch("resolver.rpc_client.random.uniform", return_value=0):
        with pytest.raises(RpcRequestError, match="HTTP 429"):
            await client.get_storage_at(CONTRACT, SLOT)

    # 429 backoff after attempt 1, then the wait between attempts; nothing after attempt 2
    long_sleeps = [c.args[0] for c in no_sleep.await_args_list if c.args[0] >= 1]
    assert long_sleeps == [1, 2]
    assert mock_session.post.call_count == 2
