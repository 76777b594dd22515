import aiohttp
import asyncio
import json
import random
import time
from typing import Any, List, Optional, Union

from utils.exceptions import RetriableValueError, RpcRequestError
from utils.logger_utils import get_logger
from utils.rpc_utils import build_rpc_payload, rpc_response_to_result

logger = get_logger("Rpc Client")

# Failures of the provider itself, as opposed to an empty or reverted answer
PROVIDER_ERRORS = (RpcRequestError, aiohttp.ClientError, asyncio.TimeoutError, OSError)


class RpcClient(object):
    """
    Read-only JSON-RPC client for the chain-data the resolver consumes
    (eth_getStorageAt, eth_call).
    Uses a persistent ClientSession for Connection Pooling, fails over between
    providers and applies Adaptive Rate Limiting and Exponential Backoff for 429s.
    """
    def __init__(self, rpc_url: Union[str, List[str]], max_retries: int = 3, timeout: int = 30, rpc_min_interval: float = 0.15):
        if isinstance(rpc_url, str):
            self.rpc_urls = [url.strip() for url in rpc_url.split(",") if url.strip()]
        else:
            self.rpc_urls = list(rpc_url)

        if not self.rpc_urls:
            raise ValueError("At least one RPC URL must be provided.")
        if max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {max_retries}")

        self.id_counter = 0
        self.max_retries = max_retries
        # Total timeout for the request (connect + read)
        self.timeout = aiohttp.ClientTimeout(total=timeout)

        # Persistent Session
        self._session: Optional[aiohttp.ClientSession] = None

        # Global Rate Limiter, shared by every concurrent request of this client
        self._last_request_time = 0.0
        self._min_interval = rpc_min_interval
        self._rate_limit_lock = asyncio.Lock()

    async def __aenter__(self) -> "RpcClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Lazy loads or returns the existing session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(limit=100, force_close=False)
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=self.timeout
            )
        return self._session

    async def close(self):
        """Closes the underlying session."""
        if self._session and not self._session.closed:
            await self._session.close()

    def _generate_id(self) -> int:
        self.id_counter += 1
        return self.id_counter

    async def _enforce_rate_limit(self):
        """Ensures a minimum interval between requests to avoid bursting."""
        async with self._rate_limit_lock:
            elapsed = time.time() - self._last_request_time
            if elapsed < self._min_interval:
                await asyncio.sleep(self._min_interval - elapsed)
            self._last_request_time = time.time()

    async def _handle_429_backoff(self, url: str, attempt: int, method_name: str = "request"):
        """
        Adaptive handling for 429 Too Many Requests.
        1. Increases the rate limit interval (slows down the client permanently).
        2. Sleeps with exponential backoff + jitter, except on the last attempt.
        """
        # Increase the delay between requests by 50%, up to a max of 2.0s per request.
        previous_interval = self._min_interval
        self._min_interval = min(max(self._min_interval, 0.05) * 1.5, 2.0)

        if self._min_interval > previous_interval:
            logger.warning(f"RPC 429 Rate Limit at {url}. Increasing per-request delay from {previous_interval:.2f}s to {self._min_interval:.2f}s")

        if attempt >= self.max_retries:
            return

        # 1s, 2s, 4s, 8s, 16s... + random(0, 1s)
        backoff_time = (2 ** (attempt - 1)) + random.uniform(0, 1)
        logger.warning(f"RPC 429 at {url} for {method_name}. Backing off for {backoff_time:.2f}s...")
        await asyncio.sleep(backoff_time)

    async def get_storage_at(self, address: str, position: str, block: str = "latest") -> Optional[str]:
        """Raw 32-byte word stored at `position` of `address`, as a 0x-prefixed hex string."""
        return await self._make_request("eth_getStorageAt", [address, position, block])

    async def call(self, to: str, data: str, block: str = "latest") -> str:
        """Read-only eth_call. Returns the raw return data (0x-prefixed hex)."""
        return await self._make_request("eth_call", [{"to": to, "data": data}, block])

    async def _make_request(self, method_name: str, params: List[Any]) -> Any:
        """
        Sends one JSON-RPC request, walking through every provider on each attempt.

        Raises:
            RpcRequestError: non-retriable JSON-RPC error (e.g. execution reverted),
                or every provider failed on every attempt.
        """
        session = await self._get_session()
        last_error = "no response"

        for attempt in range(1, self.max_retries + 1):
            for url in self.rpc_urls:
                payload = build_rpc_payload(method_name, params, self._generate_id())
                try:
                    await self._enforce_rate_limit()
                    async with session.post(url, json=payload) as response:
                        if response.status == 200:
                            data = await response.json(content_type=None)
                            return rpc_response_to_result(data)
                        elif response.status == 429:
                            last_error = f"HTTP 429 at {url}"
                            await self._handle_429_backoff(url, attempt, method_name)
                        else:
                            last_error = f"HTTP {response.status} at {url}"
                            logger.error(f"RPC HTTP Error {response.status} ({method_name}) at {url}. Trying next provider...")
                except RetriableValueError as e:
                    last_error = str(e)
                    logger.warning(f"Retriable RPC error in {method_name} at {url}: {e}")
                except json.JSONDecodeError as e:
                    last_error = f"invalid JSON from {url}: {e}"
                    logger.warning(f"Invalid JSON in {method_name} response at {url}: {e}")
                except ValueError as e:
                    # JSON-RPC error that another attempt would not fix
                    raise RpcRequestError(method_name, str(e)) from e
                except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                    last_error = f"network error at {url}: {e!r}"
                    logger.warning(f"Network error in {method_name} at {url}: {e!r}")

            if attempt < self.max_retries:
                wait_time = (2 ** attempt) + random.uniform(0, 1)
                logger.warning(f"All providers failed for {method_name} (Attempt {attempt}). Retrying in {wait_time:.2f}s...")
                await asyncio.sleep(wait_time)

        logger.error(f"FAILED {method_name} on all providers after {self.max_retries} attempts.")
        raise RpcRequestError(method_name, f"all providers failed after {self.max_retries} attempts ({last_error})")
