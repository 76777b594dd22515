import asyncio
from typing import Dict, Iterable, Optional, Tuple, Union

from resolver.models.proxy_analysis import ProxyAnalysis, ProxyKind
from resolver.models.storage_slot import StorageSlotId
from resolver.rpc_client import RpcClient
from resolver.service.beacon_resolver import BeaconResolver
from resolver.service.storage_slot_reader import StorageSlotReader
from utils.async_utils import gather_with_concurrency
from utils.exceptions import BeaconReadError, ProxyResolverError
from utils.formatter_utils import storage_word_to_address
from utils.logger_utils import get_logger
from utils.validation_utils import validate_address

logger = get_logger("Proxy Resolver Service")

# (kind, implementation, beacon, beacon_implementation)
ProxyKindDetection = Tuple[ProxyKind, Optional[str], Optional[str], Optional[str]]


class ProxyResolverService:
    def __init__(self, rpc_client: RpcClient):
        self._slot_reader = StorageSlotReader(rpc_client)
        self._beacon_resolver = BeaconResolver(rpc_client)

    async def analyze(self, proxy_address: str) -> ProxyAnalysis:
        """
        Resolves an EIP-1967 proxy.

        The implementation/beacon sequence and the admin read run concurrently;
        at most four remote reads are made. A failed beacon implementation() call
        is recovered (beacon_implementation stays None), a failed slot read is not.

        Raises:
            InvalidAddressError: malformed address, raised before any network call.
            SlotReadError: one of the storage reads failed.
        """
        validate_address(proxy_address)

        detection, admin = await asyncio.gather(
            self._detect_proxy_kind(proxy_address),
            self._read_address(proxy_address, StorageSlotId.ADMIN),
            return_exceptions=True,
        )
        # Surface the detection failure first, it decides whether there is a proxy at all
        for outcome in (detection, admin):
            if isinstance(outcome, BaseException):
                raise outcome

        proxy_kind, implementation, beacon, beacon_implementation = detection
        analysis = ProxyAnalysis(
            proxy_address=proxy_address,
            proxy_kind=proxy_kind,
            implementation=implementation,
            admin=admin,
            beacon=beacon,
            beacon_implementation=beacon_implementation,
        )
        logger.info(f"{proxy_address}: {proxy_kind.value}")
        return analysis

    async def analyze_many(
        self, addresses: Iterable[str], max_concurrency: int = 4
    ) -> Dict[str, Union[ProxyAnalysis, ProxyResolverError]]:
        """
        Analyzes several contracts with bounded concurrency.

        Addresses are de-duplicated case-insensitively, keeping the first spelling and
        the input order. Each value is either the analysis or the error raised for
        that address, so one unreachable contract does not abort the batch.
        """
        first_spellings: Dict[object, str] = {}
        for address in addresses:
            # Malformed entries are kept as they are and fail validation in analyze
            key = address.lower() if isinstance(address, str) else address
            first_spellings.setdefault(key, address)
        unique_addresses = list(first_spellings.values())

        async def safe_analyze(address: str) -> Union[ProxyAnalysis, ProxyResolverError]:
            try:
                return await self.analyze(address)
            except ProxyResolverError as e:
                logger.warning(f"Analysis of {address} failed: {e}")
                return e

        logger.info(f"Analyzing {len(unique_addresses)} contracts (max concurrency {max_concurrency})")
        results = await gather_with_concurrency(
            max_concurrency, *(safe_analyze(address) for address in unique_addresses)
        )
        return dict(zip(unique_addresses, results))

    async def _detect_proxy_kind(self, proxy_address: str) -> ProxyKindDetection:
        # 1. Implementation slot takes priority, the beacon slot is not even read
        implementation = await self._read_address(proxy_address, StorageSlotId.IMPLEMENTATION)
        if implementation:
            return ProxyKind.EIP1967_DIRECT, implementation, None, None

        # 2. Beacon slot
        beacon = await self._read_address(proxy_address, StorageSlotId.BEACON)
        if not beacon:
            return ProxyKind.NONE, None, None, None

        # 3. Follow the beacon, failure here does not invalidate the detection
        try:
            beacon_implementation = await self._beacon_resolver.resolve_beacon_implementation(beacon)
        except BeaconReadError as e:
            logger.warning(f"Beacon proxy {proxy_address}: {e}")
            beacon_implementation = None

        return ProxyKind.EIP1967_BEACON, None, beacon, beacon_implementation

    async def _read_address(self, proxy_address: str, slot: StorageSlotId) -> Optional[str]:
        word = await self._slot_reader.read_slot(proxy_address, slot)
        return storage_word_to_address(word)
