from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_utils import decode_hex, encode_hex, function_signature_to_4byte_selector

from abi.eip1967_beacon_abi import BEACON_ABI
from resolver.rpc_client import PROVIDER_ERRORS, RpcClient
from utils.exceptions import BeaconReadError
from utils.formatter_utils import to_normalized_address
from utils.logger_utils import get_logger

logger = get_logger("Beacon Resolver")


def _function_signature(fn_abi: dict) -> str:
    input_types = ",".join(item["type"] for item in fn_abi["inputs"])
    return f"{fn_abi['name']}({input_types})"


class BeaconResolver:
    """
    Asks a beacon contract for the implementation it currently points to,
    through its zero-argument implementation() view.
    """

    def __init__(self, rpc_client: RpcClient):
        self._rpc_client = rpc_client

        implementation_abi = next(item for item in BEACON_ABI if item["name"] == "implementation")
        # implementation() -> 0x5c60da1b
        self._implementation_selector = encode_hex(
            function_signature_to_4byte_selector(_function_signature(implementation_abi))
        )
        self._output_types = [item["type"] for item in implementation_abi["outputs"]]

    async def resolve_beacon_implementation(self, beacon: str) -> str:
        """
        Returns the address reported by the beacon, unmodified. A zero address is
        passed through as-is, a call return value is not an unset storage slot.

        Raises:
            BeaconReadError: the call failed, reverted, hit an account without code,
                or returned data that does not decode as an address.
        """
        try:
            return_data = await self._rpc_client.call(beacon, self._implementation_selector)
        except PROVIDER_ERRORS as e:
            raise BeaconReadError(beacon, e) from e

        if not return_data or return_data == "0x":
            raise BeaconReadError(beacon, ValueError("empty return data (no contract code or no implementation())"))

        try:
            (implementation,) = decode(self._output_types, decode_hex(return_data))
        except (DecodingError, ValueError, TypeError) as e:
            raise BeaconReadError(beacon, e) from e

        implementation = to_normalized_address(implementation)
        logger.debug(f"Beacon {beacon} -> implementation {implementation}")
        return implementation
