from typing import Optional


class ProxyResolverError(Exception):
    """Base class for every error raised by the proxy resolver."""


class RetriableValueError(ValueError):
    """A JSON-RPC error response that is worth sending to the node (or another node) again."""


class RpcRequestError(ProxyResolverError):
    """The provider could not serve a JSON-RPC request."""

    def __init__(self, method: str, message: str):
        self.method = method
        self.message = message
        super().__init__(f"{method} failed: {message}")


class InvalidAddressError(ProxyResolverError, ValueError):
    def __init__(self, address: object):
        self.address = address
        super().__init__(
            f"Invalid address format: {address}. "
            "Address must be a valid Ethereum address (0x followed by 40 hex characters)"
        )


class SlotReadError(ProxyResolverError):
    """
    Reading one of the EIP-1967 storage slots failed.
    Fatal for the analysis: without the slot value the proxy kind cannot be decided.
    """

    def __init__(self, slot, contract: str, cause: Optional[BaseException] = None):
        self.slot = slot
        self.contract = contract
        self.cause = cause
        slot_name = getattr(slot, "name", str(slot)).lower()
        slot_key = getattr(slot, "value", slot)
        super().__init__(f"Failed to read {slot_name} slot {slot_key} of {contract}: {cause}")


class BeaconReadError(ProxyResolverError):
    """
    The beacon's implementation() call failed (revert, no code, bad return data, network).
    Recovered by the resolver, the beacon itself has already been detected.
    """

    def __init__(self, beacon: str, cause: Optional[BaseException] = None):
        self.beacon = beacon
        self.cause = cause
        super().__init__(f"Failed to get implementation from beacon {beacon}: {cause}")
