from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ProxyKind(str, Enum):
    NONE = "NONE"                           # Not an EIP-1967 proxy, or both slots unset
    EIP1967_DIRECT = "EIP-1967"             # Implementation slot set (Transparent / UUPS)
    EIP1967_BEACON = "EIP-1967 (Beacon)"    # Beacon slot set


class ProxyAnalysis(BaseModel):
    """Outcome of resolving one contract. Immutable, equal by value."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    proxy_address: str
    proxy_kind: ProxyKind = ProxyKind.NONE

    implementation: str | None = None
    admin: str | None = None
    beacon: str | None = None
    beacon_implementation: str | None = None

    @property
    def is_proxy(self) -> bool:
        return self.proxy_kind != ProxyKind.NONE

    @property
    def beacon_implementation_failed(self) -> bool:
        """A beacon was detected but its implementation() could not be read."""
        return self.beacon is not None and self.beacon_implementation is None
