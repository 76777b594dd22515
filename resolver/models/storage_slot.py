from enum import Enum

from constants.contract_proxy_constants import SLOT_EIP1967_ADMIN, SLOT_EIP1967_BEACON, SLOT_EIP1967_IMPL


class StorageSlotId(str, Enum):
    IMPLEMENTATION = SLOT_EIP1967_IMPL  # eip1967.proxy.implementation
    ADMIN = SLOT_EIP1967_ADMIN          # eip1967.proxy.admin
    BEACON = SLOT_EIP1967_BEACON        # eip1967.proxy.beacon
