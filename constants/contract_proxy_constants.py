# --- EIP-1967 Proxy Storage Slots ---
# Each slot is bytes32(uint256(keccak256(label)) - 1)

# bytes32(uint256(keccak256('eip1967.proxy.implementation')) - 1)
SLOT_EIP1967_IMPL = "0x360894a13ba1a3210667c828492db98dca3e2076cc3735a920a3ca505d382bbc"

# bytes32(uint256(keccak256('eip1967.proxy.admin')) - 1)
SLOT_EIP1967_ADMIN = "0xb53127684a568b3173ae13b9f8a6016e243e63b6e8ee1178d6a717850b5d6103"

# bytes32(uint256(keccak256('eip1967.proxy.beacon')) - 1)
SLOT_EIP1967_BEACON = "0xa3f0ad74e5423aebfd80d3ef4346578335a9a72aeaee59ff6cb3582b35133d50"

# Labels the slots are derived from
EIP1967_SLOT_LABELS = {
    SLOT_EIP1967_IMPL: "eip1967.proxy.implementation",
    SLOT_EIP1967_ADMIN: "eip1967.proxy.admin",
    SLOT_EIP1967_BEACON: "eip1967.proxy.beacon",
}

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
