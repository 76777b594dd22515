# --- EIP-1967 Beacon (IBeacon) ---
BEACON_ABI = [
    {
        "inputs": [],
        "name": "implementation",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function"
    }
]
