import re

from utils.exceptions import InvalidAddressError

ADDRESS_PATTERN = re.compile(r"0x[a-fA-F0-9]{40}")


def is_valid_address(address: object) -> bool:
    """
    Checks the textual shape of an Ethereum address: 0x followed by 40 hex characters.
    Checksum casing is not enforced.
    """
    return isinstance(address, str) and ADDRESS_PATTERN.fullmatch(address) is not None


def validate_address(address: object) -> str:
    """
    Validate a contract address before any network activity.

    Args:
        address: The address string to validate.

    Returns:
        The address, unchanged.

    Raises:
        InvalidAddressError: If the address is malformed.
    """
    if not is_valid_address(address):
        raise InvalidAddressError(address)
    return address
