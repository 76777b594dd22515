# MIT License
#
# Copyright (c) 2018 Evgeny Medvedev, evge.medvedev@gmail.com
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
#
# Modified by: Cuong CT, 6/12/2025
# Change Description: using eth_utils library for implement some formatter utilities

from typing import Optional, Union

from eth_utils import is_hex
from eth_utils import to_checksum_address as eth_to_normalized_address

from constants.contract_proxy_constants import ZERO_ADDRESS
from utils.logger_utils import get_logger

logger = get_logger("Formatter Utils")

# 20 bytes = 40 hex chars
ADDRESS_HEX_LENGTH = 40


def to_normalized_address(address: Optional[str]) -> Optional[str]:
    """
    Convert address to its EIP-55 checksum form.
    Safe-guards against None or invalid types.
    """
    if address is None or not isinstance(address, str):
        return None

    try:
        return eth_to_normalized_address(address)
    except ValueError:
        logger.debug(f"Cannot checksum address, falling back to lowercase: {address}")
        return address.lower()


def storage_word_to_address(word: Union[str, bytes, None]) -> Optional[str]:
    """
    Interprets a raw 32-byte storage word as an address.

    Addresses occupy the low-order 20 bytes of a slot, the 12 high bytes are padding
    and are discarded. Returns None when the word is absent ("", "0x", "0x0", None),
    malformed or shorter than an address, or when it holds the zero address.
    """
    if word is None:
        return None
    if isinstance(word, (bytes, bytearray)):
        word = word.hex()
    if not isinstance(word, str):
        return None

    clean_word = word[2:] if word[:2].lower() == "0x" else word
    if len(clean_word) < ADDRESS_HEX_LENGTH or not is_hex(clean_word):
        return None

    addr_hex = "0x" + clean_word[-ADDRESS_HEX_LENGTH:].lower()
    if addr_hex == ZERO_ADDRESS:
        return None

    return eth_to_normalized_address(addr_hex)
