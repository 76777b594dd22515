from typing import Optional

from resolver.models.storage_slot import StorageSlotId
from resolver.rpc_client import PROVIDER_ERRORS, RpcClient
from utils.exceptions import SlotReadError
from utils.logger_utils import get_logger

logger = get_logger("Storage Slot Reader")


class StorageSlotReader:
    def __init__(self, rpc_client: RpcClient):
        self._rpc_client = rpc_client

    async def read_slot(self, contract: str, slot: StorageSlotId) -> Optional[str]:
        """
        Fetches the raw word stored at one of the EIP-1967 slots of `contract`.
        The word is returned untouched, emptiness is decided by the address codec.

        Raises:
            SlotReadError: the provider failed to serve the read.
        """
        try:
            word = await self._rpc_client.get_storage_at(contract, slot.value)
        except PROVIDER_ERRORS as e:
            logger.error(f"Failed to read {slot.name.lower()} slot of {contract}: {e}")
            raise SlotReadError(slot, contract, e) from e

        logger.debug(f"{contract} [{slot.name.lower()}] = {word}")
        return word
