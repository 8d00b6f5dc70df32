import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.contract import AsyncContract

from rotator.utils.env import (
    MAINNET_CHAIN_ID,
    MAINNET_RPC,
    SONEIUM_CHAIN_ID,
    SONEIUM_EXPLORER,
    SONEIUM_RPC,
)

logger = logging.getLogger(__name__)

CHAIN_ID_TO_RPC = {
    MAINNET_CHAIN_ID: MAINNET_RPC,
    SONEIUM_CHAIN_ID: SONEIUM_RPC,
}
CHAIN_ID_TO_EXPLORER = {
    MAINNET_CHAIN_ID: "https://etherscan.io",
    SONEIUM_CHAIN_ID: SONEIUM_EXPLORER,
}

# Reuse one Web3 instance per chain to avoid 429 (too many requests) on public RPCs
_web3_cache: Dict[int, "AsyncWeb3Helper"] = {}


class AsyncWeb3Helper:
    """Cached AsyncWeb3 access per chain"""

    def __init__(self, chain_id: int) -> None:
        self.chain_id = chain_id
        self.web3: Optional[AsyncWeb3] = None

    @classmethod
    def make_web3(cls, chain_id: int) -> "AsyncWeb3Helper":
        if chain_id not in CHAIN_ID_TO_RPC:
            raise ValueError(f"Invalid chain id {chain_id}")
        if chain_id in _web3_cache:
            return _web3_cache[chain_id]
        instance = AsyncWeb3Helper(chain_id)
        instance.web3 = AsyncWeb3(AsyncHTTPProvider(CHAIN_ID_TO_RPC[chain_id]))
        _web3_cache[chain_id] = instance
        logger.debug("Created cached AsyncWeb3Helper for chain_id=%s", chain_id)
        return instance

    @staticmethod
    def load_abi(abi: Union[str, Path, List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
        """Return an inline ABI unchanged, or load it from a JSON file"""
        if isinstance(abi, list):
            return abi
        path = Path(abi)
        if not path.is_file():
            raise ValueError(f"Invalid ABI file path {path}")

        with open(path, "r") as f:
            abi_data = json.load(f)
            if isinstance(abi_data, dict):
                return abi_data.get("abi", abi_data)
            return abi_data

    def make_contract(self, abi, addr: str) -> AsyncContract:
        """Make a contract object"""
        if self.web3 is None:
            raise ValueError("Web3 not initialized")
        return self.web3.eth.contract(
            address=Web3.to_checksum_address(addr), abi=self.load_abi(abi)
        )

    def explorer_url(self, tx_hash: str) -> Optional[str]:
        base = CHAIN_ID_TO_EXPLORER.get(self.chain_id)
        if not base:
            return None
        return f"{base.rstrip('/')}/tx/{tx_hash}"
