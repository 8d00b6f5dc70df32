"""
Gas-price admission gate.

Pauses rounds while mainnet gas is above a configured limit.
"""
import asyncio
import logging
from typing import Optional, Protocol

import httpx

from rotator.errors import GasPriceError
from rotator.utils.env import GAS_POLL_INTERVAL, MAINNET_RPC
from rotator.utils.retry import RetryPolicy

logger = logging.getLogger(__name__)


class AdmissionGate(Protocol):
    async def is_too_expensive(self) -> bool:
        ...

    async def wait_until_acceptable(self) -> None:
        ...


class GasGate:
    """Admission gate backed by eth_gasPrice on an RPC endpoint."""

    def __init__(
        self,
        max_gas_gwei: float,
        rpc_url: str = MAINNET_RPC,
        poll_interval: float = GAS_POLL_INTERVAL,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: float = 10.0,
    ):
        if max_gas_gwei <= 0:
            raise ValueError("max_gas_gwei must be positive")
        self.max_gas_gwei = max_gas_gwei
        self.rpc_url = rpc_url
        self.poll_interval = poll_interval
        self.retry_policy = retry_policy or RetryPolicy(max_attempts=3, delay=1.0)
        self.timeout = timeout

    async def _fetch_gas_price(self) -> float:
        payload = {"jsonrpc": "2.0", "method": "eth_gasPrice", "params": [], "id": 1}
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.rpc_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            raise GasPriceError(f"HTTP client error: {e}") from e

        if response.status_code != 200:
            raise GasPriceError(f"RPC returned status {response.status_code}")
        data = response.json()
        if data.get("error"):
            raise GasPriceError(f"RPC error: {data['error'].get('message')}")
        try:
            return int(data["result"], 16) / 1e9
        except (KeyError, TypeError, ValueError) as e:
            raise GasPriceError(f"Malformed eth_gasPrice response: {data}") from e

    async def get_current_gas_price(self) -> float:
        """Current gas price in gwei."""
        return await self.retry_policy.call(self._fetch_gas_price)

    async def is_too_expensive(self) -> bool:
        return await self.get_current_gas_price() > self.max_gas_gwei

    async def wait_until_acceptable(self) -> None:
        """Block until the gas price is at or below the limit."""
        while True:
            current = await self.get_current_gas_price()
            if current <= self.max_gas_gwei:
                logger.info(f"Gas OK: {current:.2f} Gwei")
                return
            logger.info(
                f"Gas {current:.2f} Gwei > {self.max_gas_gwei} Gwei, "
                f"waiting {self.poll_interval:.0f}s..."
            )
            await asyncio.sleep(self.poll_interval)
