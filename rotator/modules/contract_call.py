"""
Generic contract-call module.

Signs and sends a single contract function call from the acting account.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from eth_account import Account
from web3.exceptions import ContractLogicError

from protocol.models import Credential, ModuleResult
from rotator.utils.retry import RetryPolicy
from rotator.utils.web3 import AsyncWeb3Helper

logger = logging.getLogger(__name__)


class ContractCallModule:
    """
    Executor that calls `function(*args)` on a contract.

    A revert during gas estimation means the action is not available for
    this account right now (e.g. already checked in today) and is reported
    as skipped.
    """

    def __init__(
        self,
        chain_id: int,
        address: str,
        abi: Union[str, List[Dict[str, Any]]],
        function: str,
        args: Optional[List[Any]] = None,
        value_wei: int = 0,
        receipt_timeout: float = 120.0,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.chain_id = chain_id
        self.address = address
        self.abi = abi
        self.function = function
        self.args = list(args or [])
        self.value_wei = value_wei
        self.receipt_timeout = receipt_timeout
        self.retry_policy = retry_policy or RetryPolicy(max_attempts=3, delay=2.0)

    async def __call__(self, credential: Credential) -> ModuleResult:
        helper = AsyncWeb3Helper.make_web3(self.chain_id)
        w3 = helper.web3
        account = credential.account_id
        contract = helper.make_contract(self.abi, self.address)
        call = contract.functions[self.function](*self.args)

        balance = await self.retry_policy.call(w3.eth.get_balance, account)
        if balance <= self.value_wei:
            return ModuleResult(
                success=False,
                error=f"Insufficient balance: {balance} wei, need more than {self.value_wei}",
            )

        try:
            tx = await call.build_transaction(
                {
                    "from": account,
                    "value": self.value_wei,
                    "nonce": await self.retry_policy.call(
                        w3.eth.get_transaction_count, account
                    ),
                    "chainId": self.chain_id,
                }
            )
        except ContractLogicError as e:
            logger.info(f"{account}: {self.function} not available ({e})")
            return ModuleResult(success=False, skipped=True, reason=str(e))

        signed = Account.sign_transaction(tx, credential.secret())
        tx_hash = await w3.eth.send_raw_transaction(signed.raw_transaction)
        tx_hex = w3.to_hex(tx_hash)
        logger.info(f"{account}: sent {self.function} tx {tx_hex}")

        receipt = await w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.receipt_timeout
        )
        explorer_url = helper.explorer_url(tx_hex)
        if receipt["status"] == 1:
            return ModuleResult(success=True, tx_hash=tx_hex, explorer_url=explorer_url)
        return ModuleResult(
            success=False,
            tx_hash=tx_hex,
            explorer_url=explorer_url,
            error="Transaction reverted",
        )
