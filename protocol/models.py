"""
Shared data models for the rotator.

These models cross the boundary between the scheduler and its
collaborators (credential store, activity oracle, work modules).
"""
from typing import Dict, List, Optional

from eth_account import Account
from pydantic import BaseModel, ConfigDict, Field, SecretStr


class Credential(BaseModel):
    """One account and the secret needed to act as it."""

    model_config = ConfigDict(frozen=True)

    account_id: str = Field(..., description="Checksummed account address")
    private_key: SecretStr = Field(..., description="Hex private key (0x-prefixed)")

    @classmethod
    def from_private_key(cls, private_key: str) -> "Credential":
        account = Account.from_key(private_key)
        return cls(account_id=account.address, private_key=SecretStr(private_key))

    def secret(self) -> str:
        return self.private_key.get_secret_value()


class ModuleResult(BaseModel):
    """
    Result reported by a work module.

    skipped=True means the module decided there was nothing to do; it is
    not an error.
    """

    success: bool = Field(..., description="Whether the action succeeded")
    skipped: bool = Field(False, description="Module determined no action was needed")
    tx_hash: Optional[str] = Field(None, description="Transaction reference")
    explorer_url: Optional[str] = Field(None, description="Explorer link for tx_hash")
    error: Optional[str] = Field(None, description="Error message if failed")
    reason: Optional[str] = Field(None, description="Why the account was skipped")


class ExecutionOutcome(BaseModel):
    """Terminal state of one worker slot."""

    success: bool
    skipped: bool = False
    account_id: str
    module_name: str
    slot_index: int = 0
    tx_hash: Optional[str] = None
    explorer_url: Optional[str] = None
    error: Optional[str] = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        """Skipped outcomes count as success for every tally."""
        return self.success or self.skipped


class ActivityReport(BaseModel):
    """Partition of a batch of accounts returned by an activity oracle."""

    active: List[str] = Field(default_factory=list)
    completed: List[str] = Field(default_factory=list)


class ModuleStats(BaseModel):
    ok: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.ok + self.failed

    @property
    def success_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return self.ok / self.total * 100


class RoundSummary(BaseModel):
    """Aggregate of one round (or one sweep)."""

    iteration: int = 0
    dispatched: int = 0
    succeeded: int = Field(0, description="Successful outcomes that performed an action")
    skipped: int = 0
    failed: int = 0
    elapsed: float = 0.0
    per_module: Dict[str, ModuleStats] = Field(default_factory=dict)
    outcomes: List[ExecutionOutcome] = Field(default_factory=list)

    @property
    def ok(self) -> int:
        return self.succeeded + self.skipped
