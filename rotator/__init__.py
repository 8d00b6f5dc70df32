"""
Rotator - round-based concurrent scheduler for multi-account protocol work.

Runs a rotating set of work modules against a pool of accounts with bounded
concurrency, gated on mainnet gas price.
"""
from rotator.credentials import CredentialCache, KeyStore
from rotator.orchestrator import (
    BatchRunner,
    DailyActivityLedger,
    ModuleRegistry,
    RoundScheduler,
    WalletSelector,
)

__all__ = [
    "BatchRunner",
    "CredentialCache",
    "DailyActivityLedger",
    "KeyStore",
    "ModuleRegistry",
    "RoundScheduler",
    "WalletSelector",
]
