"""
Load the module registry contents from a JSON file.

Example entry:
    {
        "name": "Daily Check-in",
        "description": "Daily check-in contract call",
        "chain_id": 1868,
        "address": "0x98826e728977B25279ad7629134FD0e96bd5A7b2",
        "abi": [...],
        "function": "check"
    }
"""
import json
import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from rotator.modules.base import ModuleDescriptor
from rotator.modules.contract_call import ContractCallModule
from rotator.utils.env import MODULES_FILE, RATE_LIMIT_WARMUP, SONEIUM_CHAIN_ID

logger = logging.getLogger(__name__)


class ModuleSpec(BaseModel):
    """Declarative definition of one contract-call module."""

    name: str = Field(..., min_length=1)
    description: str = ""
    chain_id: int = SONEIUM_CHAIN_ID
    address: str = Field(..., description="Contract address")
    abi: Union[str, List[Dict[str, Any]]] = Field(
        ..., description="Inline ABI or path to an ABI JSON file"
    )
    function: str
    args: List[Any] = Field(default_factory=list)
    value_wei: int = Field(0, ge=0)
    rate_limited: bool = Field(
        False, description="Apply the shared-upstream warm-up delay before calling"
    )
    warmup_delay: Optional[float] = Field(None, ge=0)

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        if not v.startswith("0x") or len(v) != 42:
            raise ValueError(f"invalid contract address {v!r}")
        return v

    def to_descriptor(self) -> ModuleDescriptor:
        warmup = self.warmup_delay
        if warmup is None:
            warmup = RATE_LIMIT_WARMUP if self.rate_limited else 0.0
        executor = ContractCallModule(
            chain_id=self.chain_id,
            address=self.address,
            abi=self.abi,
            function=self.function,
            args=self.args,
            value_wei=self.value_wei,
        )
        return ModuleDescriptor(
            name=self.name,
            description=self.description,
            execute=executor,
            warmup_delay=warmup,
        )


def parse_modules(entries: Any) -> List[ModuleDescriptor]:
    """
    Validate raw module entries and build descriptors.

    Raises:
        ValueError: On an empty list, an invalid entry or a duplicate name
    """
    if not isinstance(entries, list) or not entries:
        raise ValueError("Module list must be a non-empty JSON array")
    specs = [ModuleSpec.model_validate(e) for e in entries]
    names = [s.name for s in specs]
    duplicates = {n for n in names if names.count(n) > 1}
    if duplicates:
        raise ValueError(f"Duplicate module names: {sorted(duplicates)}")
    return [s.to_descriptor() for s in specs]


def load_modules(path: str = MODULES_FILE) -> List[ModuleDescriptor]:
    with open(path, "r", encoding="utf-8") as f:
        entries = json.load(f)
    modules = parse_modules(entries)
    logger.info(f"Loaded {len(modules)} modules from {path}")
    return modules
