"""
Work module descriptor.

A module is a stateless async callable taking one credential and reporting
a ModuleResult. Expected business conditions (nothing to do, insufficient
balance) are reported in the result, not raised.
"""
from dataclasses import dataclass
from typing import Awaitable, Callable

from protocol.models import Credential, ModuleResult

ModuleExecutor = Callable[[Credential], Awaitable[ModuleResult]]


@dataclass(frozen=True)
class ModuleDescriptor:
    name: str
    description: str
    execute: ModuleExecutor
    # Delay before the call is issued, for modules sharing a rate-limited upstream
    warmup_delay: float = 0.0
