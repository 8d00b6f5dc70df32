"""
Work modules: descriptors and the generic contract-call executor.
"""
from rotator.modules.base import ModuleDescriptor, ModuleExecutor
from rotator.modules.contract_call import ContractCallModule
from rotator.modules.loader import load_modules, parse_modules

__all__ = [
    "ContractCallModule",
    "ModuleDescriptor",
    "ModuleExecutor",
    "load_modules",
    "parse_modules",
]
