"""
Module registry with a runtime exclusion set.

The registry itself is fixed at startup; exclusions are a filter applied at
read time and never mutate the module list.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Set

from rotator.errors import ModuleExclusionError
from rotator.modules.base import ModuleDescriptor

logger = logging.getLogger(__name__)


class ModuleRegistry:
    def __init__(self, modules: Iterable[ModuleDescriptor]):
        self._modules = tuple(modules)
        if not self._modules:
            raise ValueError("ModuleRegistry needs at least one module")
        names = [m.name for m in self._modules]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate module names in registry: {names}")
        self._excluded: Set[str] = set()

    def __len__(self) -> int:
        return len(self._modules)

    @property
    def names(self) -> List[str]:
        return [m.name for m in self._modules]

    def all(self) -> List[ModuleDescriptor]:
        """Every registered module, ignoring exclusions."""
        return list(self._modules)

    def get(self, name: str) -> Optional[ModuleDescriptor]:
        for module in self._modules:
            if module.name == name:
                return module
        return None

    def enabled(self) -> List[ModuleDescriptor]:
        """Modules not in the exclusion set, in registry order."""
        return [m for m in self._modules if m.name not in self._excluded]

    @property
    def excluded(self) -> List[str]:
        return [n for n in self.names if n in self._excluded]

    def set_excluded(self, names: Iterable[str]) -> None:
        """
        Replace the exclusion set.

        Unknown names are ignored with a warning.

        Raises:
            ModuleExclusionError: If every module would be excluded; the
                previous exclusion set is kept
        """
        requested = set(names)
        known = set(self.names)
        unknown = requested - known
        if unknown:
            logger.warning(f"Ignoring unknown module names: {sorted(unknown)}")
        valid = requested & known
        if len(known - valid) < 1:
            raise ModuleExclusionError(
                "Cannot exclude every module; at least one must stay enabled"
            )
        self._excluded = valid
        if valid:
            logger.info(
                f"Excluded modules: {', '.join(self.excluded)} "
                f"({len(self.enabled())} of {len(self)} enabled)"
            )

    def clear_excluded(self) -> None:
        self._excluded = set()
