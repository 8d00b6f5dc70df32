"""
Cyclic module assignment across worker slots and rounds.
"""
from __future__ import annotations

from dataclasses import dataclass

from rotator.modules.base import ModuleDescriptor
from rotator.orchestrator.registry import ModuleRegistry


@dataclass
class RoundState:
    """Per-scheduler rotation state; lives as long as the scheduler."""

    iteration: int = 1
    module_offset: int = 0

    def advance_offset(self, dispatched: int, enabled_count: int) -> None:
        if enabled_count > 0:
            self.module_offset = (self.module_offset + dispatched) % enabled_count


class ModuleRotator:
    """
    Assigns one enabled module per slot.

    Slot i (1-based) of a round gets enabled[(offset + i - 1) % k], so the
    slots of one round get distinct modules while slot_count <= k, and the
    offset advance moves every module through every slot position.
    """

    def __init__(self, registry: ModuleRegistry):
        self.registry = registry

    def assign(self, slot_index: int, state: RoundState) -> ModuleDescriptor:
        if slot_index < 1:
            raise ValueError("slot_index is 1-based")
        enabled = self.registry.enabled()
        if not enabled:
            raise RuntimeError("No enabled modules")
        return enabled[(state.module_offset + slot_index - 1) % len(enabled)]
