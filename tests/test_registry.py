"""
Tests for the module registry and its exclusion set.
"""
import pytest

from rotator.errors import ModuleExclusionError
from rotator.orchestrator.registry import ModuleRegistry
from tests.common import make_modules


class TestModuleRegistry:
    """Tests for enabled/excluded module bookkeeping."""

    def test_all_enabled_by_default(self, registry):
        assert [m.name for m in registry.enabled()] == ["Alpha", "Beta", "Gamma", "Delta", "Epsilon"]
        assert registry.excluded == []

    def test_exclusion_filters_in_registry_order(self, registry):
        registry.set_excluded(["Delta", "Beta"])
        assert [m.name for m in registry.enabled()] == ["Alpha", "Gamma", "Epsilon"]
        assert registry.excluded == ["Beta", "Delta"]
        # the registry itself is untouched
        assert len(registry.all()) == 5

    def test_excluding_all_modules_is_rejected(self, registry):
        """Excluding every module fails and keeps the previous exclusion set."""
        registry.set_excluded(["Alpha"])
        with pytest.raises(ModuleExclusionError):
            registry.set_excluded(registry.names)
        assert registry.excluded == ["Alpha"]
        assert len(registry.enabled()) == 4

    def test_exclusion_error_is_value_error(self, registry):
        with pytest.raises(ValueError):
            registry.set_excluded(registry.names)

    def test_unknown_names_are_ignored(self, registry):
        registry.set_excluded(["Alpha", "Nope"])
        assert registry.excluded == ["Alpha"]

    def test_unknown_names_do_not_count_toward_exclusion(self):
        reg = ModuleRegistry(make_modules(["Only"]))
        reg.set_excluded(["Ghost"])
        assert [m.name for m in reg.enabled()] == ["Only"]

    def test_clear_excluded(self, registry):
        registry.set_excluded(["Alpha", "Beta"])
        registry.clear_excluded()
        assert len(registry.enabled()) == 5

    def test_get(self, registry):
        assert registry.get("Gamma").name == "Gamma"
        assert registry.get("Missing") is None

    def test_empty_registry_rejected(self):
        with pytest.raises(ValueError):
            ModuleRegistry([])

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError):
            ModuleRegistry(make_modules(["A", "A"]))
