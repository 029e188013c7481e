"""Shared fixtures for all tests."""

import pytest

from gurpscalc.character import Entity
from gurpscalc.config import get_settings
from gurpscalc.rules import AttributeDef, AttributeDefs, factory_attribute_defs


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    """Keep environment overrides from leaking between tests.

    Settings are cached, so any test that changes GURPSCALC_* variables
    would otherwise affect every test that runs after it.
    """
    for name in ("GURPSCALC_DAMAGE_PROGRESSION", "GURPSCALC_RULES_FILE", "GURPSCALC_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def standard_defs() -> AttributeDefs:
    """The packaged standard attribute definitions."""
    return factory_attribute_defs()


@pytest.fixture
def simple_defs() -> AttributeDefs:
    """A small rules set: one primary integer, one derived decimal, one pool."""
    return AttributeDefs.build(
        [
            AttributeDef(
                id="st",
                type="integer",
                name="ST",
                full_name="Strength",
                attribute_base="10",
                cost_per_point=10,
                cost_adj_percent_per_sm=10,
            ),
            AttributeDef(
                id="speed",
                type="decimal",
                name="Speed",
                attribute_base="$st / 4",
                cost_per_point=20,
            ),
            AttributeDef(
                id="hp",
                type="pool",
                name="HP",
                full_name="Hit Points",
                attribute_base="$st",
                cost_per_point=2,
                cost_adj_percent_per_sm=10,
                thresholds=[
                    {"state": "Collapse", "multiplier": 0, "divisor": 1, "ops": ["halve_move"]},
                    {
                        "state": "Reeling",
                        "multiplier": 1,
                        "divisor": 3,
                        "ops": ["halve_move", "halve_dodge"],
                    },
                    {"state": "Healthy", "multiplier": 1, "divisor": 1},
                ],
            ),
        ]
    )


@pytest.fixture
def character(simple_defs: AttributeDefs) -> Entity:
    """A character using the simple rules set."""
    return Entity(simple_defs)


@pytest.fixture
def standard_character(standard_defs: AttributeDefs) -> Entity:
    """A character using the standard rules set."""
    return Entity(standard_defs)
