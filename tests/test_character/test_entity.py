"""Tests for the character entity and its variable resolution."""

import json

from structlog.testing import capture_logs

from gurpscalc.character import Attribute, Entity, create_entity
from gurpscalc.config import Settings
from gurpscalc.fxp import ZERO, FixedDecimal, FormulaEvaluator
from gurpscalc.rules import AttributeDef, AttributeDefs, DamageProgression, ThresholdOp


def fd(text: str) -> FixedDecimal:
    return FixedDecimal.parse(text)


class TestEntityInit:
    """Tests for creating characters."""

    def test_one_attribute_per_definition(self, simple_defs):
        """A new character gets a fresh attribute for every definition."""
        character = Entity(simple_defs)
        assert list(character.attributes) == ["st", "speed", "hp"]
        assert character.attribute("st") == Attribute("st")

    def test_explicit_attributes(self, simple_defs):
        """Supplied attributes replace the defaults."""
        character = Entity(simple_defs, attributes=[Attribute("st", adjustment=fd("2"))])
        assert list(character.attributes) == ["st"]
        assert character.attribute("hp") is None

    def test_defaults(self, simple_defs):
        """Characters start at SM 0 with the Basic Set progression."""
        character = Entity(simple_defs)
        assert character.size_modifier == 0
        assert character.damage_progression == DamageProgression.BASIC_SET


class TestResolveVariable:
    """Tests for formula variable lookup."""

    def test_size_modifier(self, simple_defs):
        """The sm variable is the character's size modifier."""
        assert Entity(simple_defs, size_modifier=2).resolve_variable("sm") == "2"

    def test_attribute_value(self, character):
        """Attribute IDs resolve to their current value."""
        character.attribute("st").adjustment = fd("3")
        assert character.resolve_variable("st") == "13"
        assert character.resolve_variable("speed") == "3.25"

    def test_pool_parts(self, character):
        """Pools resolve to current by default, with explicit parts available."""
        character.attribute("hp").damage = 3
        assert character.resolve_variable("hp") == "7"
        assert character.resolve_variable("hp.current") == "7"
        assert character.resolve_variable("hp.maximum") == "10"

    def test_unknown_pool_part(self, character):
        """Unknown pool parts do not resolve."""
        with capture_logs() as logs:
            assert character.resolve_variable("hp.bonus") == ""
        assert logs[0]["event"] == "variable_unresolved"

    def test_unknown_attribute(self, character):
        """Unknown IDs do not resolve."""
        with capture_logs() as logs:
            assert character.resolve_variable("luck") == ""
        assert logs[0]["event"] == "variable_unresolved"
        assert logs[0]["variable"] == "luck"

    def test_attribute_without_definition(self, simple_defs):
        """Attributes whose definition is missing do not resolve."""
        character = Entity(simple_defs, attributes=[Attribute("ghost")])
        with capture_logs() as logs:
            assert character.resolve_variable("ghost") == ""
        assert logs[0]["event"] == "variable_undefined"

    def test_used_by_formulas(self, standard_character):
        """The entity works as a formula resolver."""
        evaluator = FormulaEvaluator(standard_character)
        assert evaluator.evaluate("$st + $dx + $sm") == fd("20")

    def test_self_reference(self):
        """A formula referring to itself resolves to zero instead of recursing."""
        defs = AttributeDefs.build([AttributeDef(id="loop", attribute_base="$loop")])
        character = Entity(defs)
        with capture_logs() as logs:
            assert character.attribute("loop").current(character) == ZERO
        events = [entry["event"] for entry in logs]
        assert "variable_self_reference" in events
        # Resolution state is released afterwards
        assert character.attribute("loop").current(character) == ZERO

    def test_mutual_reference(self):
        """Attributes referring to each other also terminate."""
        defs = AttributeDefs.build(
            [
                AttributeDef(id="a", attribute_base="$b"),
                AttributeDef(id="b", attribute_base="$a"),
            ]
        )
        character = Entity(defs)
        with capture_logs():
            assert character.attribute("a").current(character) == ZERO


class TestStandardCharacter:
    """End-to-end tests against the standard attributes."""

    def test_default_values(self, standard_character):
        """An average human has 10s and Basic Speed 5."""
        values = {
            attr_id: standard_character.attribute(attr_id).current(standard_character)
            for attr_id in ("st", "will", "fright_check", "vision", "basic_speed", "basic_move")
        }
        assert values == {
            "st": fd("10"),
            "will": fd("10"),
            "fright_check": fd("10"),
            "vision": fd("10"),
            "basic_speed": fd("5"),
            "basic_move": fd("5"),
        }

    def test_secondary_characteristics_follow(self, standard_character):
        """Raising DX raises Basic Speed; Basic Move floors it."""
        standard_character.attribute("dx").adjustment = fd("2")
        assert standard_character.attribute("basic_speed").current(standard_character) == fd("5.5")
        assert standard_character.attribute("basic_move").current(standard_character) == fd("5")

    def test_chained_derivation(self, standard_character):
        """IQ feeds Will, which feeds Fright Check."""
        standard_character.attribute("iq").adjustment = fd("3")
        standard_character.attribute("will").adjustment = fd("-1")
        fright_check = standard_character.attribute("fright_check")
        assert fright_check.current(standard_character) == fd("12")


class TestPoints:
    """Tests for point totals."""

    def test_totals(self, character):
        """Points split into primary and secondary attributes."""
        character.attribute("st").adjustment = fd("2")
        character.attribute("speed").adjustment = fd("0.5")
        character.attribute("hp").adjustment = fd("1")
        assert character.primary_attribute_points() == 20
        assert character.secondary_attribute_points() == 12
        assert character.attribute_points() == 32

    def test_fresh_character_costs_nothing(self, standard_character):
        """Unadjusted attributes cost no points."""
        assert standard_character.attribute_points() == 0

    def test_hp_cost_depends_on_progression(self, standard_defs):
        """Knowing Your Own Strength removes the SM discount on HP."""
        basic = Entity(standard_defs, size_modifier=3)
        kyos = Entity(
            standard_defs,
            size_modifier=3,
            damage_progression=DamageProgression.KNOWING_YOUR_OWN_STRENGTH,
        )
        for character in (basic, kyos):
            character.attribute("hp").adjustment = fd("5")
        assert basic.attribute("hp").point_cost(basic) == 7
        assert kyos.attribute("hp").point_cost(kyos) == 10


class TestThresholdOps:
    """Tests for counting pools in states that apply an op."""

    def test_none_when_healthy(self, standard_character):
        """A fresh character has no halving effects."""
        assert standard_character.count_threshold_op_met(ThresholdOp.HALVE_MOVE) == 0

    def test_counts_each_pool(self, standard_character):
        """Each pool in an applicable state counts once."""
        standard_character.attribute("hp").damage = 7
        standard_character.attribute("fp").damage = 7
        assert standard_character.count_threshold_op_met(ThresholdOp.HALVE_MOVE) == 2
        assert standard_character.count_threshold_op_met(ThresholdOp.HALVE_DODGE) == 2
        assert standard_character.count_threshold_op_met(ThresholdOp.HALVE_ST) == 1

    def test_skips_attributes_without_definitions(self, simple_defs):
        """Attributes missing from the rules are ignored."""
        character = Entity(simple_defs, attributes=[Attribute("ghost"), Attribute("hp", damage=8)])
        assert character.count_threshold_op_met(ThresholdOp.HALVE_MOVE) == 1


class TestAttributeDocuments:
    """Tests for saving and loading a character's attributes."""

    def test_definition_order(self, simple_defs):
        """Documents follow the definition order, not insertion order."""
        character = Entity(
            simple_defs,
            attributes=[Attribute("hp"), Attribute("st"), Attribute("speed")],
        )
        assert [doc["attr_id"] for doc in character.attributes_document()] == ["st", "speed", "hp"]

    def test_round_trip(self, character):
        """Saved documents load into an equivalent character."""
        character.attribute("st").adjustment = fd("2")
        character.attribute("hp").damage = 4
        documents = json.loads(json.dumps(character.attributes_document()))

        restored = Entity(character.attribute_defs)
        restored.load_attributes(documents)
        assert restored.attributes == character.attributes
        assert restored.attributes_document() == character.attributes_document()

    def test_load_replaces_attributes(self, character):
        """Loading replaces every attribute and logs the count."""
        with capture_logs() as logs:
            character.load_attributes([{"attr_id": "st", "adj": 1}])
        assert list(character.attributes) == ["st"]
        assert logs[-1]["event"] == "attributes_loaded"
        assert logs[-1]["count"] == 1


class TestCreateEntity:
    """Tests for creating characters from configuration."""

    def test_defaults_to_standard_rules(self):
        """Without a rules file the standard attributes are used."""
        character = create_entity()
        assert "basic_speed" in character.attribute_defs
        assert character.damage_progression == DamageProgression.BASIC_SET

    def test_progression_from_environment(self, monkeypatch):
        """The damage progression comes from the environment."""
        monkeypatch.setenv("GURPSCALC_DAMAGE_PROGRESSION", "knowing_your_own_strength")
        character = create_entity(size_modifier=1)
        assert character.damage_progression == DamageProgression.KNOWING_YOUR_OWN_STRENGTH
        assert character.size_modifier == 1

    def test_rules_file_from_environment(self, monkeypatch, tmp_path):
        """A configured rules file replaces the standard attributes."""
        path = tmp_path / "rules.json"
        path.write_text(json.dumps([{"id": "luck", "attribute_base": "0", "cost_per_point": 5}]))
        monkeypatch.setenv("GURPSCALC_RULES_FILE", str(path))
        character = create_entity()
        assert list(character.attributes) == ["luck"]

    def test_explicit_settings_and_defs(self, simple_defs):
        """Explicit settings and definitions take precedence."""
        settings = Settings(damage_progression=DamageProgression.PHOENIX_FLAME_D3)
        character = create_entity(settings, attribute_defs=simple_defs)
        assert character.attribute_defs is simple_defs
        assert character.damage_progression == DamageProgression.PHOENIX_FLAME_D3
