import copy
import unittest

import numpy as np

from chemlab.reactions import (
    EMPTY_OBSERVATION,
    NO_REACTION_OBSERVATION,
    find_rule,
    simulate_reaction,
)
from chemlab.rules import Always, Predicate, RequiresAll, Rule, one_of_each, round_half_up


def vessel_with(*contents, **fields):
    vessel = {"label": "Beaker", "contents": list(contents)}
    vessel.update(fields)
    return vessel


def liquid(chemical, volume=10, unknown=False):
    return {"chemical": chemical, "volume": volume, "unknown": unknown}


def solid(chemical, mass=1, unknown=False):
    return {"chemical": chemical, "mass": mass, "unknown": unknown}


class TestRuleMatching(unittest.TestCase):
    def test_requires_all_is_subset(self):
        rule = Rule("pair", RequiresAll("A", "B"), {"observation": "pair"})
        self.assertTrue(rule.eligible(["A", "B", "C"], {}, "add_chemical"))
        self.assertFalse(rule.eligible(["A"], {}, "add_chemical"))

    def test_action_filter(self):
        rule = Rule("hot", Always(), {"observation": "hot"}, action="heat")
        self.assertTrue(rule.eligible([], {}, "heat"))
        self.assertFalse(rule.eligible([], {}, "stir"))

    def test_one_of_each(self):
        matcher = one_of_each("X", ("A", "B"))
        self.assertTrue(matcher.matches(["X", "B"], {}, ""))
        self.assertFalse(matcher.matches(["A", "B"], {}, ""))

    def test_predicate_overrides(self):
        rule = Rule("custom", Predicate(lambda chemicals, vessel, action: "Z" in chemicals), {})
        self.assertTrue(rule.eligible(["Z"], {}, "stir"))
        self.assertFalse(rule.eligible(["A"], {}, "stir"))

    def test_round_half_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(16.75), 17)
        self.assertEqual(round_half_up(3.49), 3)


class TestSimulateReaction(unittest.TestCase):
    def test_thiosulfate_clock(self):
        vessel = vessel_with(liquid("Na2S2O3"), liquid("HCl"))
        result = simulate_reaction(vessel, "add_chemical", rng=np.random.default_rng(1))

        self.assertIn("cloudy", result["observation"])
        self.assertTrue(result["has_precipitate"])
        self.assertIn("S(s)", result["precipitate"])
        self.assertGreater(result["reaction_time"], 0)
        # c = 0.05 mol/dm³ -> 4000 s before jitter
        self.assertGreaterEqual(result["reaction_time"], 3990)
        self.assertLessEqual(result["reaction_time"], 4010)

    def test_seeded_rng_is_reproducible(self):
        vessel = vessel_with(liquid("Na2S2O3", 20), liquid("HCl", 5))
        first = simulate_reaction(vessel, "add_chemical", rng=np.random.default_rng(42))
        second = simulate_reaction(vessel, "add_chemical", rng=np.random.default_rng(42))
        self.assertEqual(first, second)

    def test_vessel_not_mutated(self):
        vessel = vessel_with(liquid("CuSO4"), solid("Mg_powder"))
        before = copy.deepcopy(vessel)
        simulate_reaction(vessel, "add_chemical")
        self.assertEqual(vessel, before)

    def test_copper_magnesium_temperature_rise(self):
        result = simulate_reaction(vessel_with(liquid("CuSO4"), solid("Mg_powder")), "add_chemical")
        self.assertEqual(result["temp_change"], 17)
        self.assertIn("ΔT ≈ 17", result["observation"])
        self.assertIn("Cu(s)", result["precipitate"])

    def test_blind_wording_for_unknowns(self):
        vessel = vessel_with(liquid("NaCl", unknown=True), liquid("AgNO3", 1))
        result = simulate_reaction(vessel, "add_chemical")
        self.assertTrue(result["has_precipitate"])
        self.assertIn("Curdy white precipitate", result["observation"])
        self.assertNotIn("AgCl", result["observation"])
        self.assertNotIn("Cl⁻", result["observation"])

        known = simulate_reaction(vessel_with(liquid("NaCl"), liquid("AgNO3", 1)), "add_chemical")
        self.assertIn("AgCl", known["observation"])

    def test_empty_and_no_reaction(self):
        self.assertEqual(simulate_reaction(vessel_with(), "add_chemical")["observation"], EMPTY_OBSERVATION)
        self.assertEqual(simulate_reaction({}, "stir")["observation"], EMPTY_OBSERVATION)

        result = simulate_reaction(vessel_with(liquid("distilled_water")), "add_chemical")
        self.assertEqual(result["observation"], NO_REACTION_OBSERVATION)
        self.assertFalse(result["has_precipitate"])
        self.assertEqual(result["new_color"], "#f0f8ff")

    def test_heat_only_rules(self):
        vessel = vessel_with(solid("KNO3"))
        self.assertEqual(simulate_reaction(vessel, "add_chemical")["observation"], NO_REACTION_OBSERVATION)
        self.assertIn("relights", simulate_reaction(vessel, "heat")["observation"])

        warmed = simulate_reaction(vessel_with(liquid("NaCl")), "heat")
        self.assertEqual(find_rule(vessel_with(liquid("NaCl")), "heat").id, "fallback/heat")
        self.assertIn("warms", warmed["observation"])

    def test_alum_residue(self):
        result = simulate_reaction(vessel_with(solid("potassium_alum_hydrated", 5)), "heat")
        self.assertIn("2.72g", result["observation"])

    def test_first_matching_rule_wins(self):
        rules = [
            Rule("first", RequiresAll("NaCl"), {"observation": "first"}),
            Rule("second", RequiresAll("NaCl"), {"observation": "second", "gas": "Cl₂"}),
        ]
        result = simulate_reaction(vessel_with(liquid("NaCl")), "add_chemical", rules=rules)
        self.assertEqual(result["observation"], "first")
        self.assertIsNone(result["gas"])

    def test_indicator_precedes_neutralisation(self):
        flask = vessel_with(liquid("HCl", 10), liquid("NaOH", 20), liquid("phenolphthalein", 0.5))
        self.assertEqual(find_rule(flask, "add_chemical").id, "titration/phenolphthalein")
        self.assertIn("ENDPOINT", simulate_reaction(flask, "add_chemical")["observation"])

        plain = vessel_with(liquid("HCl", 10), liquid("NaOH", 20))
        self.assertEqual(find_rule(plain, "add_chemical").id, "qualitative/naoh-neutralise")

    def test_phenolphthalein_stages(self):
        def observe(naoh):
            flask = vessel_with(liquid("HCl", 10), liquid("phenolphthalein", 0.5))
            if naoh:
                flask["contents"].append(liquid("NaOH", naoh))
            return simulate_reaction(flask, "add_chemical")["observation"]

        self.assertIn("colourless", observe(0))
        self.assertIn("large excess", observe(10))
        self.assertIn("NEAR ENDPOINT", observe(19))
        self.assertIn("over-titrated", observe(25))

    def test_iodometric_endpoint_with_starch(self):
        flask = vessel_with(
            liquid("FA3_oxidiser"), liquid("KI"), liquid("starch", 1), liquid("Na2S2O3_titrant", 0),
        )
        self.assertIn("Deep brown", simulate_reaction(flask, "add_chemical")["observation"])

        flask["contents"][-1] = liquid("Na2S2O3_titrant", 10)
        result = simulate_reaction(flask, "add_chemical")
        self.assertIn("blue-black disappears", result["observation"])

        flask["contents"][0] = liquid("FA3_oxidiser", unknown=True)
        blind = simulate_reaction(flask, "add_chemical")
        self.assertIn("ENDPOINT", blind["observation"])
        self.assertNotIn("I₂", blind["observation"])

    def test_deterministic_outcomes(self):
        vessel = vessel_with(liquid("BaCl2"), liquid("CuSO4"))
        self.assertEqual(simulate_reaction(vessel, "add_chemical"), simulate_reaction(vessel, "add_chemical"))

    def test_extreme_amounts_still_give_a_result(self):
        rng = np.random.default_rng(5)
        for thio in (1e-310, "inf", float("nan"), "nan"):
            vessel = vessel_with(liquid("Na2S2O3", thio), liquid("HCl"))
            result = simulate_reaction(vessel, "add_chemical", rng=rng)
            self.assertTrue(result["has_precipitate"])
            self.assertGreaterEqual(result["reaction_time"], 3990)
            self.assertLessEqual(result["reaction_time"], 4010)

        huge = vessel_with(liquid("CuSO4", 1e308), solid("Mg_powder", 1e308))
        result = simulate_reaction(huge, "add_chemical")
        self.assertIsInstance(result["temp_change"], int)
        self.assertIn("Cu(s)", result["precipitate"])

    def test_round_half_up_non_finite(self):
        self.assertEqual(round_half_up(float("inf")), 0)
        self.assertEqual(round_half_up(float("-inf")), 0)
        self.assertEqual(round_half_up(float("nan")), 0)


if __name__ == '__main__':
    unittest.main()
