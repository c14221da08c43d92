import unittest

from chemlab.content import (
    DEFAULT_COLOR,
    ROOM_TEMP,
    apply_result,
    merge_content,
    normalize_content,
    normalize_vessel,
    parse_amount,
    scale_contents,
)


class TestParseAmount(unittest.TestCase):
    def test_numbers_and_units(self):
        self.assertEqual(parse_amount(10), 10.0)
        self.assertEqual(parse_amount("12.5"), 12.5)
        self.assertEqual(parse_amount("10 cm³"), 10.0)
        self.assertEqual(parse_amount("25cm3"), 25.0)
        self.assertEqual(parse_amount("1.5 g"), 1.5)

    def test_garbage_is_zero(self):
        self.assertEqual(parse_amount(None), 0.0)
        self.assertEqual(parse_amount(""), 0.0)
        self.assertEqual(parse_amount("lots"), 0.0)
        self.assertEqual(parse_amount(True), 0.0)

    def test_non_finite_is_zero(self):
        self.assertEqual(parse_amount("inf"), 0.0)
        self.assertEqual(parse_amount("-Infinity"), 0.0)
        self.assertEqual(parse_amount("nan"), 0.0)
        self.assertEqual(parse_amount(float("inf")), 0.0)
        self.assertEqual(parse_amount(float("nan")), 0.0)
        self.assertEqual(parse_amount("1e999 cm3"), 0.0)
        self.assertEqual(parse_amount(10 ** 400), 0.0)

        vessel = normalize_vessel({"temp": "nan", "contents": [{"chemical": "HCl", "volume": "inf"}]})
        self.assertEqual(vessel["temp"], 0.0)
        self.assertEqual(vessel["contents"][0]["volume"], 0.0)


class TestNormalize(unittest.TestCase):
    def test_vessel_defaults(self):
        vessel = normalize_vessel(None)
        self.assertEqual(vessel["contents"], [])
        self.assertEqual(vessel["color"], DEFAULT_COLOR)
        self.assertEqual(vessel["temp"], float(ROOM_TEMP))
        self.assertFalse(vessel["has_precipitate"])

    def test_amount_goes_to_declared_phase(self):
        solid = normalize_content({"chemical": "Mg_powder", "amount": "0.50 g"})
        self.assertEqual(solid["mass"], 0.5)
        self.assertNotIn("volume", solid)

        liquid = normalize_content({"chemical": "HCl", "amount": "10 cm³"})
        self.assertEqual(liquid["volume"], 10.0)
        self.assertFalse(liquid["unknown"])

    def test_bad_entries_skipped(self):
        vessel = normalize_vessel({"contents": ["HCl", {"volume": 3}, {"chemical": "NaCl", "volume": "x"}]})
        self.assertEqual(len(vessel["contents"]), 1)
        self.assertEqual(vessel["contents"][0]["volume"], 0.0)


class TestContentUpdates(unittest.TestCase):
    def test_merge_sums_and_keeps_unknown(self):
        contents = [{"chemical": "NaCl", "label": "FA 5", "volume": 10.0, "unknown": True}]
        merged = merge_content(contents, {"chemical": "NaCl", "label": "Sodium chloride", "volume": 2.5, "unknown": False})
        self.assertEqual(len(merged), 1)
        self.assertEqual(merged[0]["volume"], 12.5)
        self.assertTrue(merged[0]["unknown"])
        self.assertEqual(contents[0]["volume"], 10.0)

    def test_merge_appends_new_chemical(self):
        merged = merge_content([{"chemical": "NaCl", "volume": 10.0}], {"chemical": "AgNO3", "volume": 1.0})
        self.assertEqual([c["chemical"] for c in merged], ["NaCl", "AgNO3"])

    def test_scale_drops_below_epsilon(self):
        contents = [
            {"chemical": "NaCl", "volume": 10.0},
            {"chemical": "Mg_powder", "mass": 0.5},
        ]
        self.assertEqual(scale_contents(contents, 0.5)[0]["volume"], 5.0)
        self.assertEqual(scale_contents(contents, 0.0), [])
        self.assertEqual(scale_contents(contents, 0.0001), [])

    def test_apply_result(self):
        vessel = normalize_vessel({"label": "Beaker", "observations": ["first"]})
        updated = apply_result(vessel, {
            "observation": "Blue precipitate",
            "new_color": "#3060c0",
            "precipitate": "Cu(OH)₂(s)",
            "has_precipitate": True,
            "temp_change": 5,
        }, prefix="Transfer: ")
        self.assertEqual(updated["observations"], ["first", "Transfer: Blue precipitate"])
        self.assertEqual(updated["temp"], vessel["temp"] + 5)
        self.assertTrue(updated["has_precipitate"])
        self.assertEqual(vessel["observations"], ["first"])

        again = apply_result(updated, {"observation": None, "has_precipitate": False})
        self.assertTrue(again["has_precipitate"])
        self.assertEqual(again["precipitate_label"], "Cu(OH)₂(s)")


if __name__ == '__main__':
    unittest.main()
