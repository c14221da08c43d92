import unittest

from chemlab.evaluation import (
    evaluate_log,
    grade_for,
    score_crystallisation,
    score_generic_quantitative,
    score_qualitative,
    score_quantitative,
    score_rate_clock,
    score_titration,
)
from chemlab.papers import get_paper


def add(chemical, observation=None):
    entry = {"action": "add_chemical", "chemical": chemical}
    if observation:
        entry["observation"] = observation
    return entry


def act(action, times=1):
    return [{"action": action} for _ in range(times)]


def marks(criteria):
    return sum(c["marks"] for c in criteria)


ENERGETICS_LOG = [add("CuSO4"), add("Mg_powder")] + act("weigh") + act("measure_temp", 2) + act("stir")
ENERGETICS_NOTES = "Q2b: q = mcΔT = 50 x 4.18 x 8.0\nQ2c: ΔH = -150 kJ mol-1"

QUALITATIVE_LOG = [
    add("NaOH", "Rust-brown precipitate forms"),
    add("BaCl2"),
    add("AgNO3"),
    add("KMnO4_acid"),
    {"action": "test_gas_splint"},
]

SMALL_PAPER = {
    "id": "small",
    "title": "Small paper",
    "marks": 25,
    "questions": [
        {"id": "Q1", "type": "energetics", "title": "Enthalpy", "marks": 10},
        {"id": "Q2", "type": "qualitative", "title": "Ions", "marks": 15},
    ],
}


class TestGrading(unittest.TestCase):
    def test_bands(self):
        self.assertEqual(grade_for(44, 50), "A*")
        self.assertEqual(grade_for(43, 50), "A")
        self.assertEqual(grade_for(39, 50), "A")
        self.assertEqual(grade_for(34, 50), "B")
        self.assertEqual(grade_for(29, 50), "C")
        self.assertEqual(grade_for(24, 50), "D")
        self.assertEqual(grade_for(23, 50), "U")

    def test_zero_max(self):
        self.assertEqual(grade_for(0, 0), "U")
        self.assertEqual(grade_for(5, 0), "U")


class TestGracefulDegradation(unittest.TestCase):
    def test_empty_inputs_use_default_paper(self):
        for result in (evaluate_log([], ""), evaluate_log([], "", None), evaluate_log(None, None)):
            self.assertEqual(len(result["sections"]), 3)
            self.assertEqual(result["max_marks"], 40)
            self.assertEqual(result["total"], 0)
            self.assertEqual(result["grade"], "U")

    def test_junk_entries_ignored(self):
        result = evaluate_log(["heat", 3, None, {"action": "heat"}], 42)
        self.assertEqual(len(result["sections"]), 3)

    def test_mixed_key_types(self):
        content = {"questions": [{"id": "Q1", "type": "quantitative", "title": "Titration", "marks": 17}]}
        log = [{"action": "add_chemical", "chemical": "NaOH", 1: "x", "details": "pipette"}]
        result = evaluate_log(log, "", content)
        self.assertEqual(result["sections"][0]["criteria"][5]["marks"], 1)

    def test_chemical_id_entries(self):
        log = [{"action": "add_chemical", "chemical_id": "NaOH", "observation": "White precipitate forms"}]
        result = evaluate_log(log, "")
        qualitative = result["sections"][2]["criteria"]
        self.assertEqual(qualitative[0]["marks"], 1)
        self.assertEqual(qualitative[4]["marks"], 1)
        self.assertEqual(log[0], {"action": "add_chemical", "chemical_id": "NaOH", "observation": "White precipitate forms"})

    def test_paper_without_marks(self):
        content = dict(SMALL_PAPER)
        del content["marks"]
        self.assertEqual(evaluate_log([], "", content)["max_marks"], 25)

    def test_question_without_marks_scores_zero(self):
        content = {"questions": [{"id": "Q1", "type": "qualitative", "title": "Ions"}]}
        result = evaluate_log(QUALITATIVE_LOG, "SO4", content)
        self.assertEqual(result["sections"][0]["score"], 0)
        self.assertEqual(result["max_marks"], 0)
        self.assertEqual(result["grade"], "U")


class TestAggregation(unittest.TestCase):
    def test_exact_a_star_boundary(self):
        result = evaluate_log(ENERGETICS_LOG + QUALITATIVE_LOG, ENERGETICS_NOTES + "\nQ3: FA 6 contains SO4", SMALL_PAPER)
        self.assertEqual([s["score"] for s in result["sections"]], [10, 12])
        self.assertEqual(result["total"], 22)
        self.assertEqual(result["grade"], "A*")

    def test_just_below_a_star(self):
        log = ENERGETICS_LOG + QUALITATIVE_LOG[:-1]
        result = evaluate_log(log, ENERGETICS_NOTES + "\nQ3: FA 6 contains SO4", SMALL_PAPER)
        self.assertEqual(result["total"], 21)
        self.assertEqual(result["grade"], "A")

    def test_sections_are_capped(self):
        content = {
            "marks": 20,
            "questions": [{"id": "Q1", "type": "qualitative", "title": "Ions", "marks": 5}],
        }
        notes = "Fe3+ identified. Fe3+(aq) + 3OH-(aq) → Fe(OH)3(s)"
        result = evaluate_log(QUALITATIVE_LOG, notes, content)
        section = result["sections"][0]
        self.assertEqual(marks(section["criteria"]), 13)
        self.assertEqual(section["score"], 5)
        self.assertEqual(result["total"], 5)

    def test_total_and_feedback(self):
        log = ENERGETICS_LOG + QUALITATIVE_LOG + act("start_clock", 2)
        result = evaluate_log(log, ENERGETICS_NOTES)
        self.assertEqual(result["total"], sum(s["score"] for s in result["sections"]))
        self.assertEqual(len(result["feedback"]), sum(len(s["criteria"]) for s in result["sections"]))
        for section, limit in zip(result["sections"], (17, 10, 13)):
            self.assertLessEqual(section["score"], limit)
            self.assertEqual(section["max"], limit)

    def test_deterministic(self):
        log = ENERGETICS_LOG + QUALITATIVE_LOG
        self.assertEqual(evaluate_log(log, ENERGETICS_NOTES), evaluate_log(log, ENERGETICS_NOTES))

    def test_full_rate_paper(self):
        log = (
            [add("Na2S2O3"), add("HCl"), add("distilled_water")]
            + act("start_clock", 5) + act("stop_clock", 5)
            + act("add_table") + act("add_graph")
            + ENERGETICS_LOG + QUALITATIVE_LOG
        )
        notes = "\n".join([
            "Q1a: relative rate = 1000/t",
            ENERGETICS_NOTES,
            "Q3b: FA 6 contains SO4 2- ions",
            "Q3c: Ba2+(aq) + SO4 2-(aq) → BaSO4(s)",
        ])
        result = evaluate_log(log, notes, get_paper("rate-energetics-anions"))
        self.assertEqual([s["score"] for s in result["sections"]], [15, 10, 13])
        self.assertEqual(result["total"], 38)
        self.assertEqual(result["grade"], "A*")


class TestRateClock(unittest.TestCase):
    def test_five_timed_runs(self):
        criteria = score_rate_clock(act("start_clock", 5) + act("stop_clock", 5), "", {})
        self.assertEqual(criteria[1]["marks"], 2)
        self.assertEqual(criteria[2]["marks"], 3)
        self.assertEqual(criteria[2]["status"], "pass")

    def test_started_but_not_stopped(self):
        criteria = score_rate_clock(act("start_clock"), "", {})
        clock = criteria[1]
        self.assertEqual(clock["status"], "partial")
        self.assertEqual(clock["marks"], 1)
        self.assertEqual(clock["text"], "Stop-clock started but never stopped")

    def test_experiment_ladder(self):
        for stops, expected in ((0, 0), (1, 1), (3, 2), (4, 2), (6, 3)):
            criteria = score_rate_clock(act("start_clock") + act("stop_clock", stops), "", {})
            self.assertEqual(criteria[2]["marks"], expected)

    def test_table_from_details(self):
        criteria = score_rate_clock([{"action": "note", "details": "results table drawn"}], "", {})
        self.assertEqual(criteria[4]["marks"], 2)


class TestQuantitativeScorers(unittest.TestCase):
    def test_titration(self):
        log = [add("NaOH"), add("phenolphthalein"), add("HCl"), {"action": "transfer"}]
        notes = "Titre 24.50 cm³, mean titre 24.45, moles = 0.00245"
        criteria = score_titration(log, notes, {})
        self.assertEqual([c["marks"] for c in criteria], [3, 1, 2, 2, 2, 1])

    def test_titration_indicator_variants(self):
        for chemical in ("starch", "methyl_orange", "bromophenol_blue"):
            self.assertEqual(score_titration([add(chemical)], "", {})[1]["marks"], 1)
        by_details = [{"action": "add_chemical", "chemical": "X", "details": "Added 3 drops of Indicator"}]
        self.assertEqual(score_titration(by_details, "", {})[1]["marks"], 1)
        self.assertEqual(score_titration([add("HCl")], "", {})[1]["marks"], 0)

    def test_crystallisation(self):
        log = act("heat", 2) + act("weigh", 3)
        criteria = score_crystallisation(log, "moles of water, mole ratio 1:12", {})
        self.assertEqual(marks(criteria), 9)

        once = score_crystallisation(act("heat") + act("weigh"), "", {})
        self.assertEqual([c["marks"] for c in once], [1, 1, 0, 0])

    def test_generic(self):
        criteria = score_generic_quantitative([add("HCl"), add("NaOH")] + act("weigh"), "density 2.50", {})
        self.assertEqual(marks(criteria), 7)
        self.assertIn("mass", criteria[1]["text"])

    def test_sub_dispatch(self):
        log = act("heat", 2) + act("weigh", 3)
        by_title = score_quantitative(log, "", {"title": "Water of Crystallisation"})
        self.assertEqual(by_title[0]["text"], "Heated to constant mass (2 heatings recorded)")

        by_context = score_quantitative([], "", {"title": "Question 2", "context": "Fill the burette"})
        self.assertEqual(len(by_context), 6)

        rate = score_quantitative([], "", {"title": "Thiosulfate clock"})
        self.assertEqual(len(rate), 7)

        generic = score_quantitative([], "", {"title": "Question 1"})
        self.assertEqual(len(generic), 3)


class TestQualitative(unittest.TestCase):
    def test_criteria_are_independent(self):
        with_observation = score_qualitative([add("NaOH", "White precipitate forms")], "", {})
        without = score_qualitative([add("NaOH")], "", {})

        self.assertEqual(with_observation[0]["marks"], 1)
        self.assertEqual(without[0]["marks"], 1)
        self.assertEqual(with_observation[6]["marks"], 2)
        self.assertEqual(without[6]["marks"], 0)
        self.assertEqual(without[6]["status"], "fail")

    def test_short_observation_ignored(self):
        criteria = score_qualitative([add("NaOH", "ppt")], "", {})
        self.assertEqual(criteria[6]["marks"], 0)

    def test_reagent_diversity(self):
        for chemicals, expected in (([], 0), (["NaOH"], 1), (["NaOH", "HCl"], 2), (["A", "B", "C", "D"], 3)):
            criteria = score_qualitative([add(c) for c in chemicals], "", {})
            self.assertEqual(criteria[4]["marks"], expected)

    def test_notes_checks(self):
        criteria = score_qualitative([], "Cu²+ present; Cu2+(aq) + 2OH-(aq) -> Cu(OH)2(s)", {})
        self.assertEqual(criteria[7]["marks"], 2)
        self.assertEqual(criteria[8]["marks"], 1)


if __name__ == '__main__':
    unittest.main()
