import logging
import re

from chemlab.papers import DEFAULT_PAPER
from chemlab.predicates import (
    FAIL,
    PARTIAL,
    PASS,
    WARN,
    contains_any,
    count_action,
    criterion,
    distinct_chemicals,
    has_chemical,
    has_keyword,
    ladder,
)


logger = logging.getLogger(__name__)

GRADE_BANDS = [
    (0.88, "A*"),
    (0.78, "A"),
    (0.68, "B"),
    (0.58, "C"),
    (0.48, "D"),
]

INDICATORS = ("starch", "phenolphthalein", "methyl_orange", "bromophenol_blue")
GAS_TESTS = ("test_gas_splint", "test_gas_glowing", "test_litmus")

RATE_PATTERN = re.compile(r"1000\s*/\s*t|relative rate|1/t|rate\s*=")
TITRE_PATTERN = re.compile(r"\d+\.\d{2}")
MEAN_PATTERN = re.compile(r"mean titre", re.IGNORECASE)
MOLES_PATTERN = re.compile(r"mol|n\s*=|conc", re.IGNORECASE)
WATER_PATTERN = re.compile(r"mol|mole|18|water of", re.IGNORECASE)
FORMULA_PATTERN = re.compile(r"Mr|formula|ratio|mole ratio", re.IGNORECASE)
DECIMAL_PATTERN = re.compile(r"\d+\.\d+")
UNITS_PATTERN = re.compile(r"mol|kj|dm³|cm³", re.IGNORECASE)
HEAT_PATTERN = re.compile(r"q\s*=\s*mc|mc.t|4\.18|4\.2|mass.*4", re.IGNORECASE)
ENTHALPY_PATTERN = re.compile(r"ΔH|delta H|kj.?mol|enthalpy", re.IGNORECASE)
ION_PATTERN = re.compile(r"Fe[23]\+|Cu²\+|NH₄|NH4|SO₄|SO4|S₂O₃|S2O3|SO₃|SO3|Cl⁻|Br⁻|I⁻", re.IGNORECASE)
EQUATION_PATTERN = re.compile(r"→|->|\(aq\)|\(s\)|\(g\)")


def grade_for(total, max_marks):
    if not max_marks or max_marks <= 0:
        return "U"
    fraction = total / max_marks
    for threshold, grade in GRADE_BANDS:
        if fraction >= threshold:
            return grade
    return "U"


def _check(ok, marks, passed, missing, miss_status=WARN):
    if ok:
        return criterion(PASS, passed, marks)
    return criterion(miss_status, missing, 0)


def score_rate_clock(log, notes, question):
    criteria = []

    reagents = has_chemical(log, "Na2S2O3") and has_chemical(log, "HCl")
    criteria.append(_check(
        reagents, 2,
        "Mixed Na₂S₂O₃ with HCl: core reaction performed",
        "Did not add both Na₂S₂O₃ (FA 1) and HCl (FA 2)",
        FAIL,
    ))

    started = count_action(log, "start_clock")
    stopped = count_action(log, "stop_clock")
    if started and stopped:
        plural = "s" if stopped > 1 else ""
        criteria.append(criterion(PASS, f"Stop-clock started and stopped ({stopped} timed run{plural})", 2))
    elif started:
        criteria.append(criterion(PARTIAL, "Stop-clock started but never stopped", 1))
    else:
        criteria.append(criterion(FAIL, "Stop-clock not used", 0))

    status, marks = ladder(stopped, [(5, (PASS, 3)), (3, (PARTIAL, 2)), (1, (FAIL, 1))], (FAIL, 0))
    if stopped >= 5:
        text = f"{stopped} experiments performed (5 required for full marks)"
    elif stopped >= 3:
        text = f"Only {stopped}/5 experiments performed"
    else:
        text = f"Fewer than 3 experiments performed ({stopped} found)"
    criteria.append(criterion(status, text, marks))

    criteria.append(_check(
        has_chemical(log, "distilled_water"), 2,
        "Distilled water used to vary concentration",
        "No distilled water added to keep the total volume constant",
    ))

    table = any(entry.get("action") == "add_table" or "table" in str(entry.get("details") or "") for entry in log)
    criteria.append(_check(table, 2, "Results table recorded", "No results table recorded"))

    criteria.append(_check(
        contains_any(notes, RATE_PATTERN, "1000/", "rate"), 2,
        "Rate (1000/t) calculation shown in answers",
        "No rate calculation shown in answers",
    ))

    graph = count_action(log, "add_graph") > 0
    criteria.append(_check(graph, 2, "Graph plotted", "No graph plotted"))
    return criteria


def score_titration(log, notes, question):
    criteria = []

    additions = count_action(log, "add_chemical")
    status, marks = ladder(additions, [(3, (PASS, 3)), (1, (PARTIAL, 1))], (FAIL, 0))
    if additions >= 3:
        text = f"{additions} chemical additions recorded (rough and accurate titrations)"
    elif additions >= 1:
        text = f"Only {additions} addition(s): need a rough and at least two accurate titrations"
    else:
        text = "No chemicals added"
    criteria.append(criterion(status, text, marks))

    indicator = any(has_chemical(log, chemical) for chemical in INDICATORS) or any(
        "indicator" in str(entry.get("details") or "").lower() for entry in log
    )
    criteria.append(_check(indicator, 1, "Indicator used", "No indicator recorded for endpoint detection"))

    criteria.append(_check(
        contains_any(notes, TITRE_PATTERN, "titre", "cm³", "cm3", "burette"), 2,
        "Burette readings and titre values in answers",
        "No titration data found in answers",
    ))
    criteria.append(_check(
        contains_any(notes, "mean", "average", MEAN_PATTERN), 2,
        "Mean titre calculated in answers",
        "Mean titre not shown in answers",
    ))
    criteria.append(_check(
        contains_any(notes, MOLES_PATTERN, "moles", "amount"), 2,
        "Moles and concentration calculation in answers",
        "No moles calculation in answers",
    ))

    pipette = has_keyword(log, "pipette") or count_action(log, "transfer") > 0
    criteria.append(_check(
        pipette, 1,
        "Pipette or transfer operation recorded",
        "No pipette transfer to the conical flask recorded",
    ))
    return criteria


def score_crystallisation(log, notes, question):
    criteria = []

    heats = count_action(log, "heat")
    if heats >= 2:
        criteria.append(criterion(PASS, f"Heated to constant mass ({heats} heatings recorded)", 3))
    elif heats == 1:
        criteria.append(criterion(PARTIAL, "Heated once: heat again to confirm constant mass", 1))
    else:
        criteria.append(criterion(FAIL, "Sample not heated", 0))

    weighings = count_action(log, "weigh")
    status, marks = ladder(weighings, [(3, (PASS, 3)), (2, (PARTIAL, 2)), (1, (FAIL, 1))], (FAIL, 0))
    if weighings >= 3:
        text = f"Weighed before, during and after heating ({weighings} weighings)"
    elif weighings >= 2:
        text = f"{weighings} weighings recorded (need crucible, sample and residue)"
    else:
        text = "Mass not measured enough times"
    criteria.append(criterion(status, text, marks))

    criteria.append(_check(
        contains_any(notes, WATER_PATTERN, "h2o", "H₂O"), 2,
        "Moles of water of crystallisation calculated in answers",
        "No water of crystallisation calculation in answers",
    ))
    criteria.append(_check(
        contains_any(notes, FORMULA_PATTERN), 1,
        "Mr or formula worked out in answers",
        "Formula or Mr not determined in answers",
    ))
    return criteria


def score_generic_quantitative(log, notes, question):
    criteria = []

    additions = count_action(log, "add_chemical")
    if additions >= 2:
        criteria.append(criterion(PASS, f"{additions} chemical additions: experiment performed", 3))
    elif additions == 1:
        criteria.append(criterion(PARTIAL, "Only one chemical added", 1))
    else:
        criteria.append(criterion(FAIL, "No chemicals added", 0))

    recorded = [
        label for label, action in (("mass", "weigh"), ("temperature", "measure_temp"), ("table", "add_table"))
        if count_action(log, action) > 0
    ]
    criteria.append(_check(
        bool(recorded), 2,
        f"Quantitative data recorded ({', '.join(recorded)})",
        "No quantitative measurements recorded",
    ))

    criteria.append(_check(
        contains_any(notes, DECIMAL_PATTERN, UNITS_PATTERN, "calculation"), 2,
        "Numerical working shown in answers",
        "No calculations in answers",
    ))
    return criteria


def score_quantitative(log, notes, question):
    title = str(question.get("title") or "").lower()
    context = str(question.get("context") or "").lower()
    if any(word in title for word in ("rate", "clock", "thiosulfate")):
        scorer = score_rate_clock
    elif "titration" in title or "burette" in context or "titre" in context:
        scorer = score_titration
    elif any(word in title for word in ("crystallis", "alum", "water of")):
        scorer = score_crystallisation
    else:
        scorer = score_generic_quantitative
    logger.debug("Question %s scored with %s", question.get("id"), scorer.__name__)
    return scorer(log, notes, question)


def score_energetics(log, notes, question):
    criteria = []

    weighings = count_action(log, "weigh")
    if weighings:
        plural = "s" if weighings > 1 else ""
        criteria.append(criterion(PASS, f"Mass recorded ({weighings} weighing{plural})", 2))
    else:
        criteria.append(criterion(FAIL, "Mass not measured: needed to calculate moles", 0))

    readings = count_action(log, "measure_temp")
    if readings >= 2:
        criteria.append(criterion(PASS, "Temperature measured before and after reaction", 2))
    elif readings == 1:
        criteria.append(criterion(PARTIAL, "Temperature measured only once (need initial and maximum)", 1))
    else:
        criteria.append(criterion(FAIL, "Temperature not measured", 0))

    criteria.append(_check(
        count_action(log, "stir") > 0, 1,
        "Mixture stirred",
        "Mixture not stirred: temperature may be uneven",
    ))
    criteria.append(_check(
        count_action(log, "add_chemical") >= 2, 1,
        "Reagents combined for the enthalpy experiment",
        "Insufficient reagents added",
        FAIL,
    ))
    criteria.append(_check(
        contains_any(notes, HEAT_PATTERN, "mcΔT", "heat energy", "joule"), 2,
        "Heat energy (q = mcΔT) calculated in answers",
        "No q = mcΔT calculation in answers",
    ))
    criteria.append(_check(
        contains_any(notes, ENTHALPY_PATTERN, "kJ", "ΔH"), 2,
        "ΔH enthalpy value calculated in answers",
        "No ΔH calculation in answers",
    ))
    return criteria


def score_qualitative(log, notes, question):
    criteria = [
        _check(has_chemical(log, "NaOH"), 1,
               "NaOH test performed (cations by precipitate colour)",
               "NaOH not used: key reagent for cation identification"),
        _check(has_chemical(log, "BaCl2"), 1,
               "BaCl₂ test performed (SO₄²⁻ / SO₃²⁻)",
               "BaCl₂ not used: needed to identify sulfate or sulfite"),
        _check(has_chemical(log, "AgNO3"), 1,
               "AgNO₃ test performed (halide ions)",
               "AgNO₃ not used: needed to identify halides"),
        _check(has_chemical(log, "KMnO4_acid"), 1,
               "Acidified KMnO₄ used (reducing agents)",
               "Acidified KMnO₄ not used: identifies reducing anions"),
    ]

    reagents = len(distinct_chemicals(log))
    status, marks = ladder(reagents, [(4, (PASS, 3)), (2, (PARTIAL, 2)), (1, (FAIL, 1))], (FAIL, 0))
    if reagents >= 4:
        text = f"{reagents} different reagents used: thorough systematic testing"
    elif reagents >= 2:
        text = f"Only {reagents} reagents used: more tests needed"
    else:
        text = "Very few tests performed"
    criteria.append(criterion(status, text, marks))

    gas_test = any(entry.get("action") in GAS_TESTS for entry in log)
    criteria.append(_check(
        gas_test, 1,
        "Gas test performed (splint or litmus)",
        "No gas test performed for H₂, O₂ or NH₃",
    ))

    observed = any(len(str(entry.get("observation") or "")) > 10 for entry in log)
    criteria.append(_check(observed, 2, "Observations recorded for tests", "No test observations recorded", FAIL))

    criteria.append(_check(
        contains_any(notes, ION_PATTERN, "identified", "ion", "cation", "anion"), 2,
        "Ion identifications written in answers",
        "No ion identifications in answers",
    ))
    criteria.append(_check(
        contains_any(notes, EQUATION_PATTERN, "ionic equation", "equation"), 1,
        "Ionic equation written in answers",
        "No ionic equations in answers",
    ))
    return criteria


SCORERS = {
    "energetics": score_energetics,
    "qualitative": score_qualitative,
}


def _marks(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def _log_entry(entry):
    if entry.get("chemical") is None and entry.get("chemical_id") is not None:
        return dict(entry, chemical=entry["chemical_id"])
    return entry


def evaluate_log(action_log, notes="", paper=None):
    """Score an action log and the joined answer notes against ``paper``.

    ``paper`` defaults to ``DEFAULT_PAPER``. Malformed pieces of input are
    skipped or replaced with empty values so a result is always returned.
    """
    log = [_log_entry(entry) for entry in (action_log or []) if isinstance(entry, dict)]
    notes = notes if isinstance(notes, str) else ("" if notes is None else str(notes))
    paper = paper if isinstance(paper, dict) else DEFAULT_PAPER
    questions = [q for q in (paper.get("questions") or []) if isinstance(q, dict)]

    sections = []
    for question in questions:
        scorer = SCORERS.get(question.get("type"), score_quantitative)
        criteria = scorer(log, notes, question)
        maximum = _marks(question.get("marks"))
        raw = sum(c["marks"] for c in criteria)
        sections.append({
            "label": str(question.get("title") or question.get("id") or ""),
            "score": min(raw, maximum),
            "max": maximum,
            "criteria": criteria,
        })

    total = sum(section["score"] for section in sections)
    if paper.get("marks") is None:
        max_marks = sum(section["max"] for section in sections)
    else:
        max_marks = _marks(paper.get("marks"))

    logger.debug("Evaluated %d log entries: %s/%s", len(log), total, max_marks)
    return {
        "total": total,
        "max_marks": max_marks,
        "grade": grade_for(total, max_marks),
        "sections": sections,
        "feedback": [c["text"] for section in sections for c in section["criteria"]],
    }
