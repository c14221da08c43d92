import copy


QUESTION_TYPES = ("quantitative", "energetics", "qualitative")

DEFAULT_PAPER = {
    "id": "default",
    "title": "Practical Paper",
    "marks": 40,
    "fa_map": {},
    "unknown_fas": [],
    "questions": [
        {"id": "Q1", "type": "quantitative", "title": "Question 1", "marks": 17, "context": ""},
        {"id": "Q2", "type": "energetics", "title": "Question 2", "marks": 10, "context": ""},
        {"id": "Q3", "type": "qualitative", "title": "Question 3", "marks": 13, "context": ""},
    ],
}


SAMPLE_PAPERS = [
    {
        "id": "rate-energetics-anions",
        "title": "Advanced Practical Skills: Rate, Enthalpy and Sulfur Anions",
        "marks": 40,
        "fa_map": {
            "FA 1": "Na2S2O3",
            "FA 2": "HCl",
            "FA 3": "CuSO4",
            "FA 4": "Mg_powder",
            "FA 5": "Na2S2O3",
            "FA 6": "H2SO4",
            "FA 7": "Na2SO3",
            "FA 8": "Cu2O",
        },
        "unknown_fas": ["FA 5", "FA 6", "FA 7", "FA 8"],
        "questions": [
            {
                "id": "Q1",
                "type": "quantitative",
                "title": "Question 1 – Rate of Reaction (Thiosulfate Clock)",
                "marks": 17,
                "context": "S₂O₃²⁻(aq) + 2H⁺(aq) → S(s) + SO₂(aq) + H₂O(l)\n"
                           "FA 1 is 0.10 mol dm⁻³ sodium thiosulfate. FA 2 is 2.00 mol dm⁻³ hydrochloric acid.",
                "parts": [
                    {"id": "Q1a", "label": "(a) Method and results table", "marks": 8,
                     "instruction": "Carry out five experiments varying the volume of FA 1, keeping FA 1 + water = 25.00 cm³. "
                                    "Tabulate volumes, reaction time and relative rate (1000/t)."},
                    {"id": "Q1b", "label": "(b) Graph", "marks": 4,
                     "instruction": "Plot relative rate against volume of FA 1 and draw a line of best fit."},
                    {"id": "Q1c", "label": "(c) Prediction", "marks": 2,
                     "instruction": "Use the graph to predict the reaction time for 23.50 cm³ of FA 1."},
                    {"id": "Q1d", "label": "(d) Evaluation", "marks": 3,
                     "instruction": "Explain the effect of not drying the beaker between experiments."},
                ],
            },
            {
                "id": "Q2",
                "type": "energetics",
                "title": "Question 2 – Enthalpy Change (CuSO₄ + Mg)",
                "marks": 10,
                "context": "CuSO₄(aq) + Mg(s) → Cu(s) + MgSO₄(aq)\n"
                           "FA 3 is 1.0 mol dm⁻³ copper(II) sulfate. FA 4 is magnesium powder.",
                "parts": [
                    {"id": "Q2a", "label": "(a) Method", "marks": 3,
                     "instruction": "Weigh FA 4, record the initial temperature of 50.0 cm³ FA 3, add FA 4 and stir. Record the maximum temperature."},
                    {"id": "Q2b", "label": "(b) Heat energy", "marks": 2,
                     "instruction": "Calculate the heat energy produced, q = mcΔT."},
                    {"id": "Q2c", "label": "(c) Enthalpy change", "marks": 2,
                     "instruction": "Calculate ΔH in kJ mol⁻¹."},
                    {"id": "Q2d", "label": "(d) Improvement", "marks": 3,
                     "instruction": "Describe how to correct for heat loss."},
                ],
            },
            {
                "id": "Q3",
                "type": "qualitative",
                "title": "Question 3 – Qualitative Analysis (Sulfur Anions)",
                "marks": 13,
                "context": "FA 5, FA 6 and FA 7 each contain a different anion with sulfur. FA 8 is a solid.",
                "parts": [
                    {"id": "Q3a", "label": "(a) Tests", "marks": 5,
                     "instruction": "Test each solution with acidified KMnO₄, magnesium ribbon and aqueous barium chloride. Record all observations."},
                    {"id": "Q3b", "label": "(b) Identities", "marks": 4,
                     "instruction": "Identify the anion in FA 5, FA 6 and FA 7 and the cation in FA 6."},
                    {"id": "Q3c", "label": "(c) Ionic equation", "marks": 1,
                     "instruction": "Write an ionic equation with state symbols for one reaction."},
                    {"id": "Q3d", "label": "(d) FA 8", "marks": 3,
                     "instruction": "Warm FA 6, add FA 8 and filter. Test the filtrate with KI and with NaOH."},
                ],
            },
        ],
    },
    {
        "id": "alum-iodometric-ions",
        "title": "Advanced Practical Skills: Water of Crystallisation and Iodometric Titration",
        "marks": 40,
        "fa_map": {
            "FA 1": "potassium_alum_hydrated",
            "FA 2": "FA3_oxidiser",
            "FA 3": "KI",
            "FA 4": "Na2S2O3_titrant",
            "FA 5": "starch",
            "FA 6": "fe3_aq",
            "FA 7": "AlNH4SO4_aq",
        },
        "unknown_fas": ["FA 7"],
        "questions": [
            {
                "id": "Q1",
                "type": "quantitative",
                "title": "Question 1 – Water of Crystallisation (Potassium Alum)",
                "marks": 12,
                "context": "FA 1 is hydrated potassium alum, KAl(SO₄)₂·xH₂O.",
                "parts": [
                    {"id": "Q1a", "label": "(a) Heating to constant mass", "marks": 6,
                     "instruction": "Weigh a crucible, add FA 1, reweigh, heat and reweigh until constant mass."},
                    {"id": "Q1b", "label": "(b) Calculation", "marks": 6,
                     "instruction": "Calculate the moles of water lost and the value of x."},
                ],
            },
            {
                "id": "Q2",
                "type": "quantitative",
                "title": "Question 2 – Iodometric Titration (Oxidising Agent)",
                "marks": 15,
                "context": "Pipette 25.0 cm³ FA 2 into a flask, add excess FA 3 and titrate the iodine with FA 4 from the burette.",
                "parts": [
                    {"id": "Q2a", "label": "(a) Titration", "marks": 7,
                     "instruction": "Record rough and accurate titres to 0.05 cm³. Add FA 5 near the endpoint."},
                    {"id": "Q2b", "label": "(b) Mean titre", "marks": 2,
                     "instruction": "Calculate a suitable mean titre."},
                    {"id": "Q2c", "label": "(c) Calculation", "marks": 6,
                     "instruction": "Calculate the amount of thiosulfate and the concentration of the oxidising agent."},
                ],
            },
            {
                "id": "Q3",
                "type": "qualitative",
                "title": "Question 3 – Qualitative Analysis (Transition Metal and Ions)",
                "marks": 13,
                "context": "FA 6 contains a transition metal ion. FA 7 contains two cations and one anion.",
                "parts": [
                    {"id": "Q3a", "label": "(a) Tests on FA 6", "marks": 5,
                     "instruction": "Test FA 6 with NaOH, aqueous ammonia, KI and silver nitrate."},
                    {"id": "Q3b", "label": "(b) Tests on FA 7", "marks": 5,
                     "instruction": "Test FA 7 with NaOH (warm), aqueous ammonia and barium chloride."},
                    {"id": "Q3c", "label": "(c) Conclusions", "marks": 3,
                     "instruction": "Identify the ions present and write one ionic equation."},
                ],
            },
        ],
    },
    {
        "id": "acid-base-halides",
        "title": "Practice Paper: Acid-Base Titration and Halide Ions",
        "marks": 40,
        "fa_map": {
            "FA 1": "NaOH",
            "FA 2": "HCl",
            "FA 3": "phenolphthalein",
            "FA 4": "Mg_ribbon",
            "FA 5": "NaCl",
            "FA 6": "KBr",
            "FA 7": "KI",
            "FA 8": "NH4Cl",
        },
        "unknown_fas": ["FA 5", "FA 6", "FA 7", "FA 8"],
        "questions": [
            {
                "id": "Q1",
                "type": "quantitative",
                "title": "Question 1 – Acid-Base Titration (NaOH + HCl)",
                "marks": 17,
                "context": "Titrate 25.0 cm³ FA 1 with FA 2 from the burette using FA 3.",
                "parts": [
                    {"id": "Q1a", "label": "(a) Titration results", "marks": 9,
                     "instruction": "Record burette readings to 0.05 cm³ for a rough and at least two accurate titres."},
                    {"id": "Q1b", "label": "(b) Mean titre", "marks": 2,
                     "instruction": "Calculate the mean titre from concordant results."},
                    {"id": "Q1c", "label": "(c) Concentration", "marks": 6,
                     "instruction": "Calculate the concentration of NaOH in FA 1."},
                ],
            },
            {
                "id": "Q2",
                "type": "energetics",
                "title": "Question 2 – Enthalpy of Reaction (Mg + HCl)",
                "marks": 10,
                "context": "Add a weighed length of FA 4 to 50.0 cm³ FA 2 in a polystyrene cup.",
                "parts": [
                    {"id": "Q2a", "label": "(a) Measurements", "marks": 4,
                     "instruction": "Record the mass of FA 4 and the initial and maximum temperatures."},
                    {"id": "Q2b", "label": "(b) Calculation", "marks": 6,
                     "instruction": "Calculate q and ΔH for the reaction."},
                ],
            },
            {
                "id": "Q3",
                "type": "qualitative",
                "title": "Question 3 – Qualitative Analysis (Halide Ions)",
                "marks": 13,
                "context": "FA 5, FA 6 and FA 7 each contain a different halide ion. FA 8 contains one cation and one anion.",
                "parts": [
                    {"id": "Q3a", "label": "(a) Silver nitrate tests", "marks": 6,
                     "instruction": "Add aqueous silver nitrate then aqueous ammonia to each of FA 5, FA 6 and FA 7."},
                    {"id": "Q3b", "label": "(b) Tests on FA 8", "marks": 4,
                     "instruction": "Warm FA 8 with NaOH and test any gas with damp red litmus."},
                    {"id": "Q3c", "label": "(c) Conclusions", "marks": 3,
                     "instruction": "Identify the ions and write an ionic equation for one precipitation."},
                ],
            },
        ],
    },
]


def get_paper(paper_id=None):
    """Look up a sample paper by id, falling back to ``DEFAULT_PAPER``."""
    for paper in SAMPLE_PAPERS:
        if paper["id"] == paper_id:
            return copy.deepcopy(paper)
    return copy.deepcopy(DEFAULT_PAPER)


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_paper(content):
    if not isinstance(content, dict):
        raise ValueError("Paper must be a JSON object")

    questions = content.get("questions")
    if not isinstance(questions, list) or not questions:
        raise ValueError("Paper must contain at least one question")

    seen = set()
    for index, question in enumerate(questions, start=1):
        if not isinstance(question, dict):
            raise ValueError(f"Question {index} must be a JSON object")
        qid = question.get("id")
        if not isinstance(qid, str) or not qid:
            raise ValueError(f"Question {index} is missing an id")
        if qid in seen:
            raise ValueError(f"Duplicate question id: {qid}")
        seen.add(qid)
        if question.get("type") not in QUESTION_TYPES:
            raise ValueError(f"Question {qid} has unknown type: {question.get('type')}")
        if not isinstance(question.get("title"), str):
            raise ValueError(f"Question {qid} is missing a title")
        marks = question.get("marks")
        if not _is_number(marks) or marks < 0:
            raise ValueError(f"Question {qid} must have non-negative marks")
        for part in question.get("parts") or []:
            if not isinstance(part, dict) or not part.get("id"):
                raise ValueError(f"Question {qid} has a part without an id")

    marks = content.get("marks")
    if marks is not None and (not _is_number(marks) or marks < 0):
        raise ValueError("Paper marks must be a non-negative number")

    fa_map = content.get("fa_map", {})
    if not isinstance(fa_map, dict):
        raise ValueError("fa_map must map FA labels to chemical ids")
    unknown_fas = content.get("unknown_fas", [])
    if not isinstance(unknown_fas, list):
        raise ValueError("unknown_fas must be a list of FA labels")

    validated = copy.deepcopy(content)
    if marks is None:
        validated["marks"] = sum(q["marks"] for q in questions)
    validated.setdefault("fa_map", {})
    validated.setdefault("unknown_fas", [])
    return validated


def join_notes(part_answers):
    """Flatten ``{part_id: answer}`` into one ``"Q1a: ..."`` line per part."""
    lines = []
    for part_id, answer in (part_answers or {}).items():
        if isinstance(answer, dict):
            answer = answer.get("text")
        if answer is None:
            answer = ""
        lines.append(f"{part_id}: {answer}")
    return "\n".join(lines)
