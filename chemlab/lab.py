import copy
import logging
from datetime import datetime

import numpy as np

from chemlab.content import (
    CHEMICALS,
    DEFAULT_COLOR,
    ROOM_TEMP,
    apply_result,
    has_unknown,
    is_solid,
    merge_content,
    parse_amount,
    scale_contents,
)
from chemlab.evaluation import evaluate_log
from chemlab.papers import DEFAULT_PAPER, join_notes
from chemlab.reactions import simulate_reaction


logger = logging.getLogger(__name__)

MAX_TEMP = 100
HEAT_STEP = 15
FILTERED_COLOR = "#e8e8e8"
FILTRATE_COLOR = "#e8f4f8"

ACTIONS = (
    "heat",
    "stir",
    "filter",
    "start_clock",
    "stop_clock",
    "measure_temp",
    "weigh",
    "test_gas_splint",
    "test_gas_glowing",
    "test_litmus",
)


class LabError(ValueError):
    pass


class LabSession:
    """Bench state for one student: vessels, the action log and undo history."""

    def __init__(self, paper=None, rng=None):
        self.paper = paper or DEFAULT_PAPER
        self.rng = rng if rng is not None else np.random.default_rng()
        self.vessels = []
        self.action_log = []
        self._undo = []
        self._redo = []
        self._next_id = 1

    # Vessels

    def _new_vessel(self, label, icon=""):
        vessel = {
            "id": self._next_id,
            "label": label,
            "icon": icon,
            "contents": [],
            "color": DEFAULT_COLOR,
            "temp": ROOM_TEMP,
            "observations": [],
            "has_precipitate": False,
            "precipitate_label": None,
            "reaction_time": None,
        }
        self._next_id += 1
        self.vessels.append(vessel)
        return vessel

    def create_vessel(self, label, icon=""):
        vessel = self._new_vessel(label, icon)
        self._log({"action": "equipment_selected", "vessel": label, "details": f"Added {label} to bench"})
        return vessel

    def get_vessel(self, vessel_id):
        for vessel in self.vessels:
            if vessel["id"] == vessel_id:
                return vessel
        raise LabError(f"Unknown vessel: {vessel_id}")

    def remove_vessel(self, vessel_id):
        vessel = self.get_vessel(vessel_id)
        self.vessels = [v for v in self.vessels if v["id"] != vessel_id]
        return vessel

    def clear_bench(self):
        self.vessels = []

    def _replace(self, vessel):
        self.vessels = [vessel if v["id"] == vessel["id"] else v for v in self.vessels]
        return vessel

    # Log

    def _log(self, entry):
        self._undo.append(copy.deepcopy(self.action_log))
        self._redo = []
        entry = dict(entry)
        entry.setdefault("timestamp", datetime.utcnow().isoformat())
        self.action_log.append(entry)
        return entry

    def record(self, action, **fields):
        """Append a data entry such as ``add_table`` or ``add_graph``."""
        if not action:
            raise LabError("Action is required")
        return self._log(dict(fields, action=action))

    def undo(self):
        if not self._undo:
            return False
        self._redo.append(self.action_log)
        self.action_log = self._undo.pop()
        return True

    def redo(self):
        if not self._redo:
            return False
        self._undo.append(self.action_log)
        self.action_log = self._redo.pop()
        return True

    # Chemicals

    def resolve_chemical(self, chemical):
        fa_map = self.paper.get("fa_map") or {}
        unknown_fas = self.paper.get("unknown_fas") or []
        if str(chemical).startswith("FA "):
            return fa_map.get(chemical, chemical), chemical, chemical in unknown_fas
        label = CHEMICALS.get(chemical, {}).get("label", chemical)
        return chemical, label, False

    def add_chemical(self, vessel_id, chemical, volume=10, mass=1):
        vessel = self.get_vessel(vessel_id)
        chemical_id, label, unknown = self.resolve_chemical(chemical)
        if chemical_id not in CHEMICALS:
            logger.warning("Rejected unknown chemical %r", chemical)
            raise LabError(f"Unknown chemical: {chemical}")

        item = {"chemical": chemical_id, "label": label, "unknown": unknown}
        if is_solid(chemical_id):
            item["mass"] = float(mass)
            amount = f"{mass}g"
        else:
            item["volume"] = float(volume)
            amount = f"{volume} cm³"

        updated = dict(vessel, contents=merge_content(vessel["contents"], item))
        result = simulate_reaction(updated, "add_chemical", rng=self.rng)
        updated = self._replace(apply_result(updated, result))

        self._log({
            "action": "add_chemical",
            "chemical": chemical_id,
            "amount": amount,
            "vessel": vessel["label"],
            "observation": result["observation"],
            "details": f"Added {amount} of {label}",
        })
        return updated, result

    def transfer(self, source_id, dest_id, amount):
        source = self.get_vessel(source_id)
        dest = self.get_vessel(dest_id)
        if source_id == dest_id:
            raise LabError("Cannot transfer a vessel into itself")
        volume = parse_amount(amount)
        if volume <= 0:
            raise LabError(f"Transfer amount must be positive: {amount}")

        total = sum(c.get("volume") or 0 for c in source["contents"])
        fraction = min(volume / total, 1.0) if total > 0 else 1.0

        moved = scale_contents(source["contents"], fraction)
        self._replace(dict(source, contents=scale_contents(source["contents"], 1 - fraction)))

        contents = dest["contents"]
        for item in moved:
            contents = merge_content(contents, item)
        updated = dict(dest, contents=contents)
        result = simulate_reaction(updated, "add_chemical", rng=self.rng)
        updated = self._replace(apply_result(updated, result, prefix=f"Transfer from {source['label']}: "))

        self._log({
            "action": "transfer",
            "vessel": source["label"],
            "observation": result["observation"],
            "details": f"Transferred {amount} cm³ from {source['label']} → {dest['label']}",
        })
        return updated, result

    # Bench actions

    def perform_action(self, vessel_id, action, clock_time=0):
        if action not in ACTIONS:
            raise LabError(f"Unknown action: {action}")
        vessel = self.get_vessel(vessel_id)
        handler = getattr(self, f"_{action}")
        observation = handler(vessel, clock_time)
        logger.debug("%s on %s: %s", action, vessel["label"], observation)
        self._log({
            "action": action,
            "vessel": vessel["label"],
            "observation": observation,
            "details": observation,
        })
        return observation

    def _note(self, vessel, observation):
        vessel = self.get_vessel(vessel["id"])
        self._replace(dict(vessel, observations=vessel["observations"] + [observation]))
        return observation

    def _heat(self, vessel, clock_time):
        result = simulate_reaction(vessel, "heat", rng=self.rng)
        observation = result["observation"]
        self._replace(dict(
            vessel,
            temp=min(vessel["temp"] + HEAT_STEP, MAX_TEMP),
            observations=vessel["observations"] + [observation],
        ))
        return observation

    def _stir(self, vessel, clock_time):
        result = simulate_reaction(vessel, "stir", rng=self.rng)
        return self._note(vessel, result["observation"])

    def _filter(self, vessel, clock_time):
        solids = [c for c in vessel["contents"] if is_solid(c["chemical"])]
        liquids = [c for c in vessel["contents"] if not is_solid(c["chemical"])]
        if not solids and not vessel["has_precipitate"]:
            return self._note(vessel, "Solution filtered through filter paper. No solid residue observed.")

        if vessel["precipitate_label"]:
            residue = f"Residue: {vessel['precipitate_label']}"
        else:
            residue = "Solid residue on filter paper"
        self._replace(dict(
            vessel,
            contents=solids,
            has_precipitate=False,
            color=FILTERED_COLOR,
            observations=vessel["observations"] + [residue],
        ))
        filtrate = self._new_vessel(f"Beaker (100 cm³) [Filtrate from {vessel['label']}]")
        self._replace(dict(
            filtrate,
            contents=liquids,
            color=FILTRATE_COLOR,
            temp=vessel["temp"],
            observations=[f"Filtrate collected from {vessel['label']}"],
        ))
        return f"Filter complete. {residue}. Filtrate collected in new beaker."

    def _start_clock(self, vessel, clock_time):
        return self._note(vessel, "Stop-clock started.")

    def _stop_clock(self, vessel, clock_time):
        observation = f"Stop-clock stopped at {clock_time}s."
        if vessel["reaction_time"]:
            observation += f" Expected reaction time ~{vessel['reaction_time']}s."
        return self._note(vessel, observation)

    def _measure_temp(self, vessel, clock_time):
        reading = float(np.floor(vessel["temp"] * 2 + 0.5)) / 2
        return self._note(vessel, f"Temperature: {reading:.1f} °C (record to 0.5 °C)")

    def _weigh(self, vessel, clock_time):
        total = sum(c.get("mass") or 0 for c in vessel["contents"] if is_solid(c["chemical"]))
        return self._note(vessel, f"Mass of solid contents: {total:.2f} g (record to 2 d.p.)")

    def _gas_test(self, vessel, found, positive, confirmed, negative):
        if not found:
            return self._note(vessel, negative)
        if has_unknown(vessel):
            return self._note(vessel, positive)
        return self._note(vessel, f"{positive} {confirmed}")

    def _test_gas_splint(self, vessel, clock_time):
        found = any("H₂" in o or "pops" in o for o in vessel["observations"])
        return self._gas_test(
            vessel, found,
            "Gas pops with lighted splint.", "Hydrogen confirmed.",
            "Gas does not pop with splint.",
        )

    def _test_gas_glowing(self, vessel, clock_time):
        found = any("O₂" in o or "relights" in o for o in vessel["observations"])
        return self._gas_test(
            vessel, found,
            "Glowing splint relights.", "Oxygen confirmed.",
            "Glowing splint does not relight.",
        )

    def _test_litmus(self, vessel, clock_time):
        found = any(
            "NH₃" in o or "ammonia" in o or ("litmus" in o and "blue" in o.lower())
            for o in vessel["observations"]
        )
        return self._gas_test(
            vessel, found,
            "Damp red litmus turns blue.", "Ammonia confirmed.",
            "Litmus does not change colour.",
        )

    # Submission

    def evaluate(self, part_answers=None):
        return evaluate_log(self.action_log, join_notes(part_answers), self.paper)
