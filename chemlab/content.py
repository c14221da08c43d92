import re
import numpy as np


DEFAULT_COLOR = "#f0f8ff"
ROOM_TEMP = 22

# Below these amounts a content entry is treated as gone from the vessel
VOLUME_EPSILON = 0.005
MASS_EPSILON = 0.001


CHEMICALS = {
    # Acids
    "HCl": {"label": "Hydrochloric acid (2.00 mol/dm³)", "type": "solution"},
    "H2SO4": {"label": "Sulfuric acid (1.00 mol/dm³)", "type": "solution"},
    "oxalic_acid": {"label": "Ethanedioic acid (0.05 mol/dm³)", "type": "solution"},
    # Bases
    "NaOH": {"label": "Sodium hydroxide (1.00 mol/dm³)", "type": "solution"},
    "NH3_aq": {"label": "Aqueous ammonia", "type": "solution"},
    "Na2CO3": {"label": "Sodium carbonate", "type": "solution"},
    "NaHCO3": {"label": "Sodium hydrogencarbonate", "type": "solid"},
    "NaHCO3_aq": {"label": "Sodium hydrogencarbonate (aq)", "type": "solution"},
    "limewater": {"label": "Limewater", "type": "solution"},
    # Sulfur anions
    "Na2S2O3": {"label": "Sodium thiosulfate (0.10 mol/dm³)", "type": "solution"},
    "Na2S2O3_titrant": {"label": "Sodium thiosulfate (titrant)", "type": "solution"},
    "Na2S2O3_std": {"label": "Sodium thiosulfate (0.100 mol/dm³ standard)", "type": "solution"},
    "Na2SO3": {"label": "Sodium sulfite", "type": "solution"},
    # Salts and test reagents
    "CuSO4": {"label": "Copper(II) sulfate (1.0 mol/dm³)", "type": "solution"},
    "FeSO4": {"label": "Iron(II) sulfate", "type": "solution"},
    "FeCl3": {"label": "Iron(III) chloride", "type": "solution"},
    "fe3_aq": {"label": "Ammonium iron(III) sulfate", "type": "solution"},
    "BaCl2": {"label": "Barium chloride", "type": "solution"},
    "AgNO3": {"label": "Silver nitrate", "type": "solution"},
    "KMnO4_acid": {"label": "Acidified potassium manganate(VII)", "type": "solution"},
    "KI": {"label": "Potassium iodide", "type": "solution"},
    "KBr": {"label": "Potassium bromide", "type": "solution"},
    "NaCl": {"label": "Sodium chloride", "type": "solution"},
    "NaNO2": {"label": "Sodium nitrite", "type": "solution"},
    "NH4Cl": {"label": "Ammonium chloride (aq)", "type": "solution"},
    "NH4Cl_solid": {"label": "Ammonium chloride", "type": "solid"},
    "NH4I": {"label": "Ammonium iodide", "type": "solution"},
    "CaCl2": {"label": "Calcium chloride", "type": "solution"},
    "Cr_aq": {"label": "Chromium(III) solution", "type": "solution"},
    "MnSO4": {"label": "Manganese(II) sulfate", "type": "solution"},
    "AlNH4SO4_aq": {"label": "Ammonium aluminium sulfate", "type": "solution"},
    "H2O2": {"label": "Hydrogen peroxide", "type": "solution"},
    "I2_solution": {"label": "Iodine solution", "type": "solution"},
    "FA3_oxidiser": {"label": "Oxidising agent (FA 3)", "type": "solution"},
    # Indicators
    "starch": {"label": "Starch indicator", "type": "solution"},
    "phenolphthalein": {"label": "Phenolphthalein", "type": "solution"},
    "methyl_orange": {"label": "Methyl orange", "type": "solution"},
    "bromophenol_blue": {"label": "Bromophenol blue", "type": "solution"},
    "distilled_water": {"label": "Distilled water", "type": "solution"},
    # Solids
    "Mg_powder": {"label": "Magnesium powder", "type": "solid"},
    "Mg_ribbon": {"label": "Magnesium ribbon", "type": "solid"},
    "Zn": {"label": "Zinc pieces", "type": "solid"},
    "Zn_powder": {"label": "Zinc powder", "type": "solid"},
    "Al_foil": {"label": "Aluminium foil", "type": "solid"},
    "Cu2O": {"label": "Copper(I) oxide", "type": "solid"},
    "CuCO3": {"label": "Copper(II) carbonate", "type": "solid"},
    "KNO3": {"label": "Potassium nitrate", "type": "solid"},
    "potassium_alum_hydrated": {"label": "Hydrated potassium alum", "type": "solid"},
    "basic_zinc_carbonate": {"label": "Basic zinc carbonate", "type": "solid"},
}


def is_solid(chemical_id):
    return CHEMICALS.get(chemical_id, {}).get("type") == "solid"


def _finite(number):
    return number if np.isfinite(number) else 0.0


def parse_amount(value):
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, np.integer, np.floating)):
        try:
            return _finite(float(value))
        except OverflowError:
            return 0.0
    text = str(value).strip()
    if not text:
        return 0.0
    try:
        return _finite(float(text))
    except (ValueError, TypeError):
        pass

    # Support "10 cm3", "10cm³", "1.5 g"
    match = re.match(r"^([+-]?\d*\.?\d+)\s*(?:cm3|cm³|ml|g)?$", text.lower())
    if match:
        return _finite(float(match.group(1)))

    return 0.0


def normalize_content(raw):
    if not isinstance(raw, dict):
        return None
    chemical = raw.get("chemical") or raw.get("chemical_id")
    if not chemical:
        return None
    chemical = str(chemical)
    item = {
        "chemical": chemical,
        "label": str(raw.get("label") or CHEMICALS.get(chemical, {}).get("label", chemical)),
        "unknown": bool(raw.get("unknown", False)),
    }
    if raw.get("volume") is not None:
        item["volume"] = parse_amount(raw.get("volume"))
    if raw.get("mass") is not None:
        item["mass"] = parse_amount(raw.get("mass"))
    if "volume" not in item and "mass" not in item:
        item["mass" if is_solid(chemical) else "volume"] = parse_amount(raw.get("amount"))
    return item


def normalize_vessel(raw):
    raw = raw if isinstance(raw, dict) else {}
    contents = []
    for entry in raw.get("contents") or []:
        item = normalize_content(entry)
        if item is not None:
            contents.append(item)

    observations = raw.get("observations") or []
    if not isinstance(observations, list):
        observations = [observations]

    return {
        "id": raw.get("id"),
        "label": str(raw.get("label") or "Vessel"),
        "icon": raw.get("icon") or "",
        "contents": contents,
        "color": raw.get("color") or DEFAULT_COLOR,
        "temp": parse_amount(raw.get("temp", ROOM_TEMP)),
        "observations": [str(o) for o in observations if o],
        "has_precipitate": bool(raw.get("has_precipitate", False)),
        "precipitate_label": raw.get("precipitate_label"),
        "reaction_time": raw.get("reaction_time"),
    }


def chemical_ids(vessel):
    return [c.get("chemical") for c in vessel.get("contents") or []]


def find_content(vessel, chemical_id):
    for item in vessel.get("contents") or []:
        if item.get("chemical") == chemical_id:
            return item
    return None


def has_unknown(vessel):
    return any(c.get("unknown") for c in vessel.get("contents") or [])


def merge_content(contents, item):
    """Return a new contents list with ``item`` added.

    Adding a chemical that is already present sums the amounts; once a
    content is flagged unknown it stays flagged.
    """
    merged = []
    found = False
    for existing in contents:
        if existing.get("chemical") != item.get("chemical"):
            merged.append(existing)
            continue
        found = True
        combined = dict(existing)
        for key, digits in (("volume", 2), ("mass", 3)):
            if key in existing or key in item:
                combined[key] = round((existing.get(key) or 0) + (item.get(key) or 0), digits)
        combined["unknown"] = bool(existing.get("unknown") or item.get("unknown"))
        merged.append(combined)
    if not found:
        merged.append(dict(item))
    return merged


def scale_contents(contents, factor):
    """Scale every amount by ``factor`` and drop what falls below the epsilon."""
    scaled = []
    for item in contents:
        new_item = dict(item)
        if item.get("volume") is not None:
            new_item["volume"] = round(item["volume"] * factor, 2)
        if item.get("mass") is not None:
            new_item["mass"] = round(item["mass"] * factor, 3)
        if (new_item.get("volume") or 0) > VOLUME_EPSILON or (new_item.get("mass") or 0) > MASS_EPSILON:
            scaled.append(new_item)
    return scaled


def apply_result(vessel, result, prefix=""):
    updated = dict(vessel)
    updated["color"] = result.get("new_color") or vessel.get("color")
    updated["has_precipitate"] = bool(vessel.get("has_precipitate") or result.get("has_precipitate"))
    updated["precipitate_label"] = result.get("precipitate") or vessel.get("precipitate_label")
    observation = result.get("observation")
    if observation:
        updated["observations"] = list(vessel.get("observations") or []) + [prefix + observation]
    if result.get("temp_change"):
        updated["temp"] = (vessel.get("temp") or ROOM_TEMP) + result["temp_change"]
    updated["reaction_time"] = result.get("reaction_time") or vessel.get("reaction_time")
    return updated
