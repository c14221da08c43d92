import numpy as np

from chemlab.content import find_content
from chemlab.rules import Always, Predicate, RequiresAll, Rule, one_of_each, round_half_up


ACIDS = ("HCl", "H2SO4")
MAGNESIUM = ("Mg_powder", "Mg_ribbon")
ZINC = ("Zn", "Zn_powder")
IRON_III = ("FeCl3", "fe3_aq")
HYDROGENCARBONATE = ("NaHCO3", "NaHCO3_aq")
IODIDES = ("KI", "NH4I")
CHLORIDES = ("HCl", "NaCl", "BaCl2", "FeCl3", "NH4Cl", "CaCl2")
SULFATES = ("H2SO4", "CuSO4", "FeSO4", "fe3_aq", "AlNH4SO4_aq")
THIOSULFATE_TITRANTS = ("Na2S2O3_titrant", "Na2S2O3_std")
IODIDE_OXIDANTS = ("KMnO4_acid", "FA3_oxidiser", "H2O2", "CuSO4", "FeCl3", "fe3_aq")
PERMANGANATE_REDUCERS = ("KI", "Na2S2O3", "Na2SO3", "FeSO4", "H2O2", "oxalic_acid")

H2_GAS = "H₂ – pops with lighted splint"
H2_BLIND = "Colourless gas; pops with lighted splint"
CO2_GAS = "CO₂ – turns limewater milky"
CO2_BLIND = "Colourless gas; turns limewater milky"
O2_GAS = "O₂ – relights glowing splint"
NH3_GAS = "NH₃ – pungent; turns damp red litmus blue"
NH3_BLIND = "Pungent gas; turns damp red litmus blue"
COLOURLESS = "#f5f5f5"


# mmol = concentration (mol/dm³) x volume (cm³)
ACID_CONC = {"HCl": 2.00, "H2SO4": 1.00, "oxalic_acid": 0.05}
BASE_CONC = {"NaOH": 1.00, "Na2CO3": 1.00, "NH3_aq": 1.00, "NaHCO3": 0.20, "NaHCO3_aq": 0.20}
ACID_EQUIV = {"H2SO4": 2}
BASE_EQUIV = {"Na2CO3": 2}

# Oxidant: (concentration, mol I2 released per mol oxidant)
IODOMETRIC_OXIDANTS = {
    "KMnO4_acid": (0.0175, 2.5),
    "FA3_oxidiser": (0.0175, 2.5),
    "H2O2": (0.100, 1.0),
    "CuSO4": (1.000, 0.5),
    "FeCl3": (0.500, 0.5),
    "fe3_aq": (0.500, 0.5),
    "I2_solution": (0.100, 1.0),
}
THIOSULFATE_CONC = {"Na2S2O3_titrant": 22.00 / 248.2, "Na2S2O3_std": 0.100}


def titration_balance(vessel):
    acid = 0.0
    base = 0.0
    for item in vessel.get("contents") or []:
        volume = item.get("volume") or 0
        chemical = item.get("chemical")
        if chemical in ACID_CONC:
            acid += volume * ACID_CONC[chemical] * ACID_EQUIV.get(chemical, 1)
        if chemical in BASE_CONC:
            base += volume * BASE_CONC[chemical] * BASE_EQUIV.get(chemical, 1)
    # excess > 0 means base in excess
    return acid, base, base - acid


def iodometric_balance(vessel):
    i2 = 0.0
    thio = 0.0
    for item in vessel.get("contents") or []:
        volume = item.get("volume") or 0
        chemical = item.get("chemical")
        if chemical in IODOMETRIC_OXIDANTS:
            conc, ratio = IODOMETRIC_OXIDANTS[chemical]
            i2 += volume * conc * ratio
        if chemical in THIOSULFATE_CONC:
            thio += volume * THIOSULFATE_CONC[chemical]
    # I2 + 2 S2O3(2-) -> 2 I- + S4O6(2-)
    remaining = max(0.0, i2 - thio / 2)
    fraction = remaining / i2 if i2 > 0 else 0.0
    return remaining, fraction


def _contains(vessel, chemical_id):
    return find_content(vessel, chemical_id) is not None


def _amount(vessel, chemical_id, key):
    item = find_content(vessel, chemical_id)
    return (item or {}).get(key) or 0


# Kinetics

def _clock_time(vessel, rng):
    thio = _amount(vessel, "Na2S2O3", "volume")
    acid = _amount(vessel, "HCl", "volume")
    total = thio + acid
    ratio = thio / total if total > 0 else 0.5
    concentration = ratio * 0.10
    if concentration <= 0 or not np.isfinite(200 / concentration):
        concentration = 0.05
    return round_half_up(200 / concentration + rng.uniform(-10, 10))


def thiosulfate_acid(vessel, action, rng):
    time = _clock_time(vessel, rng)
    return {
        "observation": f"Solution turns cloudy/opaque after ~{time}s. Pale yellow sulfur precipitate forms. Faint smell of SO₂.",
        "reaction_time": time,
        "new_color": "#f5f0dc",
        "precipitate": "S(s) – pale yellow solid",
        "has_precipitate": True,
        "gas": "SO₂ (faint)",
        "color_change": "clear → cloudy/opaque yellow-white",
    }


def thiosulfate_acid_blind(vessel, action, rng):
    time = _clock_time(vessel, rng)
    return {
        "observation": f"Solution turns cloudy/opaque after ~{time}s. Pale yellow solid precipitate forms. Faint pungent smell.",
        "reaction_time": time,
        "precipitate": "Pale yellow solid precipitate",
        "has_precipitate": True,
        "gas": "Pungent gas (faint)",
    }


# Energetics

def _displacement_rise(vessel):
    copper = _amount(vessel, "CuSO4", "volume") * 0.001
    metal = find_content(vessel, "Mg_powder") or find_content(vessel, "Mg_ribbon") or {}
    magnesium = (metal.get("mass") or 0) / 24.3
    return round_half_up(min(copper, magnesium) * 350000 / (50 * 4.18))


def copper_magnesium(vessel, action, rng):
    rise = _displacement_rise(vessel)
    return {
        "observation": f"Vigorous reaction. Blue solution turns colourless/pale. Red-brown copper metal deposits. Temperature rises to ~{22 + rise}°C (ΔT ≈ {rise}°C).",
        "new_color": "#c8a882",
        "precipitate": "Cu(s) – red-brown solid",
        "has_precipitate": True,
        "temp_change": rise,
        "color_change": "blue → colourless + red-brown solid",
    }


def copper_magnesium_blind(vessel, action, rng):
    rise = _displacement_rise(vessel)
    return {
        "observation": f"Vigorous reaction. Coloured solution becomes pale/colourless. Red-brown solid deposits. Temperature rises to ~{22 + rise}°C (ΔT ≈ {rise}°C).",
        "precipitate": "Red-brown solid",
        "has_precipitate": True,
        "temp_change": rise,
        "color_change": "coloured solution → pale + red-brown solid",
    }


# Iodometric titration

def iodometric(vessel, action, rng):
    remaining, fraction = iodometric_balance(vessel)
    starch = _contains(vessel, "starch")
    if fraction > 0.4:
        return {
            "observation": f"Deep brown solution, I₂ present ({remaining:.3f} mmol remaining, {fraction * 100:.0f}% unconsumed). Continue adding Na₂S₂O₃ from the burette.",
            "new_color": "#6a3a08",
            "color_change": "deep brown (I₂ in large excess)",
        }
    if fraction > 0.1:
        return {
            "observation": f"Yellow-brown and fading as I₂ is consumed ({remaining:.3f} mmol remaining, {(1 - fraction) * 100:.0f}% consumed). Continue titrating steadily.",
            "new_color": "#b89020",
            "color_change": "deep brown → yellow-brown (I₂ fading)",
        }
    if fraction > 0.01:
        if starch:
            return {
                "observation": f"NEAR ENDPOINT: blue-black starch-iodine complex ({remaining:.3f} mmol I₂ remaining). Add Na₂S₂O₃ dropwise until the blue-black just disappears.",
                "new_color": "#12122a",
                "color_change": "yellow-brown → blue-black with starch",
            }
        return {
            "observation": f"NEAR ENDPOINT: pale yellow ({remaining:.3f} mmol I₂ remaining). Add starch indicator now, then continue dropwise.",
            "new_color": "#d8c830",
            "color_change": "brown → pale yellow (add starch)",
        }
    if starch:
        return {
            "observation": "ENDPOINT: blue-black disappears, solution colourless. All I₂ consumed (I₂ + 2Na₂S₂O₃ → 2NaI + Na₂S₄O₆). Record the burette reading.",
            "new_color": COLOURLESS,
            "color_change": "blue-black → colourless (endpoint)",
        }
    return {
        "observation": "ENDPOINT: pale straw to nearly colourless. All I₂ consumed. Record the burette reading. Starch added near the end gives a sharper endpoint.",
        "new_color": "#fafae8",
        "color_change": "pale yellow → colourless/straw (endpoint)",
    }


def iodometric_blind(vessel, action, rng):
    _, fraction = iodometric_balance(vessel)
    starch = _contains(vessel, "starch")
    if fraction > 0.4:
        return {"observation": "Deep brown. Continue adding titrant from the burette."}
    if fraction > 0.1:
        return {"observation": "Yellow-brown (fading). Continue titrating."}
    if fraction > 0.01:
        if starch:
            return {"observation": "Blue-black (starch). Near endpoint, add titrant dropwise."}
        return {"observation": "Pale yellow. Near endpoint, add starch now then add dropwise."}
    if starch:
        return {"observation": "Blue-black → colourless. ENDPOINT. Record the burette reading."}
    return {"observation": "Pale straw/colourless. ENDPOINT. Record the burette reading."}


# Acid-base indicators

def _indicator(name, stages, blind_stages, carbonate_note=""):
    """Build produce/blind callables for an acid-base indicator.

    ``stages`` maps each titration stage to (observation, colour, colour change).
    """

    def stage(vessel):
        acid, base, excess = titration_balance(vessel)
        if base == 0 and acid > 0:
            return "acid_only", acid, base
        if acid == 0 and base > 0:
            return "base_only", acid, base
        if excess < -2.0:
            return "acid_excess", acid, base
        if excess < 0:
            return "near", acid, base
        if excess <= 1.0:
            return "endpoint", acid, base
        return "over", acid, base

    def produce(vessel, action, rng):
        key, acid, base = stage(vessel)
        observation, color, change = stages[key]
        observation = observation.format(acid=acid, base=base)
        if carbonate_note and _contains(vessel, "Na2CO3") and key in ("acid_excess", "near"):
            observation += " " + carbonate_note
        return {"observation": observation, "new_color": color, "color_change": change}

    def blind(vessel, action, rng):
        key, _, _ = stage(vessel)
        return {"observation": blind_stages[key]}

    produce.__name__ = f"{name}_produce"
    blind.__name__ = f"{name}_blind"
    return produce, blind


phenolphthalein, phenolphthalein_blind = _indicator(
    "phenolphthalein",
    {
        "acid_only": ("Phenolphthalein added to acid: colourless. Add alkali from the burette.", "#fff0f8", "colourless (acidic)"),
        "base_only": ("Phenolphthalein in alkali: permanent pink. No acid present yet.", "#ffb0d0", "colourless → pink (alkaline)"),
        "acid_excess": ("Acid in large excess (acid: {acid:.1f} mmol, base: {base:.1f} mmol). Phenolphthalein colourless. Continue adding alkali.", "#fff0f8", "colourless (acid in excess)"),
        "near": ("Faint pink appears then fades on swirling (acid: {acid:.1f} mmol, base: {base:.1f} mmol). NEAR ENDPOINT, add dropwise.", "#ffe0f0", "colourless → fleeting pink"),
        "endpoint": ("ENDPOINT: pale permanent pink. Record the burette reading.", "#ffb0d0", "colourless → pale permanent pink (endpoint)"),
        "over": ("Deep pink/magenta: over-titrated (base: {base:.1f} mmol vs acid: {acid:.1f} mmol). Repeat with fresh solution.", "#e060a0", "pink → deep magenta (overshot)"),
    },
    {
        "acid_only": "Indicator added. Solution colourless. Add alkali from the burette.",
        "base_only": "Indicator in alkaline solution: permanent pink.",
        "acid_excess": "Colourless. Still acidic. Continue adding alkali.",
        "near": "Faint pink appears then fades. NEAR ENDPOINT, add dropwise.",
        "endpoint": "Pale permanent PINK. ENDPOINT reached. Record the burette reading.",
        "over": "Deep pink/magenta: over-titrated. Repeat with fresh solution.",
    },
    carbonate_note="CO₂ effervescence may be seen as the acid reacts with Na₂CO₃.",
)

methyl_orange, methyl_orange_blind = _indicator(
    "methyl_orange",
    {
        "acid_only": ("Methyl orange in acid: red. Add alkali from the burette. Endpoint colour is orange.", "#cc2200", "red (acidic)"),
        "base_only": ("Methyl orange in alkali: yellow. Add acid to begin the titration.", "#ddaa00", "yellow (alkaline)"),
        "acid_excess": ("Acid in large excess (acid: {acid:.1f} mmol, base: {base:.1f} mmol). Methyl orange red. Continue adding alkali.", "#cc2200", "red (acid in excess)"),
        "near": ("Red turning orange (acid: {acid:.1f} mmol, base: {base:.1f} mmol). NEAR ENDPOINT, add dropwise.", "#dd6600", "red → orange-red"),
        "endpoint": ("ENDPOINT: orange. Record the burette reading.", "#cc6600", "red → orange (endpoint)"),
        "over": ("Yellow: over-titrated with too much alkali. Repeat the titration.", "#ddaa00", "orange → yellow (overshot)"),
    },
    {
        "acid_only": "Red (strongly acidic). Add alkali from the burette. Endpoint colour is orange.",
        "base_only": "Yellow (alkaline). Add acid to begin the titration.",
        "acid_excess": "Red. Still strongly acidic. Continue adding alkali.",
        "near": "Turning orange. NEAR ENDPOINT, add dropwise now.",
        "endpoint": "ORANGE. ENDPOINT reached. Record the burette reading.",
        "over": "Yellow: over-titrated. Repeat the titration.",
    },
    carbonate_note="CO₂ effervescence occurs as the acid reacts with Na₂CO₃; this is normal.",
)

bromophenol_blue, bromophenol_blue_blind = _indicator(
    "bromophenol_blue",
    {
        "acid_only": ("Bromophenol blue in acid: yellow. Add alkali from the burette. Endpoint: yellow → green.", "#ddaa00", "yellow (acidic)"),
        "base_only": ("Bromophenol blue in alkali: blue. Add acid from the burette. Endpoint: blue → green.", "#4040c0", "blue (alkaline)"),
        "acid_excess": ("Acid in large excess (acid: {acid:.1f} mmol, base: {base:.1f} mmol). Bromophenol blue yellow. Continue adding base.", "#ddaa00", "yellow (acid in excess)"),
        "near": ("Yellow-green (acid: {acid:.1f} mmol, base: {base:.1f} mmol). NEAR ENDPOINT, add dropwise.", "#88aa20", "yellow → yellow-green"),
        "endpoint": ("ENDPOINT: green. Record the burette reading.", "#3a8a40", "yellow → green (endpoint)"),
        "over": ("Blue: over-titrated with too much alkali. Repeat the titration.", "#4040c0", "green → blue (overshot)"),
    },
    {
        "acid_only": "Yellow (acidic). Add alkali from the burette. Endpoint: yellow → green.",
        "base_only": "Blue (alkaline). Add acid from the burette. Endpoint: blue → green.",
        "acid_excess": "Yellow. Acid in excess. Continue adding alkali.",
        "near": "Yellow-green. NEAR ENDPOINT, add alkali dropwise.",
        "endpoint": "GREEN. ENDPOINT. Record the burette reading.",
        "over": "Blue: over-titrated. Repeat the titration.",
    },
)


# Thermal decomposition

def alum_heat(vessel, action, rng):
    mass = _amount(vessel, "potassium_alum_hydrated", "mass") or 5
    residue = f"{mass * 258.2 / 474.4:.2f}"
    loss = mass - float(residue)
    return {
        "observation": f"White crystals sizzle and bubble as water of crystallisation escapes. After strong heating a white powdery anhydrous residue remains (~{residue}g). Mass loss = {loss:.2f}g of water.",
        "color_change": "white crystals → white powder (anhydrous)",
    }


def basic_zinc_carbonate_heat(vessel, action, rng):
    mass = _amount(vessel, "basic_zinc_carbonate", "mass") or 3.0
    residue = f"{mass * 244.2 / 360:.2f}"
    return {
        "observation": f"White solid turns yellow when hot and white again on cooling (ZnO). Condensation of water on the cooler part of the tube. Residue ~{residue}g.",
        "gas": "CO₂ – turns limewater milky (+ water vapour)",
        "color_change": "white → yellow (hot) → white (cold)",
    }


def basic_zinc_carbonate_heat_blind(vessel, action, rng):
    mass = _amount(vessel, "basic_zinc_carbonate", "mass") or 3.0
    residue = f"{mass * 244.2 / 360:.2f}"
    return {
        "observation": f"White solid turns yellow when hot and white again on cooling. Condensation on the cooler part of the tube. Residue ~{residue}g.",
        "gas": CO2_BLIND,
        "color_change": "white → yellow (hot) → white (cold)",
    }


def iron_iii_naoh(vessel, action, rng):
    result = {
        "observation": "Rust-brown precipitate of iron(III) hydroxide Fe(OH)₃ forms immediately. Insoluble in excess NaOH. Confirms Fe³⁺.",
        "new_color": "#b05a10",
        "precipitate": "Fe(OH)₃(s) – rust-brown ppt, insoluble in excess NaOH",
        "has_precipitate": True,
        "color_change": "orange-brown → rust-brown precipitate (Fe(OH)₃)",
    }
    if _contains(vessel, "fe3_aq"):
        result["observation"] += " On warming, ammonia (NH₃) is evolved and turns damp red litmus blue, confirming NH₄⁺."
        result["gas"] = NH3_GAS + " (on warming)"
    return result


def _has_contents(chemicals, vessel, action):
    return bool(vessel.get("contents"))


def _alum_with_permanganate(chemicals, vessel, action):
    if "KMnO4_acid" not in chemicals or "AlNH4SO4_aq" not in chemicals:
        return False
    return not any(c in chemicals for c in PERMANGANATE_REDUCERS)


def _iodometric_mixture(chemicals, vessel, action):
    if not any(c in chemicals for c in THIOSULFATE_TITRANTS):
        return False
    if "I2_solution" in chemicals:
        return True
    return "KI" in chemicals and any(c in chemicals for c in IODIDE_OXIDANTS)


def _starch_iodine(chemicals, vessel, action):
    if "starch" not in chemicals:
        return False
    if "FA3_oxidiser" in chemicals or "I2_solution" in chemicals:
        return True
    return any(c in chemicals for c in IODIDES) and any(
        c in chemicals for c in ("KMnO4_acid", "H2O2", "CuSO4", "FeCl3", "fe3_aq")
    )


def _precipitate(text, precipitate):
    return {"observation": text, "precipitate": precipitate, "has_precipitate": True}


REACTION_RULES = [
    # Kinetics
    Rule("kinetics/thiosulfate-hcl", RequiresAll("Na2S2O3", "HCl"),
         thiosulfate_acid, blind=thiosulfate_acid_blind),

    # Energetics and displacement
    Rule("energetics/cuso4-mg", one_of_each("CuSO4", MAGNESIUM),
         copper_magnesium, blind=copper_magnesium_blind),
    Rule("energetics/zn-cuso4", one_of_each(ZINC, "CuSO4"), {
        "observation": "Blue CuSO₄ solution slowly decolourises. Pink/red copper metal deposits on the zinc. Slight temperature rise.",
        "new_color": "#d4b896",
        "precipitate": "Cu(s) – pink/red-brown solid",
        "has_precipitate": True,
        "color_change": "blue → colourless + red-brown Cu deposits",
    }, blind={
        "observation": "Coloured solution slowly fades. Pink/red-brown solid deposits on the metal. Slight temperature rise.",
        "precipitate": "Pink/red-brown solid",
        "has_precipitate": True,
        "color_change": "coloured solution → pale + pink/red-brown solid",
    }),

    # Iodometric titration sits ahead of the iodide redox rules
    Rule("titration/iodometric", Predicate(_iodometric_mixture),
         iodometric, blind=iodometric_blind),

    # Permanganate redox
    Rule("redox/kmno4-thiosulfate", RequiresAll("KMnO4_acid", "Na2S2O3"), {
        "observation": "Purple KMnO₄ decolourised immediately. S₂O₃²⁻ reduces MnO₄⁻.",
        "new_color": COLOURLESS,
        "color_change": "purple → colourless",
    }, blind={
        "observation": "Purple solution decolourised immediately to colourless.",
        "color_change": "purple → colourless",
    }),
    Rule("redox/kmno4-sulfite", RequiresAll("KMnO4_acid", "Na2SO3"), {
        "observation": "Purple KMnO₄ decolourised to colourless. SO₃²⁻ reduces MnO₄⁻.",
        "new_color": COLOURLESS,
        "color_change": "purple → colourless",
    }, blind={
        "observation": "Purple solution decolourised to colourless.",
        "color_change": "purple → colourless",
    }),
    Rule("redox/kmno4-feso4", RequiresAll("KMnO4_acid", "FeSO4"), {
        "observation": "Purple KMnO₄ rapidly decolourised. Fe²⁺ oxidised to Fe³⁺; solution turns pale yellow-orange.",
        "new_color": "#d4a060",
        "color_change": "purple → pale yellow-orange (Fe³⁺ formed)",
    }, blind={
        "observation": "Purple solution rapidly decolourised. Resulting solution is pale yellow-orange.",
        "color_change": "purple → pale yellow-orange",
    }),
    Rule("redox/kmno4-h2o2", RequiresAll("KMnO4_acid", "H2O2"), {
        "observation": "Purple KMnO₄ rapidly decolourised. Effervescence: O₂ evolved, relights a glowing splint.",
        "new_color": COLOURLESS,
        "color_change": "purple → colourless",
        "gas": O2_GAS,
    }, blind={
        "observation": "Purple solution rapidly decolourised. Effervescence of a colourless gas that relights a glowing splint.",
        "gas": "Colourless gas; relights glowing splint",
    }),
    Rule("redox/kmno4-ki", one_of_each("KMnO4_acid", IODIDES), {
        "observation": "I⁻ oxidised to I₂ by MnO₄⁻. Solution turns deep yellow-brown; starch turns it blue-black.",
        "new_color": "#6a4a10",
        "color_change": "purple → yellow-brown (I₂ liberated)",
    }, blind={
        "observation": "Purple solution fades and turns deep yellow-brown. Starch gives a blue-black colour.",
        "color_change": "purple → yellow-brown",
    }),
    Rule("redox/kmno4-oxalic", RequiresAll("KMnO4_acid", "oxalic_acid"), {
        "observation": "Purple KMnO₄ decolourised slowly when cold, rapidly on warming. CO₂ effervescence. The reaction speeds up as Mn²⁺ builds up.",
        "new_color": COLOURLESS,
        "color_change": "purple → colourless",
        "gas": "CO₂",
    }, blind={
        "observation": "Purple solution decolourised slowly when cold, rapidly on warming. Effervescence of a colourless, odourless gas.",
        "gas": "Colourless, odourless gas",
    }),

    # Iodide redox
    Rule("redox/ki-h2o2", RequiresAll("KI", "H2O2"), {
        "observation": "H₂O₂ oxidises I⁻ to I₂. Solution turns yellow-brown; starch turns it blue-black.",
        "new_color": "#9a7020",
        "color_change": "colourless → yellow-brown (I₂)",
    }, blind={
        "observation": "Solution turns yellow-brown. Starch turns it blue-black.",
        "color_change": "colourless → yellow-brown",
    }),
    Rule("redox/ki-cuso4", RequiresAll("KI", "CuSO4"), {
        "observation": "Cu²⁺ oxidises I⁻ to I₂. Cream/buff precipitate of CuI forms in a yellow-brown solution.",
        "new_color": "#9a8060",
        "precipitate": "CuI(s) – cream/buff ppt",
        "has_precipitate": True,
        "color_change": "blue → yellow-brown (CuI ppt + I₂)",
    }, blind={
        "observation": "Cream/buff precipitate forms. Solution turns yellow-brown. Starch gives a blue-black colour.",
        "precipitate": "Cream/buff solid precipitate",
        "has_precipitate": True,
        "color_change": "coloured solution → cream ppt + yellow-brown solution",
    }),
    Rule("redox/fecl3-ki", one_of_each("KI", IRON_III), {
        "observation": "Fe³⁺ oxidises I⁻ to I₂. Solution turns deep yellow-brown; starch turns it blue-black. Fe²⁺ does not do this.",
        "new_color": "#8a6010",
        "color_change": "orange-brown → deep yellow-brown (I₂ liberated)",
    }, blind={
        "observation": "Solution turns deep yellow-brown. Starch gives a blue-black colour, showing an oxidising species is present.",
        "color_change": "coloured solution → deep yellow-brown",
    }),

    # Iron(III), ammonium and calcium cation tests
    Rule("qualitative/fecl3-naoh", one_of_each("NaOH", IRON_III), iron_iii_naoh, blind={
        "observation": "Rust-brown precipitate forms immediately. Insoluble in excess NaOH.",
        "precipitate": "Rust-brown precipitate, insoluble in excess NaOH",
        "has_precipitate": True,
        "color_change": "→ rust-brown precipitate",
    }),
    Rule("qualitative/fecl3-nh3", one_of_each("NH3_aq", IRON_III), {
        "observation": "Rust-brown precipitate of Fe(OH)₃ forms. Insoluble in excess NH₃(aq), unlike Cu²⁺.",
        "new_color": "#b05a10",
        "precipitate": "Fe(OH)₃(s) – rust-brown ppt, insoluble in excess NH₃",
        "has_precipitate": True,
        "color_change": "orange-brown → rust-brown precipitate (Fe(OH)₃)",
    }, blind={
        "observation": "Rust-brown precipitate forms. Insoluble in excess NH₃(aq).",
        "precipitate": "Rust-brown precipitate, insoluble in excess NH₃",
        "has_precipitate": True,
        "color_change": "→ rust-brown precipitate",
    }),
    Rule("qualitative/nh4cl-naoh-heat", RequiresAll("NH4Cl", "NaOH"), {
        "observation": "On warming: pungent smell of ammonia (NH₃). Damp red litmus turns blue. Confirms NH₄⁺.",
        "gas": NH3_GAS,
        "color_change": "no visible change in solution (gas evolved)",
    }, blind={
        "observation": "On warming: pungent smell. Damp red litmus held in the vapour turns blue.",
        "gas": NH3_BLIND,
        "color_change": "no visible change in solution (gas evolved)",
    }, action="heat"),
    Rule("qualitative/nh4cl-naoh", RequiresAll("NH4Cl", "NaOH"), {
        "observation": "No precipitate at room temperature. On warming, ammonia gas turns damp red litmus blue. Confirms NH₄⁺.",
        "color_change": "no visible change (NH₃ on warming)",
    }, blind={
        "observation": "No precipitate at room temperature. On warming, a pungent gas turns damp red litmus blue.",
        "color_change": "no visible change (pungent gas on warming)",
    }),
    Rule("qualitative/cacl2-naoh", RequiresAll("CaCl2", "NaOH"), {
        "observation": "Slight white milky precipitate of Ca(OH)₂. Insoluble in excess NaOH. Confirms Ca²⁺.",
        "new_color": "#f0f0ee",
        "precipitate": "Ca(OH)₂(s) – faint white milky ppt",
        "has_precipitate": True,
        "color_change": "colourless → faint milky white",
    }, blind={
        "observation": "Slight white milky precipitate forms. Insoluble in excess NaOH.",
        "precipitate": "Faint white milky precipitate",
        "has_precipitate": True,
        "color_change": "colourless → faint milky white",
    }),
    Rule("qualitative/cacl2-na2co3", RequiresAll("CaCl2", "Na2CO3"), {
        "observation": "White precipitate of CaCO₃ forms immediately. Dissolves with effervescence in dilute HCl.",
        "new_color": "#f0f0f0",
        "precipitate": "CaCO₃(s) – white ppt",
        "has_precipitate": True,
        "color_change": "colourless → milky white (CaCO₃)",
    }, blind={
        "observation": "White precipitate forms immediately. Dissolves with effervescence in dilute HCl.",
        "precipitate": "White precipitate",
        "has_precipitate": True,
        "color_change": "colourless → white precipitate",
    }),
    Rule("qualitative/cu2o-h2so4", one_of_each("Cu2O", ACIDS), {
        "observation": "Cu₂O dissolves in warm acid and disproportionates. Red-brown copper residue; pale blue Cu²⁺ filtrate.",
        "new_color": "#b3d9ff",
        "precipitate": "Cu(s) – red-brown metallic residue",
        "has_precipitate": True,
        "color_change": "red solid → red-brown residue + pale blue solution",
    }, blind={
        "observation": "Solid dissolves in warm acid. Red-brown metallic residue; pale blue filtrate.",
        "precipitate": "Red-brown metallic residue",
        "has_precipitate": True,
        "color_change": "solid → red-brown residue + pale blue solution",
    }),

    # Bromide and nitrite with permanganate
    Rule("redox/kmno4-kbr", RequiresAll("KMnO4_acid", "KBr"), {
        "observation": "Purple KMnO₄ slowly decolourises. Br⁻ oxidised to Br₂; solution turns orange-brown. Confirms Br⁻.",
        "new_color": "#c87820",
        "color_change": "purple → orange-brown (Br₂ liberated)",
    }, blind={
        "observation": "Purple solution slowly decolourises and turns orange-brown.",
        "color_change": "purple → orange-brown",
    }),
    Rule("redox/kmno4-nano2", RequiresAll("KMnO4_acid", "NaNO2"), {
        "observation": "Purple KMnO₄ rapidly decolourised. NO₂⁻ oxidised to NO₃⁻. Nitrate does not do this.",
        "new_color": COLOURLESS,
        "color_change": "purple → colourless",
    }, blind={
        "observation": "Purple solution rapidly decolourised.",
        "color_change": "purple → colourless",
    }),

    # Silver nitrate ahead of barium chloride, which carries Cl⁻
    Rule("qualitative/agno3-chloride", one_of_each("AgNO3", CHLORIDES), {
        "observation": "Curdy white precipitate of AgCl forms immediately. Soluble in dilute NH₃(aq). Confirms Cl⁻.",
        "new_color": "#f0f0f0",
        "precipitate": "AgCl(s) – curdy white ppt; soluble in dil. NH₃(aq)",
        "has_precipitate": True,
        "color_change": "colourless → white curdy (AgCl)",
    }, blind={
        "observation": "Curdy white precipitate forms immediately. Soluble in dilute NH₃(aq).",
        "precipitate": "Curdy white precipitate; soluble in dilute NH₃(aq)",
        "has_precipitate": True,
        "color_change": "colourless → white curdy precipitate",
    }),
    Rule("qualitative/agno3-fe3aq", RequiresAll("AgNO3", "fe3_aq"), {
        "observation": "No curdy precipitate forms. Cl⁻, Br⁻ and I⁻ are absent.",
        "new_color": "#c46008",
        "color_change": "no significant change",
    }, blind={
        "observation": "No curdy precipitate forms with AgNO₃. No halide present.",
        "color_change": "no significant change",
    }),
    Rule("qualitative/agno3-bromide", RequiresAll("AgNO3", "KBr"), {
        "observation": "Cream precipitate of AgBr forms. Insoluble in dilute NH₃, soluble in concentrated NH₃(aq). Confirms Br⁻.",
        "new_color": "#fffae0",
        "precipitate": "AgBr(s) – cream ppt; dissolves in conc. NH₃",
        "has_precipitate": True,
        "color_change": "colourless → cream (AgBr)",
    }, blind={
        "observation": "Cream precipitate forms. Insoluble in dilute NH₃, soluble in concentrated NH₃(aq).",
        "precipitate": "Cream precipitate",
        "has_precipitate": True,
        "color_change": "colourless → cream precipitate",
    }),
    Rule("qualitative/agno3-iodide", one_of_each("AgNO3", IODIDES), {
        "observation": "Pale yellow precipitate of AgI forms. Insoluble in dilute and concentrated NH₃(aq). Confirms I⁻.",
        "new_color": "#ffffa0",
        "precipitate": "AgI(s) – pale yellow ppt; insoluble in NH₃",
        "has_precipitate": True,
        "color_change": "colourless → pale yellow (AgI)",
    }, blind={
        "observation": "Pale yellow precipitate forms. Insoluble in dilute and concentrated NH₃(aq).",
        "precipitate": "Pale yellow precipitate",
        "has_precipitate": True,
        "color_change": "colourless → pale yellow precipitate",
    }),
    Rule("qualitative/agno3-sulfate", RequiresAll("AgNO3", "H2SO4"), {
        "observation": "Slight white precipitate of Ag₂SO₄, less curdy than AgCl. Soluble in excess dilute acid.",
        "new_color": "#f8f8f0",
        "precipitate": "Ag₂SO₄(s) – white ppt (slightly soluble)",
        "has_precipitate": True,
    }, blind=_precipitate(
        "Slight white precipitate forms. Soluble in excess dilute acid.",
        "White precipitate (slightly soluble)",
    )),
    Rule("qualitative/agno3-carbonate", RequiresAll("AgNO3", "Na2CO3"), {
        "observation": "Pale yellow/cream precipitate of Ag₂CO₃. Soluble in dilute nitric acid.",
        "new_color": "#fffacc",
        "precipitate": "Ag₂CO₃(s) – pale yellow ppt",
        "has_precipitate": True,
        "color_change": "colourless → pale yellow (Ag₂CO₃)",
    }, blind={
        "observation": "Pale yellow/cream precipitate forms. Soluble in dilute nitric acid.",
        "precipitate": "Pale yellow precipitate",
        "has_precipitate": True,
        "color_change": "colourless → pale yellow precipitate",
    }),
    Rule("qualitative/agno3-sulfite", RequiresAll("AgNO3", "Na2SO3"), {
        "observation": "White precipitate of Ag₂SO₃ forms and darkens to brown/black on standing.",
        "new_color": "#c0b8a8",
        "precipitate": "Ag₂SO₃(s) – white ppt; darkens on standing",
        "has_precipitate": True,
    }, blind=_precipitate(
        "White precipitate forms and darkens to brown/black on standing.",
        "White precipitate; darkens on standing",
    )),
    Rule("qualitative/agno3-thiosulfate", RequiresAll("AgNO3", "Na2S2O3"), {
        "observation": "White precipitate of Ag₂S₂O₃ rapidly turns yellow then dark brown-black as Ag₂S forms.",
        "new_color": "#5a3a20",
        "precipitate": "Ag₂S₂O₃ → Ag₂S – white → brown-black ppt",
        "has_precipitate": True,
        "color_change": "white → yellow → dark brown-black",
    }, blind={
        "observation": "White precipitate rapidly turns yellow then dark brown-black.",
        "precipitate": "White → brown-black precipitate",
        "has_precipitate": True,
        "color_change": "white → yellow → dark brown-black",
    }),
    Rule("qualitative/agno3-naoh", RequiresAll("AgNO3", "NaOH"), {
        "observation": "Dark brown precipitate of Ag₂O forms. Soluble in excess NH₃(aq).",
        "new_color": "#6b4f3a",
        "precipitate": "Ag₂O(s) – dark brown ppt",
        "has_precipitate": True,
        "color_change": "colourless → dark brown (Ag₂O)",
    }, blind={
        "observation": "Dark brown precipitate forms. Soluble in excess NH₃(aq).",
        "precipitate": "Dark brown precipitate",
        "has_precipitate": True,
        "color_change": "colourless → dark brown precipitate",
    }),
    Rule("qualitative/agno3-nh3", RequiresAll("AgNO3", "NH3_aq"), {
        "observation": "Pale brown Ag₂O forms at first, then dissolves in excess NH₃ giving colourless [Ag(NH₃)₂]⁺.",
        "new_color": COLOURLESS,
        "color_change": "colourless → pale brown → colourless",
    }, blind={
        "observation": "Pale brown precipitate forms, then dissolves in excess giving a colourless solution.",
        "color_change": "colourless → pale brown → colourless",
    }),

    # Carbonate, nitrite and sulfite reactions
    Rule("qualitative/na2co3-fecl3", one_of_each("Na2CO3", IRON_III), {
        "observation": "Rust-brown precipitate of Fe(OH)₃ with CO₂ effervescence. Fe³⁺ is hydrolysed; no FeCO₃ forms.",
        "new_color": "#b05a10",
        "precipitate": "Fe(OH)₃(s) – rust-brown ppt",
        "has_precipitate": True,
        "gas": "CO₂ (effervescence)",
        "color_change": "orange-brown → rust-brown precipitate + effervescence",
    }, blind={
        "observation": "Rust-brown precipitate forms immediately with effervescence.",
        "precipitate": "Rust-brown precipitate",
        "has_precipitate": True,
        "gas": "Effervescence (colourless gas)",
        "color_change": "coloured solution → rust-brown precipitate + effervescence",
    }),
    Rule("qualitative/nano2-acid", one_of_each("NaNO2", ACIDS), {
        "observation": "Brown fumes of NO₂ evolved above the solution. Colourless NO also forms. Fumes are toxic.",
        "gas": "NO₂ (brown fumes) + NO; toxic",
        "color_change": "colourless → pale blue → colourless",
    }, blind={
        "observation": "Brown fumes evolved on adding acid. Fumes are toxic.",
        "gas": "Brown fumes; toxic",
        "color_change": "colourless (brown fumes above solution)",
    }),
    Rule("qualitative/acid-carbonate", one_of_each("Na2CO3", ACIDS), {
        "observation": "Vigorous effervescence. Colourless, odourless CO₂ turns limewater milky. Carbonate confirmed.",
        "gas": CO2_GAS,
        "color_change": "effervescence (CO₂)",
    }, blind={
        "observation": "Vigorous effervescence. Colourless, odourless gas turns limewater milky.",
        "gas": "Colourless, odourless gas; turns limewater milky",
        "color_change": "effervescence",
    }),
    Rule("qualitative/acid-sulfite", one_of_each("Na2SO3", ACIDS), {
        "observation": "Effervescence of pungent/choking SO₂. Decolourises acidified KMnO₄.",
        "gas": "SO₂ – pungent choking gas",
        "color_change": "effervescence (SO₂)",
    }, blind={
        "observation": "Effervescence of a pungent/choking gas. Decolourises acidified KMnO₄.",
        "gas": "Pungent, choking gas",
        "color_change": "effervescence (pungent gas)",
    }),

    # Barium chloride
    Rule("qualitative/bacl2-thiosulfate", RequiresAll("BaCl2", "Na2S2O3"), {
        "observation": "No precipitate at first. On standing with H⁺ an off-white/pale yellow precipitate forms slowly.",
        "precipitate": "off-white/pale yellow ppt slowly",
        "has_precipitate": True,
    }),
    Rule("qualitative/bacl2-sulfate", one_of_each("BaCl2", SULFATES), {
        "observation": "White precipitate of BaSO₄ forms immediately. Insoluble in excess dilute HCl. Sulfate confirmed.",
        "new_color": "#f8f8f8",
        "precipitate": "BaSO₄(s) – white ppt, insoluble in dilute HCl",
        "has_precipitate": True,
    }, blind=_precipitate(
        "White precipitate forms immediately. Insoluble in excess dilute HCl.",
        "White precipitate, insoluble in dilute HCl",
    )),
    Rule("qualitative/bacl2-sulfite", RequiresAll("BaCl2", "Na2SO3"), {
        "observation": "White precipitate of BaSO₃ forms. Soluble in excess dilute strong acid, unlike BaSO₄.",
        "new_color": COLOURLESS,
        "precipitate": "BaSO₃(s) – white ppt, soluble in dilute HCl",
        "has_precipitate": True,
    }, blind=_precipitate(
        "White precipitate forms. Soluble in excess dilute strong acid.",
        "White precipitate, soluble in dilute HCl",
    )),
    Rule("qualitative/bacl2-carbonate", RequiresAll("BaCl2", "Na2CO3"), {
        "observation": "White precipitate of BaCO₃ forms. Dissolves in dilute HCl with effervescence of CO₂.",
        "new_color": "#f8f8f8",
        "precipitate": "BaCO₃(s) – white ppt, soluble in dilute HCl",
        "has_precipitate": True,
    }, blind=_precipitate(
        "White precipitate forms. Dissolves in dilute HCl with effervescence.",
        "White precipitate, soluble in dilute HCl",
    )),

    # Hydroxide cation tests
    Rule("qualitative/naoh-cuso4", RequiresAll("NaOH", "CuSO4"), {
        "observation": "Pale blue precipitate of Cu(OH)₂ forms. Insoluble in excess NaOH. Confirms Cu²⁺.",
        "new_color": "#b8d4e8",
        "precipitate": "Cu(OH)₂(s) – pale blue ppt, insoluble in excess NaOH",
        "has_precipitate": True,
        "color_change": "blue → pale blue precipitate",
    }, blind={
        "observation": "Pale blue precipitate forms. Insoluble in excess NaOH.",
        "precipitate": "Pale blue precipitate, insoluble in excess NaOH",
        "has_precipitate": True,
        "color_change": "→ pale blue precipitate",
    }),
    Rule("qualitative/naoh-feso4", RequiresAll("NaOH", "FeSO4"), {
        "observation": "Dirty green precipitate of Fe(OH)₂ forms, turning rust-brown at the surface on standing. Confirms Fe²⁺.",
        "new_color": "#6a8a5a",
        "precipitate": "Fe(OH)₂(s) – dirty green ppt",
        "has_precipitate": True,
        "color_change": "pale green → dirty green precipitate",
    }, blind={
        "observation": "Dirty green precipitate forms, turning rust-brown at the surface on standing.",
        "precipitate": "Dirty green precipitate",
        "has_precipitate": True,
        "color_change": "→ dirty green precipitate",
    }),

    # Acid-base indicators
    Rule("titration/phenolphthalein",
         one_of_each("phenolphthalein", ("HCl", "H2SO4", "NaOH", "Na2CO3", "NH3_aq")),
         phenolphthalein, blind=phenolphthalein_blind),
    Rule("titration/methyl-orange",
         one_of_each("methyl_orange", ("HCl", "H2SO4", "NaOH", "Na2CO3", "NH3_aq")),
         methyl_orange, blind=methyl_orange_blind),
    Rule("titration/bromophenol-blue",
         one_of_each("bromophenol_blue", ("HCl", "H2SO4", "NaOH", "Na2CO3", "NaHCO3", "NaHCO3_aq")),
         bromophenol_blue, blind=bromophenol_blue_blind),
    Rule("qualitative/naoh-neutralise", one_of_each("NaOH", ACIDS), {
        "observation": "Acid-base neutralisation. No visible change. Solution warms slightly as the reaction is exothermic.",
        "color_change": "no visible change (neutralisation)",
    }),

    # Ammonia cation tests
    Rule("qualitative/nh3-cuso4", RequiresAll("NH3_aq", "CuSO4"), {
        "observation": "Pale blue precipitate forms, then dissolves in excess NH₃ to give a deep royal blue solution of [Cu(NH₃)₄]²⁺.",
        "new_color": "#1a4a9a",
        "precipitate": "Cu(OH)₂ initially → dissolves in excess NH₃",
        "has_precipitate": False,
        "color_change": "blue → deep royal blue",
    }, blind={
        "observation": "Pale blue precipitate forms, then dissolves in excess to give a deep royal blue solution.",
        "precipitate": "Pale blue precipitate initially → dissolves in excess",
        "color_change": "→ deep royal blue",
    }),
    Rule("qualitative/nh3-feso4", RequiresAll("NH3_aq", "FeSO4"), {
        "observation": "Dirty green precipitate of Fe(OH)₂ forms. Insoluble in excess NH₃(aq).",
        "new_color": "#6a8a5a",
        "precipitate": "Fe(OH)₂(s) – dirty green ppt, insoluble in excess NH₃",
        "has_precipitate": True,
    }, blind=_precipitate(
        "Dirty green precipitate forms. Insoluble in excess NH₃(aq).",
        "Dirty green precipitate, insoluble in excess NH₃",
    )),

    # Metals
    Rule("qualitative/al-naoh", RequiresAll("Al_foil", "NaOH"), {
        "observation": "After a short delay, effervescence. H₂ evolved, pops with a lighted splint. Aluminium dissolves and the mixture warms.",
        "gas": H2_GAS,
        "temp_change": 8,
    }, blind={
        "observation": "After a short delay, effervescence. The gas pops with a lighted splint. Metal dissolves and the mixture warms.",
        "gas": H2_BLIND,
        "temp_change": 8,
    }),
    Rule("qualitative/al-acid", one_of_each("Al_foil", ACIDS), {
        "observation": "Slow start, then steady effervescence. H₂ pops with a lighted splint. The mixture warms.",
        "gas": H2_GAS,
        "temp_change": 10,
    }, blind={
        "observation": "Slow start, then steady effervescence. The gas pops with a lighted splint.",
        "gas": H2_BLIND,
        "temp_change": 10,
    }),
    Rule("energetics/al-cuso4", RequiresAll("Al_foil", "CuSO4"), {
        "observation": "Slow start, then red/brown copper coats the aluminium. Blue colour fades. Temperature rises.",
        "new_color": "#d4b896",
        "precipitate": "Cu(s) – red/brown coating on Al",
        "has_precipitate": True,
        "temp_change": 12,
        "color_change": "blue → pale + red-brown solid",
    }, blind={
        "observation": "Slow start, then a red/brown solid coats the metal. Colour fades. Temperature rises.",
        "precipitate": "Red/brown metallic solid",
        "has_precipitate": True,
        "temp_change": 12,
    }),
    Rule("qualitative/mg-fe3", one_of_each(MAGNESIUM, "fe3_aq"), {
        "observation": "Effervescence (H₂ pops with a lighted splint). Orange-brown Fe³⁺ solution turns pale green as Fe²⁺ forms.",
        "gas": H2_GAS,
        "new_color": "#8ab86a",
        "color_change": "orange-brown → pale green",
    }, blind={
        "observation": "Effervescence; the gas pops with a lighted splint. Solution turns pale green.",
        "gas": H2_BLIND,
        "color_change": "orange-brown → pale green",
    }),
    Rule("qualitative/mg-acid", one_of_each(MAGNESIUM, ACIDS), {
        "observation": "Vigorous effervescence. Magnesium dissolves. H₂ pops with a lighted splint. Solution warms.",
        "gas": H2_GAS,
        "color_change": "colourless (effervescence)",
    }, blind={
        "observation": "Vigorous effervescence. Metal dissolves. The gas pops with a lighted splint.",
        "gas": H2_BLIND,
    }),
    Rule("qualitative/zn-naoh", one_of_each(ZINC, "NaOH"), {
        "observation": "Slow effervescence on warming. H₂ pops with a lighted splint. Zinc dissolves as zincate.",
        "gas": H2_GAS,
        "temp_change": 5,
    }, blind={
        "observation": "Slow effervescence on warming. The gas pops with a lighted splint.",
        "gas": H2_BLIND,
        "temp_change": 5,
    }),
    Rule("qualitative/zn-acid", one_of_each(ZINC, ACIDS), {
        "observation": "Steady effervescence. Zinc dissolves. H₂ pops with a lighted splint.",
        "gas": H2_GAS,
        "color_change": "colourless (effervescence)",
    }, blind={
        "observation": "Steady effervescence. Metal dissolves. The gas pops with a lighted splint.",
        "gas": H2_BLIND,
    }),

    # Carbonate precipitates
    Rule("qualitative/na2co3-cuso4", RequiresAll("Na2CO3", "CuSO4"), {
        "observation": "Blue-green precipitate of basic copper carbonate forms with slight effervescence.",
        "new_color": "#4a9a7a",
        "precipitate": "Cu₂(OH)₂CO₃(s) – blue-green ppt",
        "has_precipitate": True,
    }, blind=_precipitate("Blue-green precipitate forms with slight effervescence.", "Blue-green precipitate")),
    Rule("qualitative/na2co3-feso4", RequiresAll("Na2CO3", "FeSO4"), {
        "observation": "Pale green/white precipitate of FeCO₃ forms, darkening on standing.",
        "new_color": "#c8d8b8",
        "precipitate": "FeCO₃(s) – pale green/white ppt",
        "has_precipitate": True,
    }, blind=_precipitate("Pale green/white precipitate forms, darkening on standing.", "Pale green/white precipitate")),
    Rule("qualitative/limewater-carbonate", RequiresAll("limewater", "Na2CO3"), {
        "observation": "Limewater turns milky as white CaCO₃ precipitates.",
        "new_color": "#f0f0f0",
        "precipitate": "CaCO₃(s) – white milky ppt",
        "has_precipitate": True,
    }, blind=_precipitate("Solution turns milky; white precipitate forms.", "White milky precipitate")),

    # Iodine and starch
    Rule("titration/starch-iodine", Predicate(_starch_iodine), {
        "observation": "Dark blue-black colour appears, showing iodine is present.",
        "new_color": "#1a1a4a",
        "color_change": "colourless → blue-black (starch-iodine)",
    }, blind={
        "observation": "Dark blue-black colour appears.",
        "color_change": "→ blue-black",
    }),
    Rule("titration/h2o2-fa3", RequiresAll("H2O2", "FA3_oxidiser"), {
        "observation": "Effervescence. The gas relights a glowing splint (O₂).",
        "gas": O2_GAS,
    }),

    # Thermal decomposition
    Rule("thermal/kno3-heat", RequiresAll("KNO3"), {
        "observation": "White solid melts to a colourless liquid. O₂ evolved, relights a glowing splint. KNO₃ → KNO₂.",
        "gas": O2_GAS,
    }, blind={
        "observation": "White solid melts to a colourless liquid. A colourless gas relights a glowing splint.",
        "gas": "Colourless gas; relights glowing splint",
    }, action="heat"),
    Rule("thermal/potassium-alum-heat", RequiresAll("potassium_alum_hydrated"), alum_heat, action="heat"),
    Rule("qualitative/nh4cl-solid-heat", RequiresAll("NH4Cl_solid"), {
        "observation": "White solid disappears from the bottom of the tube and re-forms higher up (sublimation). NH₃ and HCl recombine as white smoke.",
        "gas": "NH₃ + HCl (white smoke; sublimation)",
    }, blind={
        "observation": "White solid disappears from the bottom of the tube and re-forms higher up. White smoke forms.",
        "gas": "White smoke; sublimation",
    }, action="heat"),
    Rule("qualitative/nh4i-naoh-heat", RequiresAll("NH4I", "NaOH"), {
        "observation": "On warming: ammonia (NH₃) evolved, turns damp red litmus blue. Confirms NH₄⁺.",
        "gas": NH3_GAS + " (on warming)",
    }, blind={
        "observation": "On warming: a pungent gas turns damp red litmus blue.",
        "gas": NH3_BLIND,
    }, action="heat"),
    Rule("qualitative/nh4i-naoh", RequiresAll("NH4I", "NaOH"), {
        "observation": "No precipitate at room temperature. On warming, ammonia turns damp red litmus blue.",
        "color_change": "no visible change (NH₃ on warming)",
    }, blind={
        "observation": "No precipitate at room temperature. On warming, a pungent gas turns damp red litmus blue.",
        "color_change": "no visible change",
    }),
    Rule("qualitative/nh4i-acid", one_of_each("NH4I", ACIDS), {
        "observation": "No visible reaction with dilute acid. Solution may slowly turn pale yellow as air oxidises I⁻.",
        "color_change": "colourless → very pale yellow on standing",
    }, blind={
        "observation": "No visible reaction. Solution may slowly turn pale yellow on standing.",
        "color_change": "colourless → very pale yellow on standing",
    }),
    Rule("qualitative/cuco3-acid", one_of_each("CuCO3", ACIDS), {
        "observation": "Green solid dissolves with effervescence. CO₂ turns limewater milky. Blue Cu²⁺ solution forms.",
        "new_color": "#2a88c0",
        "gas": CO2_GAS,
        "color_change": "green solid → blue solution",
    }, blind={
        "observation": "Green solid dissolves with effervescence. The gas turns limewater milky. A blue solution forms.",
        "gas": CO2_BLIND,
        "color_change": "green solid → blue solution",
    }),
    Rule("thermal/cuco3-heat", RequiresAll("CuCO3"), {
        "observation": "Green CuCO₃ turns black (CuO). CO₂ evolved, turns limewater milky.",
        "gas": CO2_GAS,
        "color_change": "green → black",
    }, blind={
        "observation": "Green solid turns black. The gas turns limewater milky.",
        "gas": CO2_BLIND,
        "color_change": "green → black",
    }, action="heat"),
    Rule("qualitative/na2s2o3-fecl3", one_of_each("Na2S2O3", IRON_III), {
        "observation": "Transient dark violet colour, fading to colourless as Fe³⁺ is reduced to Fe²⁺ by S₂O₃²⁻.",
        "new_color": "#f0f0f0",
        "color_change": "orange-brown → dark violet → colourless",
    }, blind={
        "observation": "Transient dark violet colour, fading to almost colourless.",
        "color_change": "→ dark violet → colourless",
    }),

    # Aluminium ammonium sulfate
    Rule("qualitative/alnh4so4-naoh", RequiresAll("AlNH4SO4_aq", "NaOH"), {
        "observation": "White gelatinous precipitate of Al(OH)₃, soluble in excess NaOH. On warming, NH₃ turns damp red litmus blue.",
        "new_color": "#f0f0f5",
        "precipitate": "Al(OH)₃(s) – white gelatinous ppt, soluble in excess NaOH",
        "has_precipitate": True,
        "gas": "NH₃ – pungent (on warming); turns damp red litmus blue",
    }, blind={
        "observation": "White gelatinous precipitate, soluble in excess NaOH. On warming, a pungent gas turns damp red litmus blue.",
        "precipitate": "White gelatinous precipitate; soluble in excess NaOH",
        "has_precipitate": True,
        "gas": "Pungent gas on warming; turns damp red litmus blue",
    }),
    Rule("qualitative/alnh4so4-nh3", RequiresAll("AlNH4SO4_aq", "NH3_aq"), {
        "observation": "White gelatinous precipitate of Al(OH)₃, insoluble in excess NH₃(aq).",
        "new_color": "#f0f0f5",
        "precipitate": "Al(OH)₃(s) – white gelatinous ppt, insoluble in excess NH₃",
        "has_precipitate": True,
    }, blind=_precipitate(
        "White gelatinous precipitate, insoluble in excess NH₃(aq).",
        "White gelatinous precipitate; insoluble in excess NH₃",
    )),
    Rule("qualitative/fecl3-alum-no-reaction", RequiresAll("AlNH4SO4_aq", "FeCl3"), {
        "observation": "No reaction. The solution keeps the orange-brown colour of Fe³⁺.",
        "new_color": "#c46008",
    }, blind={
        "observation": "No reaction. The orange-brown colour remains.",
    }),
    Rule("qualitative/kmno4-alum-no-reaction", Predicate(_alum_with_permanganate), {
        "observation": "No reaction. Purple colour of KMnO₄ remains: no reducing agent present.",
        "new_color": "#9b10c8",
    }, blind={
        "observation": "No reaction. Purple colour remains.",
    }),

    # Chromium, manganese and barium hydroxides
    Rule("qualitative/cr3-naoh", RequiresAll("Cr_aq", "NaOH"), {
        "observation": "Grey-green precipitate of Cr(OH)₃, soluble in excess NaOH giving a dark green solution.",
        "new_color": "#3a6a3a",
        "precipitate": "Cr(OH)₃(s) – grey-green ppt, soluble in excess NaOH",
        "has_precipitate": True,
    }, blind=_precipitate(
        "Grey-green precipitate, soluble in excess NaOH giving a dark green solution.",
        "Grey-green precipitate; soluble in excess NaOH",
    )),
    Rule("qualitative/cr3-nh3", RequiresAll("Cr_aq", "NH3_aq"), {
        "observation": "Grey-green precipitate of Cr(OH)₃, insoluble in excess NH₃(aq).",
        "new_color": "#4a7a4a",
        "precipitate": "Cr(OH)₃(s) – grey-green ppt, insoluble in excess NH₃",
        "has_precipitate": True,
    }, blind=_precipitate(
        "Grey-green precipitate, insoluble in excess NH₃(aq).",
        "Grey-green precipitate; insoluble in excess NH₃",
    )),
    Rule("qualitative/mn2-naoh", RequiresAll("MnSO4", "NaOH"), {
        "observation": "Off-white precipitate of Mn(OH)₂, turning brown on standing in air. Insoluble in excess NaOH.",
        "new_color": "#c8a878",
        "precipitate": "Mn(OH)₂(s) – off-white ppt → brown on standing",
        "has_precipitate": True,
    }, blind=_precipitate(
        "Off-white precipitate, turning brown on standing. Insoluble in excess NaOH.",
        "Off-white precipitate → brown on standing",
    )),
    Rule("qualitative/mn2-nh3", RequiresAll("MnSO4", "NH3_aq"), {
        "observation": "Off-white precipitate of Mn(OH)₂, turning brown on standing. Insoluble in excess NH₃(aq).",
        "new_color": "#c8a878",
        "precipitate": "Mn(OH)₂(s) – off-white ppt; insoluble in excess NH₃",
        "has_precipitate": True,
    }, blind=_precipitate(
        "Off-white precipitate, turning brown on standing. Insoluble in excess NH₃(aq).",
        "Off-white precipitate; insoluble in excess NH₃",
    )),
    Rule("qualitative/bacl2-naoh", RequiresAll("BaCl2", "NaOH"), {
        "observation": "Faint white precipitate of Ba(OH)₂ in concentrated solution. Insoluble in excess NaOH.",
        "new_color": "#f0f0ee",
        "precipitate": "Ba(OH)₂(s) – faint white ppt",
        "has_precipitate": True,
    }, blind=_precipitate("Faint white precipitate. Insoluble in excess NaOH.", "Faint white precipitate")),

    # Hydrogencarbonate and basic zinc carbonate
    Rule("qualitative/nahco3-acid", one_of_each(HYDROGENCARBONATE, ACIDS), {
        "observation": "Vigorous effervescence. CO₂ turns limewater milky. The mixture cools slightly.",
        "gas": CO2_GAS,
    }, blind={
        "observation": "Vigorous effervescence. Colourless, odourless gas turns limewater milky.",
        "gas": "Colourless, odourless gas; turns limewater milky",
    }),
    Rule("thermal/nahco3-heat", one_of_each(HYDROGENCARBONATE), {
        "observation": "White solid decomposes. CO₂ turns limewater milky; water condenses on the cool part of the tube.",
        "gas": "CO₂ – turns limewater milky (+ water vapour condensation)",
    }, blind={
        "observation": "White solid decomposes. The gas turns limewater milky; condensation forms.",
        "gas": CO2_BLIND,
    }, action="heat"),
    Rule("thermal/basic-zinc-carbonate-heat", RequiresAll("basic_zinc_carbonate"),
         basic_zinc_carbonate_heat, blind=basic_zinc_carbonate_heat_blind, action="heat"),
    Rule("qualitative/basic-zinc-carbonate-acid", one_of_each("basic_zinc_carbonate", ACIDS), {
        "observation": "White solid dissolves with effervescence. CO₂ turns limewater milky. Colourless solution forms.",
        "gas": CO2_GAS,
    }, blind={
        "observation": "White solid dissolves with effervescence. The gas turns limewater milky.",
        "gas": CO2_BLIND,
    }),
    Rule("qualitative/i2-starch", RequiresAll("I2_solution", "starch"), {
        "observation": "Deep blue-black colour immediately: starch-iodine complex confirms I₂.",
        "new_color": "#0a0a2a",
        "color_change": "brown → blue-black",
    }, blind={
        "observation": "Deep blue-black colour immediately.",
        "color_change": "→ blue-black",
    }),
    Rule("qualitative/i2-sulfite", RequiresAll("I2_solution", "Na2SO3"), {
        "observation": "Brown iodine colour is discharged; SO₃²⁻ reduces I₂ to I⁻.",
        "new_color": COLOURLESS,
        "color_change": "brown → colourless",
    }, blind={
        "observation": "Brown colour is discharged to colourless.",
        "color_change": "brown → colourless",
    }),

    # Fallbacks
    Rule("fallback/heat", Predicate(_has_contents),
         {"observation": "Solution/mixture warms. Temperature increases."}, action="heat"),
    Rule("fallback/stir", Predicate(_has_contents),
         {"observation": "Contents mixed thoroughly. No visible change."}, action="stir"),
    Rule("fallback/filter", Always(),
         {"observation": "Filtration complete. Residue collected on filter paper. Filtrate collected in receiving vessel."},
         action="filter"),
]
