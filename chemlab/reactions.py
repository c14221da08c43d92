import logging
import numpy as np

from chemlab.content import chemical_ids, normalize_vessel
from chemlab.reaction_rules import REACTION_RULES


logger = logging.getLogger(__name__)

EMPTY_OBSERVATION = "Vessel is empty."
NO_REACTION_OBSERVATION = "No reaction observed. Note all observations."


def baseline_result(vessel):
    return {
        "observation": None,
        "color_change": None,
        "precipitate": None,
        "gas": None,
        "new_color": vessel.get("color"),
        "has_precipitate": False,
    }


def find_rule(vessel, action, rules=None):
    rules = REACTION_RULES if rules is None else rules
    chemicals = chemical_ids(vessel)
    for rule in rules:
        if rule.eligible(chemicals, vessel, action):
            return rule
    return None


def simulate_reaction(vessel, action, rules=None, rng=None):
    """Work out what happens when ``action`` is performed on ``vessel``.

    The first eligible rule in ``rules`` wins. The vessel is never modified;
    the caller folds the returned result into its own state. ``rng`` only
    drives cosmetic timing jitter, pass a seeded generator to pin it.
    """
    vessel = normalize_vessel(vessel)
    action = action or ""
    if rng is None:
        rng = np.random.default_rng()

    result = baseline_result(vessel)
    rule = find_rule(vessel, action, rules)
    if rule is None:
        result["observation"] = EMPTY_OBSERVATION if not vessel["contents"] else NO_REACTION_OBSERVATION
        logger.debug("No rule matched %s for action %r", chemical_ids(vessel), action)
        return result

    logger.debug("Rule %s fired for action %r", rule.id, action)
    result.update(rule.fire(vessel, action, rng))
    return result
