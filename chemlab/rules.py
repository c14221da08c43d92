import numpy as np

from chemlab.content import has_unknown


def round_half_up(value):
    if not np.isfinite(value):
        return 0
    return int(np.floor(value + 0.5))


class Matcher:
    def matches(self, chemicals, vessel, action):
        raise NotImplementedError


class RequiresAll(Matcher):
    """Eligible when every listed chemical id is present."""

    def __init__(self, *chemical_ids):
        self.chemical_ids = frozenset(chemical_ids)

    def matches(self, chemicals, vessel, action):
        return self.chemical_ids.issubset(chemicals)

    def __repr__(self):
        return f"RequiresAll({sorted(self.chemical_ids)})"


class Predicate(Matcher):
    """Eligible when ``fn(chemicals, vessel, action)`` is truthy."""

    def __init__(self, fn):
        self.fn = fn

    def matches(self, chemicals, vessel, action):
        return bool(self.fn(chemicals, vessel, action))

    def __repr__(self):
        return f"Predicate({getattr(self.fn, '__name__', 'fn')})"


class Always(Matcher):
    def matches(self, chemicals, vessel, action):
        return True

    def __repr__(self):
        return "Always()"


def one_of_each(*groups):
    """Predicate that needs at least one chemical from every group.

    A plain string counts as a group of one.
    """
    normalized = [(group,) if isinstance(group, str) else tuple(group) for group in groups]

    def check(chemicals, vessel, action):
        return all(any(c in chemicals for c in group) for group in normalized)

    return Predicate(check)


class Rule:
    def __init__(self, id, when, produce, blind=None, action=None):
        self.id = id
        self.when = when
        self.produce = produce
        self.blind = blind
        self.action = action

    def eligible(self, chemicals, vessel, action):
        if self.action is not None and self.action != action:
            return False
        return self.when.matches(chemicals, vessel, action)

    def fire(self, vessel, action, rng):
        producer = self.produce
        if self.blind is not None and has_unknown(vessel):
            producer = self.blind
        if callable(producer):
            return producer(vessel, action, rng)
        return dict(producer)

    def __repr__(self):
        return f"Rule({self.id!r})"
