import json
import re


PASS = "pass"
PARTIAL = "partial"
WARN = "warn"
FAIL = "fail"


def serialize_entry(entry):
    return json.dumps(entry, ensure_ascii=False, skipkeys=True, default=str).lower()


def has_keyword(log, keyword):
    keyword = keyword.lower()
    return any(keyword in serialize_entry(entry) for entry in log)


def has_chemical(log, chemical_id):
    return any(entry.get("chemical") == chemical_id for entry in log)


def count_action(log, action):
    return sum(1 for entry in log if entry.get("action") == action)


def distinct_chemicals(log, action="add_chemical"):
    return {entry.get("chemical") for entry in log if entry.get("action") == action and entry.get("chemical")}


def contains_any(text, *patterns):
    """True when any pattern occurs in ``text``.

    Plain strings match as case-insensitive substrings; compiled regular
    expressions are searched as given, so their own flags apply.
    """
    if not text:
        return False
    lowered = text.lower()
    for pattern in patterns:
        if isinstance(pattern, re.Pattern):
            if pattern.search(text):
                return True
        elif pattern.lower() in lowered:
            return True
    return False


def criterion(status, text, marks):
    return {"status": status, "text": text, "marks": marks}


def ladder(value, steps, default):
    """Return the first ``(threshold, outcome)`` outcome with ``value >= threshold``."""
    for threshold, outcome in steps:
        if value >= threshold:
            return outcome
    return default
