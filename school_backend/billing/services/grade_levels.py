# billing/services/grade_levels.py

"""
GRADE LEVELS

Fee schedules and ledgers share one canonical integer code per grade
(Nursery -1, Kinder 0, Grade 1..12 -> 1..12).

normalize_grade_level() maps free-text grade names ("Grade 3", "3", "G3")
to that code. It is meant for imports of legacy data and for coercing
API input; services never match grades by name.
"""

from __future__ import annotations

import re

from billing.models.fee_schedule import GRADE_LEVEL_CHOICES
from billing.services.exceptions import BillingValidationError

GRADE_LABELS = dict(GRADE_LEVEL_CHOICES)

_ALIASES = {
    "kindergarten": 0,
    "k": 0,
    "kinder": 0,
    "nursery": -1,
}

_SHORTHAND_RE = re.compile(r"^g\s*-?\s*(\d{1,2})$")


def grade_label(code: int | None) -> str:
    if code is None:
        return ""
    return GRADE_LABELS.get(code, str(code))


def _known(code: int) -> int | None:
    return code if code in GRADE_LABELS else None


def normalize_grade_level(raw) -> int | None:
    """
    Tolerant grade matcher, tried in order:
    1) exact label (case-insensitive), plus kinder/nursery aliases
    2) "Grade " prefix stripped
    3) numeric only
    4) "G<N>" shorthand
    """
    text = " ".join(str(raw or "").split()).lower()
    if not text:
        return None

    for code, label in GRADE_LABELS.items():
        if text == label.lower():
            return code
    if text in _ALIASES:
        return _ALIASES[text]

    if text.startswith("grade"):
        rest = text[len("grade"):].strip(" -")
        if rest.isdigit():
            return _known(int(rest))

    if text.isdigit():
        return _known(int(text))

    match = _SHORTHAND_RE.match(text)
    if match:
        return _known(int(match.group(1)))

    return None


def coerce_grade_level(value) -> int | None:
    """Accept a canonical code or a recognizable name; None stays None."""
    if value is None or value == "":
        return None

    if isinstance(value, bool):
        raise BillingValidationError(f"Unknown grade level: {value!r}")

    if isinstance(value, int):
        if value not in GRADE_LABELS:
            raise BillingValidationError(f"Unknown grade level: {value!r}")
        return value

    code = normalize_grade_level(value)
    if code is None:
        raise BillingValidationError(f"Unknown grade level: {value!r}")
    return code
