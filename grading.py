from __future__ import annotations

import math
import re
from enum import Enum
from typing import Any, Optional

from sympy import Rational

# --- Grading policy ----------------------------------------------------------------
CORRECT_ABS_TOL = 1e-6
# "near" if EITHER threshold holds, so close attempts on large answers still get
# the softer feedback.
NEAR_REL_TOL = 0.05
NEAR_ABS_TOL = 0.5

LEN_LIMIT = 100
INVALID_ANSWER_MSG = "Please enter a valid number (e.g., 2.5) or fraction (e.g., 1/6 or 1 1/2)."

_MIXED_RE = re.compile(r"^([+-]?)(\d+)\s+(\d+)\s*/\s*(\d+)$")
_FRACTION_RE = re.compile(r"^([+-]?\d+)\s*/\s*([+-]?\d+)$")
_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


class Band(str, Enum):
    CORRECT = "correct"
    NEAR = "near"
    WRONG = "wrong"


def _finite_or_none(val: Any) -> Optional[float]:
    try:
        f = float(val)
    except (TypeError, ValueError, OverflowError):
        return None
    return f if math.isfinite(f) else None


def normalize_answer(answer: Any) -> Optional[float]:
    """
    Parse a student's answer into a float.

    Tried in order: mixed number "-1 1/2", fraction "3/4" (or "3/-4"), then a
    plain integer/decimal. Returns None for anything else, including a zero
    denominator and non-finite values.
    """
    if isinstance(answer, bool):
        return None
    if isinstance(answer, (int, float)):
        return _finite_or_none(answer)
    if not isinstance(answer, str):
        return None

    s = answer.strip()
    if not s or len(s) > LEN_LIMIT:
        return None

    m = _MIXED_RE.match(s)
    if m:
        sign, whole, num, den = m.groups()
        if int(den) == 0:
            return None
        value = Rational(int(whole)) + Rational(int(num), int(den))
        # sign covers the whole mixed number, not just the whole part
        return _finite_or_none(-value if sign == "-" else value)

    m = _FRACTION_RE.match(s)
    if m:
        num, den = int(m.group(1)), int(m.group(2))
        if den == 0:
            return None
        return _finite_or_none(Rational(num, den))

    if _DECIMAL_RE.match(s):
        return _finite_or_none(s)
    return None


def format_number(x: float) -> str:
    """Whole numbers without the trailing .0, everything else as-is."""
    if math.isfinite(x) and abs(x - round(x)) < 1e-12:
        return str(int(round(x)))
    return str(x)


def round2(x: float) -> float:
    """Storage precision for user answers."""
    return round(float(x), 2)


def classify(answer: float, correct: float) -> Band:
    abs_diff = abs(answer - correct)
    if abs_diff <= CORRECT_ABS_TOL:
        return Band.CORRECT

    rel_diff = abs_diff / abs(correct) if correct != 0 else None
    if (rel_diff is not None and rel_diff <= NEAR_REL_TOL) or abs_diff <= NEAR_ABS_TOL:
        return Band.NEAR
    return Band.WRONG
