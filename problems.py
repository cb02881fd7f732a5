# Problem vocabulary and the "DIFFICULTY | TYPE | text" storage format.
from __future__ import annotations

import re
from typing import List, NamedTuple

DIFFICULTIES = ["EASY", "MEDIUM", "HARD"]
PROB_TYPES = ["ADDITION", "SUBTRACTION", "MULTIPLICATION", "DIVISION"]
UNKNOWN = "UNKNOWN"

TOPICS = [
    "whole numbers (multi-step word problems)",
    "fractions (addition/subtraction with unlike denominators)",
    "fractions (multiplication/division by whole numbers)",
    "decimals (money/context, addition & multiplication)",
    "ratio and proportion (part-whole)",
    "percentage (discounts, increases, tax)",
    "area/perimeter of rectangles & triangles",
    "rates & time (distance-speed-time, work rate)",
]

FALLBACK_PROBLEMS = [
    {
        "problem_text": "A shop sells pencils at $0.80 each. Mei bought 6 pencils. "
        "How much did she pay in total?",
        "final_answer": 4.8,
    },
    {
        "problem_text": "A tank holds 24 litres of water. Ben drinks 0.3 litres every 10 minutes. "
        "How much will he drink in 1 hour?",
        "final_answer": 1.8,
    },
    {
        "problem_text": "A rectangle is 12 cm long and 5 cm wide. What is its perimeter?",
        "final_answer": 34,
    },
]

_SEP = " | "
# BOM + zero-width characters sometimes pasted into stored rows
_INVISIBLE_RE = re.compile(r"[\ufeff\u200b-\u200d\u2060]")


class ProblemMeta(NamedTuple):
    difficulty: str
    prob_type: str
    text: str


def format_problem_text(difficulty: str, prob_type: str, text: str) -> str:
    return f"{difficulty}{_SEP}{prob_type}{_SEP}{text}"


def parse_problem_text(stored: str) -> ProblemMeta:
    """
    Split a stored problem_text into (difficulty, type, plain text).

    Accepts the current "DIFF | TYPE | text" form and the older "DIFF | text"
    form. A second segment only counts as the type when it is a known
    problem type, so a pipe inside the problem itself is left alone.
    """
    cleaned = _INVISIBLE_RE.sub("", stored or "").strip()
    parts = cleaned.split("|", 2)
    if len(parts) < 2:
        return ProblemMeta(UNKNOWN, UNKNOWN, cleaned)

    difficulty = parts[0].strip().upper()
    if difficulty not in DIFFICULTIES:
        return ProblemMeta(UNKNOWN, UNKNOWN, cleaned)

    if len(parts) == 3 and parts[1].strip().upper() in PROB_TYPES:
        return ProblemMeta(difficulty, parts[1].strip().upper(), parts[2].strip())

    # legacy two-field form
    rest = cleaned.split("|", 1)[1]
    return ProblemMeta(difficulty, UNKNOWN, rest.strip())


def normalize_difficulty(raw: object) -> str:
    d = str(raw or "MEDIUM").strip().upper()
    return d if d in DIFFICULTIES else "MEDIUM"


def normalize_prob_type(raw: object) -> str | None:
    """Known type in upper case, or None so the caller can pick one."""
    t = str(raw or "").strip().upper()
    return t if t in PROB_TYPES else None


def other_topics(current: str) -> List[str]:
    rest = [t for t in TOPICS if t != current]
    return rest or list(TOPICS)
