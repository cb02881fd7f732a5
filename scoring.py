from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

from problems import DIFFICULTIES, parse_problem_text


def _empty_by_difficulty() -> Dict[str, Dict[str, int]]:
    return {d: {"attempted": 0, "score": 0} for d in DIFFICULTIES}


def aggregate_scores(
    submissions: Iterable[Any], problem_texts: Mapping[str, str]
) -> Dict[str, Any]:
    """
    Score the FIRST submission of every attempted session.

    `submissions` must be ordered oldest first and expose `session_id` and
    `is_correct`; `problem_texts` maps session id -> stored problem_text.
    Sessions with an unrecognised difficulty only count toward the totals.
    """
    first_by_session: Dict[str, bool] = {}
    for s in submissions:
        if s.session_id not in first_by_session:
            first_by_session[s.session_id] = bool(s.is_correct)

    by_difficulty = _empty_by_difficulty()
    total = 0
    for session_id, is_correct in first_by_session.items():
        point = 1 if is_correct else 0
        total += point
        diff = parse_problem_text(problem_texts.get(session_id, "")).difficulty
        if diff in by_difficulty:
            by_difficulty[diff]["attempted"] += 1
            by_difficulty[diff]["score"] += point

    return {"attempted": len(first_by_session), "score": total, "byDifficulty": by_difficulty}
