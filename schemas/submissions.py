# schemas/submissions.py
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel


class SubmitRequest(BaseModel):
    sessionId: Optional[str] = None
    # Free text ("1 1/2", "2.5") or a bare JSON number; normalize_answer decides.
    userAnswer: Any = None


class SubmitResponse(BaseModel):
    is_correct: bool
    band: str
    feedback: str
    solution_steps: Optional[str] = None
    normalized_user_answer: float


class DifficultyScore(BaseModel):
    attempted: int
    score: int


class ScoreResponse(BaseModel):
    attempted: int
    score: int
    byDifficulty: Dict[str, DifficultyScore]
