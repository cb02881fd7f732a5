# schemas/problems.py
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class GenerateRequest(BaseModel):
    # Any JSON value; unknown or non-string values fall back to the defaults.
    difficulty: Any = None
    probType: Any = None


class ProblemOut(BaseModel):
    problem_text: str
    final_answer: float


class GenerateResponse(BaseModel):
    sessionId: str
    difficulty: str
    probType: str
    problem: ProblemOut
    # present only when a canned problem was served
    note: Optional[str] = None


class HintRequest(BaseModel):
    sessionId: Optional[str] = None


class HintResponse(BaseModel):
    hint: str
