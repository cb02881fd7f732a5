# routers/submissions.py
from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Response

import store
from db import SessionLocal
from deps.ai import get_ai_client
from generation import (
    GenerationError,
    fallback_feedback,
    fallback_solution,
    generate_feedback,
    generate_solution,
)
from grading import INVALID_ANSWER_MSG, Band, classify, normalize_answer, round2
from problems import parse_problem_text
from schemas.submissions import ScoreResponse, SubmitRequest, SubmitResponse
from scoring import aggregate_scores

logger = logging.getLogger("wordmath.submissions")

router = APIRouter(tags=["submissions"])


@router.post("/submit", response_model=SubmitResponse)
def submit(req: SubmitRequest, response: Response, ai: Any = Depends(get_ai_client)):
    if not req.sessionId or req.userAnswer is None:
        raise HTTPException(status_code=400, detail="Missing sessionId or userAnswer")

    with SessionLocal() as db:
        session = store.get_session(db, req.sessionId)
        if session is None:
            raise HTTPException(status_code=404, detail="Session not found")
        problem_text = parse_problem_text(session.problem_text).text
        correct = float(session.correct_answer)

    parsed = normalize_answer(req.userAnswer)
    if parsed is None:
        raise HTTPException(status_code=400, detail=INVALID_ANSWER_MSG)

    # grade on the precise value, store the rounded one
    band = classify(parsed, correct)
    is_correct = band is Band.CORRECT
    stored_answer = round2(parsed)

    try:
        fb = generate_feedback(ai, problem_text, parsed, correct, band)
        feedback, feedback_model = fb.text, fb.model
    except GenerationError as e:
        logger.warning("[AI_FEEDBACK_FALLBACK] band=%s error=%s", band.value, e)
        feedback, feedback_model = fallback_feedback(band, correct), "fallback"

    solution_steps: Optional[str] = None
    solution_model = "n/a"
    if not is_correct:
        try:
            sol = generate_solution(ai, problem_text, correct)
            solution_steps, solution_model = sol.text, sol.model
        except GenerationError as e:
            logger.warning("[AI_SOLUTION_FALLBACK] error=%s", e)
            solution_steps, solution_model = fallback_solution(correct), "fallback"
        # the submissions table has no column for steps; keep them with the feedback
        feedback = f"{feedback}\n\nSolution (step-by-step):\n{solution_steps}"

    with SessionLocal() as db:
        store.create_submission(db, req.sessionId, stored_answer, is_correct, feedback)

    response.headers["x-feedback-model"] = feedback_model
    response.headers["x-feedback-band"] = band.value
    if solution_steps:
        response.headers["x-solution-model"] = solution_model

    return {
        "is_correct": is_correct,
        "band": band.value,
        "feedback": feedback,
        "solution_steps": solution_steps,
        "normalized_user_answer": stored_answer,
    }


@router.get("/score", response_model=ScoreResponse)
def score():
    with SessionLocal() as db:
        subs = store.list_submissions(db)
        texts = store.get_problem_texts(db, {s.session_id for s in subs})
        return aggregate_scores(subs, texts)
