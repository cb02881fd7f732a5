# routers/problems.py
from __future__ import annotations

import logging
import random as _rnd
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Response

import store
from db import SessionLocal
from deps.ai import get_ai_client
from generation import (
    GenerationError,
    fallback_problem,
    generate_hint,
    generate_problem,
)
from problems import (
    PROB_TYPES,
    format_problem_text,
    normalize_difficulty,
    normalize_prob_type,
    parse_problem_text,
)
from schemas.problems import GenerateRequest, GenerateResponse, HintRequest, HintResponse

logger = logging.getLogger("wordmath.problems")

router = APIRouter(tags=["problems"])

FALLBACK_DIFFICULTY = "MEDIUM"
FALLBACK_PROB_TYPE = "ADDITION"
FALLBACK_NOTE = "Returned fallback problem due to AI error."


@router.post("/generate", response_model=GenerateResponse, response_model_exclude_none=True)
def generate(
    response: Response,
    req: Optional[GenerateRequest] = None,
    ai: Any = Depends(get_ai_client),
):
    req = req or GenerateRequest()
    difficulty = normalize_difficulty(req.difficulty)
    prob_type = normalize_prob_type(req.probType) or _rnd.choice(PROB_TYPES)

    with SessionLocal() as db:
        last_text = store.get_last_problem_text(db)

    try:
        gen = generate_problem(ai, difficulty, prob_type, last_problem_text=last_text)
    except GenerationError as e:
        fb = fallback_problem()
        logger.warning(
            "[AI_GEN_FALLBACK] error=%s fallback_preview=%r", e, fb.problem_text[:120]
        )
        prefixed = format_problem_text(FALLBACK_DIFFICULTY, FALLBACK_PROB_TYPE, fb.problem_text)
        with SessionLocal() as db:
            session_id = store.create_session(db, prefixed, fb.final_answer)

        response.headers["x-generator"] = "fallback"
        response.headers["x-difficulty"] = FALLBACK_DIFFICULTY
        response.headers["x-probtype"] = FALLBACK_PROB_TYPE
        return {
            "sessionId": session_id,
            "difficulty": FALLBACK_DIFFICULTY,
            "probType": FALLBACK_PROB_TYPE,
            "problem": {"problem_text": prefixed, "final_answer": fb.final_answer},
            "note": FALLBACK_NOTE,
        }

    prefixed = format_problem_text(difficulty, prob_type, gen.problem.problem_text)
    with SessionLocal() as db:
        session_id = store.create_session(db, prefixed, gen.problem.final_answer)

    logger.info(
        "[AI_GEN_OK] session=%s topic=%s model=%s difficulty=%s prob_type=%s preview=%r",
        session_id,
        gen.topic,
        gen.model,
        difficulty,
        prob_type,
        gen.problem.problem_text[:120],
    )
    response.headers["x-generator"] = "ai"
    response.headers["x-topic"] = gen.topic
    response.headers["x-model"] = gen.model
    response.headers["x-difficulty"] = difficulty
    response.headers["x-probtype"] = prob_type
    return {
        "sessionId": session_id,
        "difficulty": difficulty,
        "probType": prob_type,
        "problem": {"problem_text": prefixed, "final_answer": gen.problem.final_answer},
    }


@router.post("/hint", response_model=HintResponse)
def hint(req: HintRequest, ai: Any = Depends(get_ai_client)):
    if not req.sessionId:
        raise HTTPException(status_code=400, detail="Missing sessionId")

    with SessionLocal() as db:
        session = store.get_session(db, req.sessionId)
        if session is None:
            raise HTTPException(status_code=404, detail="Session not found")
        meta = parse_problem_text(session.problem_text)

    try:
        result = generate_hint(ai, meta.text, meta.difficulty)
    except GenerationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"hint": result.text}
