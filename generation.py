"""
Gemini orchestration for problems, feedback, hints and worked solutions.

Every public function takes the provider client explicitly. The client only
needs ``generate(model, prompt, *, json_mode=False, temperature=None,
max_output_tokens=None) -> str``; ``None`` means "not configured" and fails
straight away with GenerationError.

Candidate models are tried strictly in order. Problems use a JSON-mode call
followed by one plain-mode retry on the same model before moving on; text
outputs take one call per model.
"""

from __future__ import annotations

import json
import logging
import math
import random
import re
import secrets
from dataclasses import dataclass
from typing import Annotated, Any, Dict, Optional, Sequence, Union

from pydantic import (
    BaseModel,
    StrictFloat,
    StrictInt,
    StringConstraints,
    ValidationError,
    field_validator,
)

import config
import prompts
from grading import Band, format_number
from problems import FALLBACK_PROBLEMS, TOPICS, other_topics, parse_problem_text

logger = logging.getLogger("wordmath.generation")

PREVIEW_CHARS = 160
PROBLEM_TEMPERATURE = 0.9
PROBLEM_MAX_TOKENS = 512
HINT_MAX_TOKENS = 400


class GenerationError(RuntimeError):
    """No candidate model produced usable output."""


# --- JSON extraction ----------------------------------------------------------------

_FENCE_START_RE = re.compile(r"^\s*```(?:json)?\s*", re.IGNORECASE)
_FENCE_END_RE = re.compile(r"\s*```\s*$")


@dataclass(frozen=True)
class JsonExtraction:
    value: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _loads_object(s: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(s)
    except (json.JSONDecodeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def extract_json(raw: Optional[str]) -> JsonExtraction:
    """
    Best-effort JSON object extraction from model output.

    Code fences are stripped first; failing that, the text between the first
    "{" and the last "}" is parsed. Only JSON objects count as success.
    """
    if not raw or not raw.strip():
        return JsonExtraction(error="Empty model output")

    unfenced = _FENCE_END_RE.sub("", _FENCE_START_RE.sub("", raw)).strip()
    obj = _loads_object(unfenced)
    if obj is not None:
        return JsonExtraction(value=obj)

    start, end = raw.find("{"), raw.rfind("}")
    if start >= 0 and end > start:
        obj = _loads_object(raw[start : end + 1])
        if obj is not None:
            return JsonExtraction(value=obj)
        return JsonExtraction(error="Braced substring is not a JSON object")
    return JsonExtraction(error="No JSON object found in model output")


# --- Result shapes ------------------------------------------------------------------


class GeneratedProblem(BaseModel):
    problem_text: Annotated[
        str, StringConstraints(strict=True, strip_whitespace=True, min_length=1)
    ]
    final_answer: Union[StrictInt, StrictFloat]

    @field_validator("final_answer")
    @classmethod
    def _finite(cls, v: Union[int, float]) -> Union[int, float]:
        if not math.isfinite(v):
            raise ValueError("final_answer must be finite")
        return v


@dataclass(frozen=True)
class GenerationResult:
    problem: GeneratedProblem
    topic: str
    model: str


@dataclass(frozen=True)
class TextResult:
    text: str
    model: str


def _require_client(client: Any) -> None:
    if client is None:
        raise GenerationError("GEMINI_API_KEY is not configured")


def _preview(text: Any) -> str:
    return str(text)[:PREVIEW_CHARS]


def _parse_problem(raw: str) -> GeneratedProblem:
    extracted = extract_json(raw)
    if not extracted.ok:
        raise ValueError(extracted.error)
    try:
        return GeneratedProblem.model_validate(extracted.value)
    except ValidationError as e:
        raise ValueError(f"Model JSON malformed: {e.error_count()} error(s)") from e


# --- Problem generation -------------------------------------------------------------


def _json_mode_unsupported(err: Exception) -> bool:
    # e.g. "responseMimeType" or "response_mime_type" in the provider message
    return "responsemime" in str(err).lower().replace("_", "")


def _problem_with_model(
    client: Any, model: str, difficulty: str, prob_type: str, topic: str, nonce: str
) -> GeneratedProblem:
    """
    JSON-mode attempt, then one plain-mode retry on the same model when the
    output is unusable or the model rejects JSON mode. Any other provider
    error propagates so the caller moves on to the next candidate.
    """
    ctx = {"model": model, "difficulty": difficulty, "prob_type": prob_type, "topic": topic}
    try:
        raw = client.generate(
            model,
            prompts.problem_prompt(difficulty, prob_type, topic, nonce),
            json_mode=True,
            temperature=PROBLEM_TEMPERATURE,
            max_output_tokens=PROBLEM_MAX_TOKENS,
        )
    except Exception as e:
        if not _json_mode_unsupported(e):
            raise
        logger.info("[AI_GEN_JSON_MODE_UNSUPPORTED] model=%s error=%s", model, e)
    else:
        logger.info("[AI_GEN_RAW] %s preview=%r", ctx, _preview(raw))
        try:
            problem = _parse_problem(raw)
            logger.info("[AI_MODEL_OK] model=%s json_mode=True", model)
            return problem
        except ValueError as e:
            logger.info("[AI_GEN_JSON_MODE_FAIL] model=%s error=%s", model, e)

    # same model, simpler prompt, no JSON mode; errors here go to the caller
    raw = client.generate(
        model,
        prompts.problem_prompt_simple(difficulty, prob_type, topic),
        json_mode=False,
        temperature=PROBLEM_TEMPERATURE,
        max_output_tokens=PROBLEM_MAX_TOKENS,
    )
    logger.info("[AI_GEN_RAW_RETRY] %s preview=%r", ctx, _preview(raw))
    problem = _parse_problem(raw)
    logger.info("[AI_MODEL_OK_RETRY] model=%s json_mode=False", model)
    return problem


def _generate_once(
    client: Any, difficulty: str, prob_type: str, topic: str, models: Sequence[str]
) -> GenerationResult:
    nonce = secrets.token_hex(6)
    last_err: Optional[Exception] = None
    for model in models:
        try:
            problem = _problem_with_model(client, model, difficulty, prob_type, topic, nonce)
            return GenerationResult(problem=problem, topic=topic, model=model)
        except Exception as e:
            last_err = e
            logger.warning("[AI_MODEL_FAIL] model=%s error=%s", model, e)
    raise GenerationError(f"All Gemini model candidates failed. Last error: {last_err}")


def generate_problem(
    client: Any,
    difficulty: str,
    prob_type: str,
    *,
    last_problem_text: Optional[str] = None,
    models: Optional[Sequence[str]] = None,
    rng: Optional[random.Random] = None,
) -> GenerationResult:
    """
    Generate one word problem, retrying once on a different topic when the
    result repeats the most recently stored problem word for word.
    """
    _require_client(client)
    models = list(models or config.model_candidates())
    rng = rng or random.Random()

    topic = rng.choice(TOPICS)
    result = _generate_once(client, difficulty, prob_type, topic, models)

    if last_problem_text:
        previous = parse_problem_text(last_problem_text).text.strip()
        if result.problem.problem_text.strip() == previous:
            logger.info(
                "[AI_GEN_DEDUPE_RETRY] reason=same_as_last topic=%s model=%s", topic, result.model
            )
            topic = rng.choice(other_topics(topic))
            result = _generate_once(client, difficulty, prob_type, topic, models)
    return result


def fallback_problem(rng: Optional[random.Random] = None) -> GeneratedProblem:
    fb = (rng or random.Random()).choice(FALLBACK_PROBLEMS)
    return GeneratedProblem(**fb)


# --- Text outputs -------------------------------------------------------------------


def _text_from_candidates(
    client: Any,
    prompt: str,
    event: str,
    models: Sequence[str],
    **gen_kwargs: Any,
) -> TextResult:
    _require_client(client)
    last_err: Optional[Exception] = None
    for model in models:
        try:
            text = str(client.generate(model, prompt, **gen_kwargs) or "").strip()
            if not text:
                raise ValueError(f"Empty {event.lower()} text")
            logger.info("[AI_%s_OK] model=%s preview=%r", event, model, _preview(text))
            return TextResult(text=text, model=model)
        except Exception as e:
            last_err = e
            logger.warning("[AI_%s_FAIL] model=%s error=%s", event, model, e)
    raise GenerationError(f"All {event.lower()} models failed. Last error: {last_err}")


def generate_feedback(
    client: Any,
    problem_text: str,
    user_answer: float,
    correct_answer: float,
    band: Band,
    *,
    models: Optional[Sequence[str]] = None,
) -> TextResult:
    prompt = prompts.feedback_prompt(problem_text, user_answer, correct_answer, Band(band).value)
    models = list(models or config.model_candidates())
    return _text_from_candidates(client, prompt, "FEEDBACK", models)


def generate_solution(
    client: Any,
    problem_text: str,
    correct_answer: float,
    *,
    models: Optional[Sequence[str]] = None,
) -> TextResult:
    prompt = prompts.solution_prompt(problem_text, correct_answer)
    models = list(models or config.model_candidates())
    return _text_from_candidates(client, prompt, "SOLUTION", models)


def generate_hint(
    client: Any,
    problem_text: str,
    difficulty: str,
    *,
    models: Optional[Sequence[str]] = None,
) -> TextResult:
    prompt = prompts.hint_prompt(problem_text, difficulty)
    return _text_from_candidates(
        client,
        prompt,
        "HINT",
        list(models or config.model_candidates()),
        temperature=PROBLEM_TEMPERATURE,
        max_output_tokens=HINT_MAX_TOKENS,
    )


# --- Canned fallbacks ---------------------------------------------------------------


def fallback_feedback(band: Band, correct_answer: float) -> str:
    band = Band(band)
    if band is Band.CORRECT:
        return (
            "Great job! ✅ Your answer is correct. A clean way to solve it:\n"
            "1) Identify what's asked\n"
            "2) Set up the operations in order\n"
            "3) Compute carefully and check units"
        )
    if band is Band.NEAR:
        return (
            "So close! You're nearly there.\n"
            "• Recheck your operation order and place value/units\n"
            "• Confirm any rounding only at the end\n"
            "• Try recomputing step by step\n"
            f"Final answer: {format_number(correct_answer)}"
        )
    return (
        "Nice try! Let's break it down:\n"
        "• Identify givens and what's unknown\n"
        "• Choose the right operations and compute step by step\n"
        "• Check units and place value\n"
        f"Final answer: {format_number(correct_answer)}"
    )


def fallback_solution(correct_answer: float) -> str:
    return (
        "1) Identify what's given and what's being asked.\n"
        "2) Choose the correct operations in order.\n"
        "3) Compute carefully and keep units consistent.\n"
        f"Answer: {format_number(correct_answer)}"
    )