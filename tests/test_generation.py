import json
import random

import pytest

from conftest import StubClient
from generation import (
    GenerationError,
    extract_json,
    fallback_feedback,
    fallback_problem,
    generate_feedback,
    generate_hint,
    generate_problem,
    generate_solution,
)
from grading import Band
from problems import FALLBACK_PROBLEMS

MODELS = ["model-a", "model-b", "model-c"]
GOOD = json.dumps({"problem_text": "Ali has 3 boxes of 4 pens. How many pens?", "final_answer": 12})


# --- extract_json -------------------------------------------------------------------


def test_extract_plain_json():
    r = extract_json('{"a": 1}')
    assert r.ok and r.value == {"a": 1}


def test_extract_fenced_json():
    r = extract_json('```json\n{"problem_text": "x", "final_answer": 2}\n```')
    assert r.ok and r.value["final_answer"] == 2


def test_extract_json_surrounded_by_prose():
    r = extract_json('Sure! Here you go: {"a": {"b": 2}} Hope this helps.')
    assert r.ok and r.value == {"a": {"b": 2}}


@pytest.mark.parametrize("raw", ["", "   ", "no json here", "{not: valid}", "[1, 2, 3]", None])
def test_extract_garbage(raw):
    r = extract_json(raw)
    assert not r.ok
    assert r.value is None and r.error


# --- problem generation -------------------------------------------------------------


def test_json_mode_success_uses_first_model():
    stub = StubClient({"model-a": [GOOD]})
    result = generate_problem(stub, "EASY", "MULTIPLICATION", models=MODELS)
    assert result.model == "model-a"
    assert result.problem.final_answer == 12
    assert stub.calls[0]["json_mode"] is True
    assert len(stub.calls) == 1


def test_plain_retry_stays_on_same_model():
    stub = StubClient({"model-a": [RuntimeError("responseMimeType unsupported"), GOOD]})
    result = generate_problem(stub, "EASY", "MULTIPLICATION", models=MODELS)
    assert result.model == "model-a"
    assert stub.models_called() == ["model-a", "model-a"]
    assert [c["json_mode"] for c in stub.calls] == [True, False]


def test_malformed_json_retries_same_model():
    bad = json.dumps({"problem_text": "x", "final_answer": "12"})
    stub = StubClient({"model-a": [bad, GOOD]})
    result = generate_problem(stub, "MEDIUM", "ADDITION", models=MODELS)
    assert result.model == "model-a"
    assert len(stub.calls) == 2


def test_provider_error_on_json_mode_moves_to_next_model():
    stub = StubClient({"model-a": [RuntimeError("HTTP 503"), GOOD], "model-b": [GOOD]})
    result = generate_problem(stub, "EASY", "ADDITION", models=MODELS)
    assert result.model == "model-b"
    assert stub.models_called() == ["model-a", "model-b"]
    assert stub.calls[1]["json_mode"] is True


def test_snake_case_mime_error_still_retries_plain():
    err = RuntimeError("Invalid JSON payload: unknown field response_mime_type")
    stub = StubClient({"model-a": [err, GOOD]})
    result = generate_problem(stub, "EASY", "ADDITION", models=MODELS)
    assert result.model == "model-a"
    assert [c["json_mode"] for c in stub.calls] == [True, False]


def test_failed_retry_moves_to_next_model():
    stub = StubClient({"model-a": ["nope", "still nope"], "model-b": [GOOD]})
    result = generate_problem(stub, "HARD", "DIVISION", models=MODELS)
    assert result.model == "model-b"
    assert stub.models_called() == ["model-a", "model-a", "model-b"]


def test_all_models_fail_raises():
    stub = StubClient()
    with pytest.raises(GenerationError):
        generate_problem(stub, "EASY", "ADDITION", models=MODELS)
    # a provider error skips the plain retry and moves to the next model
    assert stub.models_called() == MODELS


def test_missing_client_raises():
    with pytest.raises(GenerationError):
        generate_problem(None, "EASY", "ADDITION", models=MODELS)


def test_boolean_final_answer_rejected():
    bad = json.dumps({"problem_text": "x", "final_answer": True})
    stub = StubClient({"model-a": [bad, bad], "model-b": [GOOD]})
    assert generate_problem(stub, "EASY", "ADDITION", models=MODELS).model == "model-b"


def test_prompt_carries_nonce_and_type():
    stub = StubClient({"model-a": [GOOD]})
    generate_problem(stub, "EASY", "SUBTRACTION", models=MODELS)
    prompt = stub.calls[0]["prompt"]
    assert "nonce:" in prompt
    assert "SUBTRACTION" in prompt


def test_duplicate_of_last_problem_is_regenerated_on_new_topic():
    other = json.dumps({"problem_text": "A new problem.", "final_answer": 5})
    stub = StubClient({"model-a": [GOOD, other]})
    last = "EASY | MULTIPLICATION | Ali has 3 boxes of 4 pens. How many pens?"
    result = generate_problem(
        stub, "EASY", "MULTIPLICATION", last_problem_text=last, models=MODELS, rng=random.Random(1)
    )
    assert result.problem.problem_text == "A new problem."
    assert len(stub.calls) == 2
    first_topic = stub.calls[0]["prompt"].split("Topic focus: ")[1].splitlines()[0]
    second_topic = stub.calls[1]["prompt"].split("Topic focus: ")[1].splitlines()[0]
    assert first_topic != second_topic


def test_fallback_problem_is_predefined():
    fb = fallback_problem(random.Random(3))
    assert fb.final_answer in [p["final_answer"] for p in FALLBACK_PROBLEMS]


# --- text outputs -------------------------------------------------------------------


def test_feedback_skips_empty_output():
    stub = StubClient({"model-a": ["   "], "model-b": ["Great job!"]})
    result = generate_feedback(stub, "Problem", 12, 12, Band.CORRECT, models=MODELS)
    assert result.text == "Great job!"
    assert result.model == "model-b"


def test_feedback_all_fail_raises():
    with pytest.raises(GenerationError):
        generate_feedback(StubClient(), "Problem", 1, 2, Band.WRONG, models=MODELS)


def test_hint_prompt_never_contains_answer():
    stub = StubClient(default="Think about groups of 4.")
    generate_hint(stub, "Ali has 3 boxes of 4 pens.", "EASY", models=MODELS)
    assert "Correct answer" not in stub.calls[0]["prompt"]


def test_solution_uses_first_working_model():
    stub = StubClient({"model-a": [RuntimeError("boom")], "model-b": ["1) 3 x 4 = 12\nAnswer: 12"]})
    result = generate_solution(stub, "Problem", 12.0, models=MODELS)
    assert result.model == "model-b"
    assert result.text.endswith("Answer: 12")


def test_fallback_feedback_reveals_answer_unless_correct():
    assert "Final answer" not in fallback_feedback(Band.CORRECT, 4.8)
    assert "Final answer: 4.8" in fallback_feedback(Band.NEAR, 4.8)
    assert "Final answer: 34" in fallback_feedback(Band.WRONG, 34.0)


def test_hint_passes_generation_settings():
    seen = {}

    class Recorder(StubClient):
        def generate(self, model, prompt, **kwargs):
            seen.update(kwargs)
            return "Think in groups."

    generate_hint(Recorder(), "Problem", "EASY", models=MODELS)
    assert seen == {"temperature": 0.9, "max_output_tokens": 400}


def test_feedback_sends_no_generation_settings():
    seen = []

    class Recorder(StubClient):
        def generate(self, model, prompt, **kwargs):
            seen.append(kwargs)
            return "Well done."

    generate_feedback(Recorder(), "Problem", 1, 1, Band.CORRECT, models=MODELS)
    assert seen == [{}]
