# Prompt builders for the tutor. Wording is tuned for Primary 5 (Singapore syllabus).
from __future__ import annotations

from typing import Dict

from grading import format_number


_DIFFICULTY_GUIDANCE: Dict[str, str] = {
    "EASY": (
        "- 1 step (or very simple 2 steps), small integers.\n"
        "- No tricky unit conversions. Avoid complex fractions/ratios.\n"
        "- Suitable for quick mental/short working."
    ),
    "MEDIUM": (
        "- 2 steps typical P5 difficulty.\n"
        "- Allow fractions/decimals or percentage with one conversion.\n"
        "- Single numeric final answer; clear, unambiguous wording."
    ),
    "HARD": (
        "- 2-3 steps with careful reasoning.\n"
        "- Include ratios/percentages/fractions/decimals interplay or a subtle trap "
        "(unit/rounding), but keep a single numeric final answer.\n"
        "- Numbers still reasonable for P5; avoid huge or unrealistic values."
    ),
}


def difficulty_guidance(difficulty: str) -> str:
    return _DIFFICULTY_GUIDANCE.get(difficulty, _DIFFICULTY_GUIDANCE["MEDIUM"])


def prob_type_guidance(prob_type: str) -> str:
    return f"The main operation to solve the problem must be {prob_type.lower()}."


def problem_prompt(difficulty: str, prob_type: str, topic: str, nonce: str) -> str:
    return f"""
You are generating ONE Primary 5 (Singapore 2021 syllabus) math word problem.

Difficulty: {difficulty}
Problem type: {prob_type}. {prob_type_guidance(prob_type)}
Guidance:
{difficulty_guidance(difficulty)}

Requirements:
- Topic focus: {topic}
- Use SGD when money appears.
- Keep numbers reasonable.
- Clear, unambiguous wording with a single numerical final answer.
- The core computation to reach the final answer must use {prob_type.lower()}.
- Return ONLY valid JSON with exactly two keys and no extra text, no code fences:
{{"problem_text": "string", "final_answer": number}}

Extra:
- Avoid repeating stock problems.
- Make it novel w.r.t. nonce: {nonce}.
- If decimals occur, round to 2 d.p. in the final answer.
""".strip()


def problem_prompt_simple(difficulty: str, prob_type: str, topic: str) -> str:
    return f"""
Return ONLY valid JSON (no code fences, no extra text) with exactly these keys:
{{"problem_text": "string", "final_answer": number}}
Primary 5 (Singapore 2021 syllabus) word problem.
Difficulty: {difficulty}.
Problem type: {prob_type}. {prob_type_guidance(prob_type)}
Guidance:
{difficulty_guidance(difficulty)}
Topic: {topic}.
Use SGD when money appears.
Ensure a single numerical final answer.
""".strip()


def feedback_prompt(problem_text: str, user_answer: float, correct_answer: float, band: str) -> str:
    return f"""
You are a friendly Primary 5 math tutor (Singapore syllabus).
Write concise, encouraging feedback for the student based on the problem and their answer.

Style:
- Warm, supportive, and clear. Keep it 3-6 short lines.
- Use simple language; avoid heavy jargon.
- Use SGD when money appears.
- Use light emoji only if appropriate (1 max).

Rules by band:
- If "correct": Start with praise (e.g., "Great job!"). Then give a short outline of a clean method (2-3 steps).
- If "near": Say they're close. Provide 2-4 hints and actual mathematical steps that help fix the mistake (rounding, units, operation order, fraction/decimal slip). Reveal the correct answer on the last line.
- If "wrong": Stay kind. Give 2-4 simple and actual steps to solve it. Reveal the correct answer on the last line.

Problem:
{problem_text}

Student's (numeric) answer used for checking: {format_number(user_answer)}
Correct answer: {format_number(correct_answer)}
Outcome band: {band}

Now produce the feedback only (no preface, no headings, no extra markup).
""".strip()


def solution_prompt(problem_text: str, correct_answer: float) -> str:
    return f"""
You are a Primary 5 math tutor (Singapore syllabus).
Provide a short, clear, step-by-step solution to the following problem.
Keep to 3-6 numbered steps. Use simple language. Use SGD if money appears.
End with "Answer: <value>" on the last line (use the numeric answer provided).

Problem:
{problem_text}

Correct answer (numeric): {format_number(correct_answer)}

Output format (NO headings, NO extra commentary):
1) ...
2) ...
3) ...
Answer: {format_number(correct_answer)}
""".strip()


def hint_prompt(problem_text: str, difficulty: str) -> str:
    # Never include the correct answer in this prompt.
    return f"""
You are a friendly Primary 5 math tutor (Singapore syllabus).
Give 2-4 short hints that guide the student on HOW to solve the problem.
DO NOT reveal the final numeric answer.
Prefer steps, reminders (units, fractions/decimals, order of operations), and a gentle nudge.

Difficulty: {difficulty}
Problem:
{problem_text}

Return only the hints in short lines or bullet points (no extra preface).
""".strip()
