# Boundary to the relational store. Routes never touch the ORM directly.
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import ProblemSession, Submission


class StoreError(RuntimeError):
    """Any failure while talking to the database."""


def create_session(db: Session, problem_text: str, correct_answer: float) -> str:
    try:
        row = ProblemSession(problem_text=problem_text, correct_answer=float(correct_answer))
        db.add(row)
        db.commit()
        db.refresh(row)
        return row.id
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"create_session failed: {e}") from e


def get_session(db: Session, session_id: str) -> Optional[ProblemSession]:
    try:
        return db.get(ProblemSession, session_id)
    except SQLAlchemyError as e:
        raise StoreError(f"get_session failed: {e}") from e


def create_submission(
    db: Session,
    session_id: str,
    user_answer: float,
    is_correct: bool,
    feedback_text: str,
) -> int:
    try:
        row = Submission(
            session_id=session_id,
            user_answer=user_answer,
            is_correct=is_correct,
            feedback_text=feedback_text,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row.id
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"create_submission failed: {e}") from e


def get_last_problem_text(db: Session) -> Optional[str]:
    try:
        stmt = (
            select(ProblemSession.problem_text)
            .order_by(ProblemSession.created_at.desc())
            .limit(1)
        )
        return db.execute(stmt).scalar_one_or_none()
    except SQLAlchemyError as e:
        raise StoreError(f"get_last_problem_text failed: {e}") from e


# --- Bulk reads (score views) ------------------------------------------------------


def list_submissions(db: Session) -> List[Submission]:
    """All submissions, oldest first (ties broken by insertion id)."""
    try:
        stmt = select(Submission).order_by(Submission.created_at.asc(), Submission.id.asc())
        return list(db.execute(stmt).scalars())
    except SQLAlchemyError as e:
        raise StoreError(f"list_submissions failed: {e}") from e


def get_problem_texts(db: Session, session_ids: Iterable[str]) -> Dict[str, str]:
    ids = list(session_ids)
    if not ids:
        return {}
    try:
        stmt = select(ProblemSession.id, ProblemSession.problem_text).where(
            ProblemSession.id.in_(ids)
        )
        return {sid: text for sid, text in db.execute(stmt)}
    except SQLAlchemyError as e:
        raise StoreError(f"get_problem_texts failed: {e}") from e
