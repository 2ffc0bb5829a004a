"""
Assessment answering and scoring, plus the registry of open sessions.

Pass thresholds are fixed: 70% for a weekly quiz, 80% for the final exam.
Scoring compares in whole percents so 7/10 and 16/20 pass exactly at the line.
"""

from __future__ import annotations

from typing import Dict, Optional

from api.errors import IncompleteSubmission, InvalidAnswer
from api.schemas.assessment_schemas import (
    AssessmentKind,
    AssessmentResult,
    AssessmentSession,
    QuestionOutcome,
)

PASS_PERCENT: dict[AssessmentKind, int] = {
    AssessmentKind.WEEKLY: 70,
    AssessmentKind.FINAL: 80,
}

WEEKLY_QUESTION_COUNT = 10
FINAL_QUESTION_COUNT = 20


def record_answer(session: AssessmentSession, question_index: int, option_index: int) -> AssessmentSession:
    """Return a copy of the session with the answer set; a later answer overwrites an earlier one."""
    if not 0 <= question_index < len(session.questions):
        raise InvalidAnswer(
            f"Question {question_index} does not exist (session has {len(session.questions)})",
            {"question_index": question_index},
        )
    options = session.questions[question_index].options
    if not 0 <= option_index < len(options):
        raise InvalidAnswer(
            f"Option {option_index} is out of range for question {question_index}",
            {"question_index": question_index, "option_index": option_index},
        )
    answers = dict(session.answers)
    answers[question_index] = option_index
    return session.model_copy(update={"answers": answers})


def passes(kind: AssessmentKind, score: int, total: int) -> bool:
    if total <= 0:
        return False
    return score * 100 >= PASS_PERCENT[kind] * total


def submit_assessment(session: AssessmentSession) -> AssessmentResult:
    """Score a fully answered session. Nothing is persisted here."""
    missing = session.unanswered
    if missing:
        raise IncompleteSubmission(missing)

    outcomes = []
    for idx, q in enumerate(session.questions):
        selected = session.answers[idx]
        outcomes.append(
            QuestionOutcome(
                question=q.question,
                correct=selected == q.correct_option_index,
                selected_option_index=selected,
                correct_option_index=q.correct_option_index,
                explanation=q.explanation,
            )
        )
    score = sum(1 for o in outcomes if o.correct)
    total = len(session.questions)
    return AssessmentResult(
        plan_id=session.plan_id,
        kind=session.kind,
        target_module_number=session.target_module_number,
        score=score,
        total=total,
        passed=passes(session.kind, score, total),
        per_question=tuple(outcomes),
    )


class AssessmentRegistry:
    """
    Open assessment sessions held for the HTTP layer, keyed by session id.

    A learner has at most one open session per plan; starting another one
    discards the previous (a retake is a new session).
    """

    def __init__(self):
        self._sessions: Dict[str, AssessmentSession] = {}
        self._owners: Dict[str, str] = {}

    def open(self, owner: str, session: AssessmentSession) -> AssessmentSession:
        for sid, existing in list(self._sessions.items()):
            if existing.plan_id == session.plan_id and self._owners.get(sid) == owner:
                self.discard(sid)
        self._sessions[session.id] = session
        self._owners[session.id] = owner
        return session

    def get(self, owner: str, session_id: str) -> Optional[AssessmentSession]:
        if self._owners.get(session_id) != owner:
            return None
        return self._sessions.get(session_id)

    def replace(self, session: AssessmentSession) -> AssessmentSession:
        if session.id in self._sessions:
            self._sessions[session.id] = session
        return session

    def discard(self, session_id: str) -> bool:
        self._owners.pop(session_id, None)
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)


assessment_registry = AssessmentRegistry()
