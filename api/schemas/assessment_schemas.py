"""
Assessment schemas: questions, transient quiz/exam sessions and scored results.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AssessmentKind(str, Enum):
    WEEKLY = "WEEKLY"
    FINAL = "FINAL"


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    question: str
    options: tuple[str, ...]
    correct_option_index: int
    explanation: str = ""


class AssessmentSession(BaseModel):
    """
    One in-memory run of a weekly quiz or the final exam.
    Never persisted; a retake is always a new session.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    plan_id: str
    kind: AssessmentKind
    target_module_number: Optional[int] = None
    questions: tuple[Question, ...]
    answers: dict[int, int] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_target(self) -> "AssessmentSession":
        if self.kind == AssessmentKind.WEEKLY and self.target_module_number is None:
            raise ValueError("weekly assessments need a target module")
        if self.kind == AssessmentKind.FINAL and self.target_module_number is not None:
            raise ValueError("the final assessment has no target module")
        return self

    @property
    def unanswered(self) -> list[int]:
        return [i for i in range(len(self.questions)) if i not in self.answers]


class QuestionOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    question: str
    correct: bool
    selected_option_index: int
    correct_option_index: int
    explanation: str = ""


class AssessmentResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    plan_id: str
    kind: AssessmentKind
    target_module_number: Optional[int] = None
    score: int
    total: int
    passed: bool
    per_question: tuple[QuestionOutcome, ...]
