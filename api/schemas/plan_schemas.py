"""
Study plan schemas: curriculum plan, weekly module, credential, derived progression states.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ISSUER_SIGNATURE = "Mind is Gear Training"


class Module(BaseModel):
    """One weekly unit of a roadmap. `number` is the order key (the week)."""
    model_config = ConfigDict(frozen=True)

    number: int
    title: str
    description: str = ""
    key_concepts: tuple[str, ...] = ()


class Credential(BaseModel):
    """Proof of course completion. Immutable once issued."""
    model_config = ConfigDict(frozen=True)

    id: str
    holder_name: str
    course_name: str
    difficulty_tier: str
    issue_date: date
    issuer_signature: str = ISSUER_SIGNATURE

    @property
    def display_issue_date(self) -> str:
        return f"{self.issue_date:%B} {self.issue_date.day}, {self.issue_date.year}"


def _check_unique_numbers(modules: tuple[Module, ...]) -> tuple[Module, ...]:
    numbers = [m.number for m in modules]
    if len(numbers) != len(set(numbers)):
        raise ValueError(f"module numbers must be unique, got {numbers}")
    return modules


class NewPlan(BaseModel):
    """A generated plan that has not been given an id by the store yet."""
    model_config = ConfigDict(frozen=True)

    owner: str
    topic: str
    difficulty_tier: str
    modules: tuple[Module, ...]
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("modules")
    @classmethod
    def check_unique_numbers(cls, modules: tuple[Module, ...]) -> tuple[Module, ...]:
        return _check_unique_numbers(modules)


class CurriculumPlan(BaseModel):
    """
    One learner's enrollment in one generated curriculum.

    completed_module_numbers only grows. `synced` is False while a mutation has been
    applied in memory but not yet confirmed by the plan store; it is never persisted.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    owner: str
    topic: str
    difficulty_tier: str
    modules: tuple[Module, ...]
    completed_module_numbers: frozenset[int] = frozenset()
    credential: Optional[Credential] = None
    created_at: datetime
    synced: bool = Field(default=True, exclude=True)

    @field_validator("modules")
    @classmethod
    def check_unique_numbers(cls, modules: tuple[Module, ...]) -> tuple[Module, ...]:
        return _check_unique_numbers(modules)

    @model_validator(mode="after")
    def check_progress(self) -> "CurriculumPlan":
        numbers = self.module_numbers
        stray = self.completed_module_numbers - set(numbers)
        if stray:
            raise ValueError(f"completed modules {sorted(stray)} are not in the plan")
        if self.credential is not None and (not numbers or self.completed_module_numbers != set(numbers)):
            raise ValueError("a credential requires every module to be completed")
        return self

    @property
    def module_numbers(self) -> list[int]:
        """Module numbers in unlock order."""
        return sorted(m.number for m in self.modules)

    def module(self, number: int) -> Optional[Module]:
        for m in self.modules:
            if m.number == number:
                return m
        return None


class ModuleState(str, Enum):
    LOCKED = "locked"
    AVAILABLE = "available"
    PASSED = "passed"


class PlanState(str, Enum):
    IN_PROGRESS = "in_progress"
    FINAL_AVAILABLE = "final_available"
    CERTIFIED = "certified"


class ConceptExplanation(BaseModel):
    concept: str
    definition: str
    example: str
    practical_tip: str


class PlanEventType(str, Enum):
    APPLIED = "applied"  # changed in memory, write in flight
    SYNCED = "synced"
    SYNC_FAILED = "sync_failed"


class PlanSyncEvent(BaseModel):
    """Published for every plan mutation so the UI can tell 'applied' from 'durable'."""
    type: PlanEventType
    plan_id: str
    plan: CurriculumPlan
    error: Optional[str] = None
