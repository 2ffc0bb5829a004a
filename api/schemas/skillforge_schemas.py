"""
SkillForge HTTP request/response schemas.
"""

from typing import Optional

from pydantic import BaseModel, Field

from api.schemas.assessment_schemas import AssessmentKind, AssessmentResult
from api.schemas.plan_schemas import ModuleState, PlanState


class Learner(BaseModel):
    id: str
    name: str


class CreatePlanRequest(BaseModel):
    topic: str
    difficulty: str = "Beginner"


class ModuleStatusResponse(BaseModel):
    number: int
    title: str
    description: str
    key_concepts: list[str]
    state: ModuleState


class CredentialResponse(BaseModel):
    id: str
    holder_name: str
    course_name: str
    difficulty: str
    issue_date: str  # e.g. "October 19, 2026"
    issuer_signature: str


class PlanResponse(BaseModel):
    id: str
    topic: str
    difficulty: str
    created_at: str
    state: PlanState
    completed_weeks: list[int]
    next_required_week: Optional[int] = None
    final_unlocked: bool
    progress_percentage: int
    modules: list[ModuleStatusResponse]
    credential: Optional[CredentialResponse] = None


class PlanListResponse(BaseModel):
    plans: list[PlanResponse]


class CredentialListResponse(BaseModel):
    credentials: list[CredentialResponse]


class StartAssessmentRequest(BaseModel):
    kind: AssessmentKind
    module_number: Optional[int] = None


class QuestionView(BaseModel):
    """A question as shown while the assessment is open (no answer key)."""
    index: int
    question: str
    options: list[str]


class AssessmentSessionResponse(BaseModel):
    session_id: str
    plan_id: str
    kind: AssessmentKind
    module_number: Optional[int] = None
    questions: list[QuestionView]
    answers: dict[int, int] = Field(default_factory=dict)
    unanswered: list[int] = Field(default_factory=list)


class RecordAnswerRequest(BaseModel):
    question_index: int
    option_index: int


class SubmitAssessmentResponse(BaseModel):
    result: AssessmentResult
    plan: Optional[PlanResponse] = None  # updated plan when the pass finished a week or the course


class AbandonAssessmentResponse(BaseModel):
    session_id: str
    abandoned: bool


class ExplainConceptRequest(BaseModel):
    module_number: int
    concept: str


class ConceptExplanationResponse(BaseModel):
    concept: str
    definition: str
    example: str
    practical_tip: str
