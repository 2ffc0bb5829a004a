"""
API schemas package. Import from submodules or from this package.

Example:
    from api.schemas import CurriculumPlan, PlanResponse
    from api.schemas.plan_schemas import CurriculumPlan
"""

from api.schemas.plan_schemas import (
    ISSUER_SIGNATURE,
    ConceptExplanation,
    Credential,
    CurriculumPlan,
    Module,
    ModuleState,
    NewPlan,
    PlanEventType,
    PlanState,
    PlanSyncEvent,
)
from api.schemas.assessment_schemas import (
    AssessmentKind,
    AssessmentResult,
    AssessmentSession,
    Question,
    QuestionOutcome,
)
from api.schemas.generation_schemas import (
    GeneratedConceptExplanation,
    GeneratedQuestion,
    GeneratedQuestionSet,
    GeneratedRoadmap,
    RoadmapWeek,
)
from api.schemas.skillforge_schemas import (
    AbandonAssessmentResponse,
    AssessmentSessionResponse,
    ConceptExplanationResponse,
    CreatePlanRequest,
    CredentialListResponse,
    CredentialResponse,
    ExplainConceptRequest,
    Learner,
    ModuleStatusResponse,
    PlanListResponse,
    PlanResponse,
    QuestionView,
    RecordAnswerRequest,
    StartAssessmentRequest,
    SubmitAssessmentResponse,
)

__all__ = [
    # plan
    "ISSUER_SIGNATURE",
    "ConceptExplanation",
    "Credential",
    "CurriculumPlan",
    "Module",
    "ModuleState",
    "NewPlan",
    "PlanEventType",
    "PlanState",
    "PlanSyncEvent",
    # assessment
    "AssessmentKind",
    "AssessmentResult",
    "AssessmentSession",
    "Question",
    "QuestionOutcome",
    # generation
    "GeneratedConceptExplanation",
    "GeneratedQuestion",
    "GeneratedQuestionSet",
    "GeneratedRoadmap",
    "RoadmapWeek",
    # http
    "AbandonAssessmentResponse",
    "AssessmentSessionResponse",
    "ConceptExplanationResponse",
    "CreatePlanRequest",
    "CredentialListResponse",
    "CredentialResponse",
    "ExplainConceptRequest",
    "Learner",
    "ModuleStatusResponse",
    "PlanListResponse",
    "PlanResponse",
    "QuestionView",
    "RecordAnswerRequest",
    "StartAssessmentRequest",
    "SubmitAssessmentResponse",
]
