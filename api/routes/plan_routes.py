"""
SkillForge endpoints: study plans, weekly quizzes, final exam, certificates.
"""

from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import Session

from api.bootstrap import build_content_generator, build_plan_store
from api.config import get_db
from api.errors import PlanNotFound
from api.schemas.assessment_schemas import AssessmentKind, AssessmentSession
from api.schemas.plan_schemas import Credential, CurriculumPlan, PlanSyncEvent
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
from api.services.assessment import AssessmentRegistry, assessment_registry, record_answer, submit_assessment
from api.services.content_generator import ContentGenerator
from api.services.progression import (
    is_final_unlocked,
    module_state,
    next_required_module,
    plan_state,
    progress_percentage,
)
from api.services.skillforge_service import SkillForgeService
from api.utils.auth import get_current_learner, get_learner_from_websocket
from api.utils.common import iso_format
from api.utils.logger import configure_logging
from api.ws.progress_broadcast import progress_broadcaster

logger = configure_logging()

plan_routes = APIRouter()


@lru_cache
def get_content_generator() -> ContentGenerator:
    return build_content_generator()


def get_assessment_registry() -> AssessmentRegistry:
    return assessment_registry


async def get_skillforge_service(
    db: Session = Depends(get_db),
    generator: ContentGenerator = Depends(get_content_generator),
) -> SkillForgeService:
    store = await build_plan_store(db)
    return SkillForgeService(generator, store, events=progress_broadcaster)


def _credential_response(c: Credential) -> CredentialResponse:
    return CredentialResponse(
        id=c.id,
        holder_name=c.holder_name,
        course_name=c.course_name,
        difficulty=c.difficulty_tier,
        issue_date=c.display_issue_date,
        issuer_signature=c.issuer_signature,
    )


def _plan_response(plan: CurriculumPlan) -> PlanResponse:
    return PlanResponse(
        id=plan.id,
        topic=plan.topic,
        difficulty=plan.difficulty_tier,
        created_at=iso_format(plan.created_at),
        state=plan_state(plan),
        completed_weeks=sorted(plan.completed_module_numbers),
        next_required_week=next_required_module(plan),
        final_unlocked=is_final_unlocked(plan),
        progress_percentage=progress_percentage(plan),
        modules=[
            ModuleStatusResponse(
                number=m.number,
                title=m.title,
                description=m.description,
                key_concepts=list(m.key_concepts),
                state=module_state(plan, m.number),
            )
            for m in sorted(plan.modules, key=lambda m: m.number)
        ],
        credential=_credential_response(plan.credential) if plan.credential else None,
    )


def _session_response(session: AssessmentSession) -> AssessmentSessionResponse:
    return AssessmentSessionResponse(
        session_id=session.id,
        plan_id=session.plan_id,
        kind=session.kind,
        module_number=session.target_module_number,
        questions=[
            QuestionView(index=i, question=q.question, options=list(q.options))
            for i, q in enumerate(session.questions)
        ],
        answers=dict(session.answers),
        unanswered=session.unanswered,
    )


def _open_session(registry: AssessmentRegistry, learner: Learner, session_id: str) -> AssessmentSession:
    session = registry.get(learner.id, session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Assessment session not found")
    return session


# ----- Plans -----

@plan_routes.get("/plans", response_model=PlanListResponse)
async def list_plans(
    learner: Learner = Depends(get_current_learner),
    service: SkillForgeService = Depends(get_skillforge_service),
) -> PlanListResponse:
    """List the learner's study plans, newest first."""
    plans = await service.list_plans(learner.id)
    return PlanListResponse(plans=[_plan_response(p) for p in plans])


@plan_routes.post("/plans", response_model=PlanResponse)
async def create_plan(
    req: CreatePlanRequest,
    learner: Learner = Depends(get_current_learner),
    service: SkillForgeService = Depends(get_skillforge_service),
) -> PlanResponse:
    """Generate a roadmap for the topic and save it as a new plan."""
    plan = await service.create_plan(learner.id, req.topic, req.difficulty)
    return _plan_response(plan)


@plan_routes.get("/plans/{plan_id}", response_model=PlanResponse)
async def get_plan(
    plan_id: str,
    learner: Learner = Depends(get_current_learner),
    service: SkillForgeService = Depends(get_skillforge_service),
) -> PlanResponse:
    plan = await service.get_plan(learner.id, plan_id)
    return _plan_response(plan)


@plan_routes.post("/plans/{plan_id}/concepts/explain", response_model=ConceptExplanationResponse)
async def explain_concept(
    plan_id: str,
    req: ExplainConceptRequest,
    learner: Learner = Depends(get_current_learner),
    service: SkillForgeService = Depends(get_skillforge_service),
) -> ConceptExplanationResponse:
    plan = await service.get_plan(learner.id, plan_id)
    explanation = await service.explain_concept(plan, req.module_number, req.concept)
    return ConceptExplanationResponse(**explanation.model_dump())


@plan_routes.get("/credentials", response_model=CredentialListResponse)
async def list_credentials(
    learner: Learner = Depends(get_current_learner),
    service: SkillForgeService = Depends(get_skillforge_service),
) -> CredentialListResponse:
    """Certificate wallet."""
    credentials = await service.list_credentials(learner.id)
    return CredentialListResponse(credentials=[_credential_response(c) for c in credentials])


# ----- Assessments -----

@plan_routes.post("/plans/{plan_id}/assessments", response_model=AssessmentSessionResponse)
async def start_assessment(
    plan_id: str,
    req: StartAssessmentRequest,
    learner: Learner = Depends(get_current_learner),
    service: SkillForgeService = Depends(get_skillforge_service),
    registry: AssessmentRegistry = Depends(get_assessment_registry),
) -> AssessmentSessionResponse:
    """Open a weekly quiz (module_number required) or the final exam. Replaces any open session for the plan."""
    plan = await service.get_plan(learner.id, plan_id)
    session = await service.start_assessment(plan, req.kind, req.module_number)
    registry.open(learner.id, session)
    return _session_response(session)


@plan_routes.put("/assessments/{session_id}/answers", response_model=AssessmentSessionResponse)
async def answer_question(
    session_id: str,
    req: RecordAnswerRequest,
    learner: Learner = Depends(get_current_learner),
    registry: AssessmentRegistry = Depends(get_assessment_registry),
) -> AssessmentSessionResponse:
    session = _open_session(registry, learner, session_id)
    session = registry.replace(record_answer(session, req.question_index, req.option_index))
    return _session_response(session)


@plan_routes.post("/assessments/{session_id}/submit", response_model=SubmitAssessmentResponse)
async def submit(
    session_id: str,
    learner: Learner = Depends(get_current_learner),
    service: SkillForgeService = Depends(get_skillforge_service),
    registry: AssessmentRegistry = Depends(get_assessment_registry),
) -> SubmitAssessmentResponse:
    """
    Score the session. A pass finishes the work it gates: a weekly quiz completes
    its week, the final exam issues the certificate to the learner.

    A passed session stays open until that write is stored, so submitting it
    again after a 503 retries the write instead of forcing a retake.
    """
    session = _open_session(registry, learner, session_id)
    result = submit_assessment(session)
    logger.info(
        "assessment submitted plan_id=%s kind=%s score=%s/%s passed=%s",
        session.plan_id, session.kind.value, result.score, result.total, result.passed,
    )
    if not result.passed:
        registry.discard(session_id)
        return SubmitAssessmentResponse(result=result)

    plan = await service.get_plan(learner.id, session.plan_id)
    if session.kind == AssessmentKind.WEEKLY:
        plan = await service.complete_module(plan, session.target_module_number)
    else:
        plan = await service.issue_credential(plan, learner.name)
    registry.discard(session_id)
    return SubmitAssessmentResponse(result=result, plan=_plan_response(plan))


@plan_routes.delete("/assessments/{session_id}", response_model=AbandonAssessmentResponse)
async def abandon(
    session_id: str,
    learner: Learner = Depends(get_current_learner),
    registry: AssessmentRegistry = Depends(get_assessment_registry),
) -> AbandonAssessmentResponse:
    _open_session(registry, learner, session_id)
    return AbandonAssessmentResponse(session_id=session_id, abandoned=registry.discard(session_id))


# ----- Progress feed -----

@plan_routes.websocket("/plans/{plan_id}/ws")
async def plan_events(websocket: WebSocket, plan_id: str, db: Session = Depends(get_db)) -> None:
    """Push applied / synced / sync_failed events for one plan."""
    learner_id = get_learner_from_websocket(websocket)
    if learner_id is None:
        await websocket.close(code=4401)
        return
    store = await build_plan_store(db)
    try:
        plan = await store.load_plan(plan_id)
    except PlanNotFound:
        plan = None
    if plan is None or plan.owner != learner_id:
        await websocket.close(code=4404)
        return

    await websocket.accept()

    async def forward(event: PlanSyncEvent) -> None:
        await websocket.send_json(event.model_dump(mode="json"))

    progress_broadcaster.subscribe(plan_id, forward)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("plan feed disconnected plan_id=%s", plan_id)
    finally:
        progress_broadcaster.unsubscribe(plan_id, forward)
