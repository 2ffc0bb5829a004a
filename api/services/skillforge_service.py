"""
SkillForge learning progression engine.

Owns a learner's plans: creates them from generated roadmaps, gates weekly quizzes
and the final exam behind the unlock rules, records completed weeks and issues the
certificate. Content and storage are injected collaborators; the engine never
knows which backend it is talking to.

Mutations are two-phase: the change is applied to a copy (synced=False) and an
"applied" event goes out, then the field-level write runs. Success returns the
synced plan; failure raises PersistenceFailure carrying the unsynced copy.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from api.errors import (
    FinalLocked,
    GenerationFailure,
    InvalidTopic,
    ModuleLocked,
    PersistenceFailure,
    PlanNotFound,
    UnknownModule,
)
from api.schemas.assessment_schemas import AssessmentKind, AssessmentSession
from api.schemas.plan_schemas import (
    ISSUER_SIGNATURE,
    ConceptExplanation,
    Credential,
    CurriculumPlan,
    Module,
    NewPlan,
    PlanEventType,
    PlanSyncEvent,
)
from api.services.content_generator import ContentGenerator, FinalScope, WeeklyScope
from api.services.plan_store import PlanStore
from api.services.progression import is_final_unlocked, is_locked, next_required_module
from api.utils.common import new_credential_id
from api.utils.logger import configure_logging
from api.ws.progress_broadcast import ProgressBroadcaster

logger = configure_logging()


class SkillForgeService:
    """Learning progression engine for study plans."""

    def __init__(
        self,
        generator: ContentGenerator,
        store: PlanStore,
        events: Optional[ProgressBroadcaster] = None,
    ):
        self.generator = generator
        self.store = store
        self.events = events or ProgressBroadcaster()

    # ----- plans -----

    async def create_plan(self, owner: str, topic: str, difficulty_tier: str) -> CurriculumPlan:
        topic = (topic or "").strip()
        if not topic:
            raise InvalidTopic("Topic must not be empty")

        modules = await self.generator.generate_curriculum(topic, difficulty_tier)
        new_plan = NewPlan(owner=owner, topic=topic, difficulty_tier=difficulty_tier, modules=tuple(modules))
        plan_id = await self.store.create_plan_record(new_plan)
        logger.info("plan created plan_id=%s owner=%s topic=%r weeks=%s", plan_id, owner, topic, len(modules))
        return CurriculumPlan(id=plan_id, **new_plan.model_dump())

    async def list_plans(self, owner: str) -> list[CurriculumPlan]:
        return await self.store.load_plans(owner)

    async def get_plan(self, owner: str, plan_id: str) -> CurriculumPlan:
        plan = await self.store.load_plan(plan_id)
        if plan.owner != owner:
            raise PlanNotFound(plan_id)
        return plan

    async def list_credentials(self, owner: str) -> list[Credential]:
        """Certificate wallet: credentials of every certified plan, newest plan first."""
        return [p.credential for p in await self.store.load_plans(owner) if p.credential is not None]

    # ----- assessments -----

    async def start_assessment(
        self,
        plan: CurriculumPlan,
        kind: AssessmentKind,
        target_module_number: Optional[int] = None,
    ) -> AssessmentSession:
        if kind == AssessmentKind.WEEKLY:
            module = _require_module(plan, target_module_number)
            if is_locked(plan, module.number):
                raise ModuleLocked(module.number, next_required_module(plan))
            scope = WeeklyScope(topic=plan.topic, title=module.title, concepts=module.key_concepts)
        else:
            if not is_final_unlocked(plan):
                raise FinalLocked([n for n in plan.module_numbers if n not in plan.completed_module_numbers])
            target_module_number = None
            scope = FinalScope(topic=plan.topic, module_titles=tuple(m.title for m in sorted(plan.modules, key=lambda m: m.number)))

        questions = await self.generator.generate_assessment(scope)
        if not questions:
            raise GenerationFailure("Assessment came back without questions", {"kind": kind.value})
        logger.info(
            "assessment started plan_id=%s kind=%s module=%s questions=%s",
            plan.id, kind.value, target_module_number, len(questions),
        )
        return AssessmentSession(
            plan_id=plan.id,
            kind=kind,
            target_module_number=target_module_number,
            questions=tuple(questions),
        )

    async def explain_concept(self, plan: CurriculumPlan, module_number: int, concept: str) -> ConceptExplanation:
        module = _require_module(plan, module_number)
        if is_locked(plan, module.number):
            raise ModuleLocked(module.number, next_required_module(plan))
        return await self.generator.explain_concept(concept, plan.topic)

    # ----- progress -----

    async def complete_module(self, plan: CurriculumPlan, module_number: int) -> CurriculumPlan:
        """Mark a week as passed. Already passed (and synced) is a no-op."""
        _require_module(plan, module_number)
        if module_number in plan.completed_module_numbers and plan.synced:
            return plan

        applied = plan.model_copy(
            update={
                "completed_module_numbers": plan.completed_module_numbers | {module_number},
                "synced": False,
            }
        )
        await self._publish(PlanEventType.APPLIED, applied)
        try:
            await self.store.update_completion(plan.id, applied.completed_module_numbers)
        except PersistenceFailure as e:
            await self._sync_failed(applied, e)
            raise PersistenceFailure(e.message, plan=applied, details=e.details) from e

        synced = applied.model_copy(update={"synced": True})
        logger.info("module completed plan_id=%s module=%s", plan.id, module_number)
        await self._publish(PlanEventType.SYNCED, synced)
        return synced

    async def issue_credential(self, plan: CurriculumPlan, holder_name: str) -> CurriculumPlan:
        """
        Issue the completion certificate. The caller vouches for a passing final exam;
        exam sessions are never stored so there is nothing to re-check here.
        A credential already in the store wins over a freshly minted one, so a stale
        plan copy gets the certificate that was issued first.
        """
        if plan.credential is not None and plan.synced:
            return plan
        if not is_final_unlocked(plan):
            raise FinalLocked([n for n in plan.module_numbers if n not in plan.completed_module_numbers])

        credential = plan.credential or Credential(
            id=new_credential_id(),
            holder_name=(holder_name or "").strip() or plan.owner,
            course_name=plan.topic,
            difficulty_tier=plan.difficulty_tier,
            issue_date=date.today(),
            issuer_signature=ISSUER_SIGNATURE,
        )
        applied = plan.model_copy(update={"credential": credential, "synced": False})
        await self._publish(PlanEventType.APPLIED, applied)
        try:
            stored = await self.store.update_credential(plan.id, credential)
        except PersistenceFailure as e:
            await self._sync_failed(applied, e)
            raise PersistenceFailure(e.message, plan=applied, details=e.details) from e

        if stored.id != credential.id:
            logger.info("credential already issued plan_id=%s credential_id=%s", plan.id, stored.id)
            synced = applied.model_copy(update={"credential": stored, "synced": True})
        else:
            synced = applied.model_copy(update={"synced": True})
            logger.info("credential issued plan_id=%s credential_id=%s", plan.id, credential.id)
        await self._publish(PlanEventType.SYNCED, synced)
        return synced

    async def _sync_failed(self, plan: CurriculumPlan, error: PersistenceFailure) -> None:
        logger.warning("plan write failed plan_id=%s error=%s", plan.id, error.message)
        await self._publish(PlanEventType.SYNC_FAILED, plan, error=error.message)

    async def _publish(self, event_type: PlanEventType, plan: CurriculumPlan, error: Optional[str] = None) -> None:
        await self.events.publish(PlanSyncEvent(type=event_type, plan_id=plan.id, plan=plan, error=error))


def _require_module(plan: CurriculumPlan, module_number: Optional[int]) -> Module:
    module = plan.module(module_number) if module_number is not None else None
    if module is None:
        raise UnknownModule(module_number)
    return module
