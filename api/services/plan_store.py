"""
Plan persistence.

PlanStore is the system of record for study plans. Writes are field-level:
update_completion only touches the completed weeks, update_credential only the
certificate, so a completion write never drops a credential written alongside
it (and vice versa). The credential is write-once: update_credential keeps an
already stored credential and returns it instead of the one passed in.
Two writers completing different weeks from stale copies still race on the
completion field; the last write wins.

Implementations:
- SqlPlanStore: SQLAlchemy session over study_plans / certificates.
- LocalPlanStore: JSON file (or in-memory) fallback for when the database is unreachable.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional
from uuid import uuid4

from sqlalchemy import select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession
from starlette.concurrency import run_in_threadpool

from api.errors import PersistenceFailure, PlanNotFound
from api.models.models import Certificate, StudyPlan
from api.schemas.plan_schemas import Credential, CurriculumPlan, Module, NewPlan
from api.utils.logger import configure_logging

logger = configure_logging()


class PlanStore(ABC):
    """Contract for durable plan storage. Every method may raise PersistenceFailure."""

    @abstractmethod
    async def create_plan_record(self, plan: NewPlan) -> str:
        raise NotImplementedError

    @abstractmethod
    async def update_completion(self, plan_id: str, completed_module_numbers: Iterable[int]) -> None:
        raise NotImplementedError

    @abstractmethod
    async def update_credential(self, plan_id: str, credential: Credential) -> Credential:
        """Set the credential unless one is stored already; return the stored one."""
        raise NotImplementedError

    @abstractmethod
    async def load_plans(self, owner: str) -> list[CurriculumPlan]:
        raise NotImplementedError

    @abstractmethod
    async def load_plan(self, plan_id: str) -> CurriculumPlan:
        raise NotImplementedError

    async def check_health(self) -> bool:
        return True


def _modules_to_json(modules: Iterable[Module]) -> list[dict]:
    return [m.model_dump(mode="json") for m in modules]


class SqlPlanStore(PlanStore):
    """
    SQLAlchemy-backed store. Queries run as plain sync methods; the async
    contract hands them to the threadpool so the event loop never blocks on the database.
    """

    def __init__(self, db: DBSession):
        self.db = db

    def _fail(self, action: str, e: SQLAlchemyError) -> PersistenceFailure:
        self.db.rollback()
        logger.error("plan store %s failed: %s", action, e)
        return PersistenceFailure(f"Could not {action}", details={"error": str(e)})

    @staticmethod
    def _to_plan(row: StudyPlan) -> CurriculumPlan:
        return CurriculumPlan(
            id=row.id,
            owner=row.owner,
            topic=row.topic,
            difficulty_tier=row.difficulty,
            modules=tuple(Module.model_validate(m) for m in row.roadmap or []),
            completed_module_numbers=frozenset(row.completed_weeks or []),
            credential=Credential.model_validate(row.certificate) if row.certificate else None,
            created_at=row.created_at,
        )

    # ----- sync database work -----

    def ping(self) -> bool:
        try:
            self.db.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("plan database health check failed: %s", e)
            return False

    def insert_plan(self, plan: NewPlan) -> str:
        plan_id = str(uuid4())
        try:
            self.db.add(
                StudyPlan(
                    id=plan_id,
                    owner=plan.owner,
                    topic=plan.topic,
                    difficulty=plan.difficulty_tier,
                    roadmap=_modules_to_json(plan.modules),
                    completed_weeks=[],
                    certificate=None,
                    created_at=plan.created_at,
                    updated_at=datetime.utcnow(),
                )
            )
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("create plan", e) from e
        return plan_id

    def write_completion(self, plan_id: str, completed_module_numbers: list[int]) -> None:
        try:
            result = self.db.execute(
                update(StudyPlan)
                .where(StudyPlan.id == plan_id)
                .values(completed_weeks=completed_module_numbers, updated_at=datetime.utcnow())
            )
            if result.rowcount == 0:
                self.db.rollback()
                raise PlanNotFound(plan_id)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("update completion", e) from e

    def write_credential(self, plan_id: str, credential: Credential) -> Credential:
        try:
            row = self.db.execute(
                select(StudyPlan.owner, StudyPlan.certificate).where(StudyPlan.id == plan_id)
            ).first()
            if row is None:
                raise PlanNotFound(plan_id)
            # Only an empty certificate column may be written.
            result = self.db.execute(
                update(StudyPlan)
                .where(StudyPlan.id == plan_id, StudyPlan.certificate.is_(None))
                .values(certificate=credential.model_dump(mode="json"), updated_at=datetime.utcnow())
            )
            if result.rowcount == 0:
                self.db.rollback()
                stored = self.db.execute(
                    select(StudyPlan.certificate).where(StudyPlan.id == plan_id)
                ).scalar_one()
                logger.info("credential already stored plan_id=%s; keeping it", plan_id)
                return Credential.model_validate(stored)
            self.db.add(
                Certificate(
                    id=credential.id,
                    owner=row.owner,
                    plan_id=plan_id,
                    holder_name=credential.holder_name,
                    course_name=credential.course_name,
                    difficulty=credential.difficulty_tier,
                    issue_date=credential.issue_date,
                    signature=credential.issuer_signature,
                )
            )
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("update credential", e) from e
        return credential

    def query_plans(self, owner: str) -> list[CurriculumPlan]:
        try:
            rows = (
                self.db.query(StudyPlan)
                .filter(StudyPlan.owner == owner)
                .order_by(StudyPlan.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise self._fail("load plans", e) from e
        return [self._to_plan(r) for r in rows]

    def query_plan(self, plan_id: str) -> CurriculumPlan:
        try:
            row = self.db.query(StudyPlan).filter(StudyPlan.id == plan_id).first()
        except SQLAlchemyError as e:
            raise self._fail("load plan", e) from e
        if row is None:
            raise PlanNotFound(plan_id)
        return self._to_plan(row)

    # ----- PlanStore -----

    async def check_health(self) -> bool:
        return await run_in_threadpool(self.ping)

    async def create_plan_record(self, plan: NewPlan) -> str:
        return await run_in_threadpool(self.insert_plan, plan)

    async def update_completion(self, plan_id: str, completed_module_numbers: Iterable[int]) -> None:
        await run_in_threadpool(self.write_completion, plan_id, sorted(completed_module_numbers))

    async def update_credential(self, plan_id: str, credential: Credential) -> Credential:
        return await run_in_threadpool(self.write_credential, plan_id, credential)

    async def load_plans(self, owner: str) -> list[CurriculumPlan]:
        return await run_in_threadpool(self.query_plans, owner)

    async def load_plan(self, plan_id: str) -> CurriculumPlan:
        return await run_in_threadpool(self.query_plan, plan_id)


class LocalPlanStore(PlanStore):
    """
    Fallback store keeping plan records as JSON, newest first.
    With path=None records live only in memory.
    """

    def __init__(self, path: Optional[str | Path] = None):
        self.path = Path(path) if path else None
        self._records: Optional[list[dict]] = None

    def _read(self) -> list[dict]:
        if self._records is None:
            raw: object = []
            if self.path is not None and self.path.exists():
                try:
                    raw = json.loads(self.path.read_text(encoding="utf-8"))
                except (OSError, ValueError) as e:
                    raise PersistenceFailure("Could not read local plan store", details={"error": str(e)}) from e
            self._records = raw if isinstance(raw, list) else []
        return self._records

    def _write(self, records: list[dict]) -> None:
        """Replace the stored records; memory only changes once the file write succeeded."""
        if self.path is not None:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.write_text(json.dumps(records, indent=2), encoding="utf-8")
            except OSError as e:
                raise PersistenceFailure("Could not write local plan store", details={"error": str(e)}) from e
        self._records = records

    def _find(self, plan_id: str) -> dict:
        for record in self._read():
            if record.get("id") == plan_id:
                return record
        raise PlanNotFound(plan_id)

    def _update_field(self, plan_id: str, field: str, value: object) -> None:
        self._find(plan_id)
        self._write([{**r, field: value} if r.get("id") == plan_id else r for r in self._read()])

    async def create_plan_record(self, plan: NewPlan) -> str:
        plan_id = str(uuid4())
        record = plan.model_dump(mode="json")
        record.update(id=plan_id, completed_module_numbers=[], credential=None)
        self._write([record, *self._read()])
        return plan_id

    async def update_completion(self, plan_id: str, completed_module_numbers: Iterable[int]) -> None:
        self._update_field(plan_id, "completed_module_numbers", sorted(completed_module_numbers))

    async def update_credential(self, plan_id: str, credential: Credential) -> Credential:
        stored = self._find(plan_id).get("credential")
        if stored:
            return Credential.model_validate(stored)
        self._update_field(plan_id, "credential", credential.model_dump(mode="json"))
        return credential

    async def load_plans(self, owner: str) -> list[CurriculumPlan]:
        return [CurriculumPlan.model_validate(r) for r in self._read() if r.get("owner") == owner]

    async def load_plan(self, plan_id: str) -> CurriculumPlan:
        return CurriculumPlan.model_validate(self._find(plan_id))


async def select_plan_store(primary: PlanStore, fallback: PlanStore) -> PlanStore:
    """Use the primary store when it answers a health check, otherwise the fallback."""
    if await primary.check_health():
        return primary
    logger.warning("primary plan store unavailable; using %s", type(fallback).__name__)
    return fallback
