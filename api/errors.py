"""
SkillForge error taxonomy.

Every failure the engine surfaces is a ``SkillForgeError`` subclass so callers can
tell retry (generation/persistence), block (locked) and correct-input cases apart.
Locked modules and failed assessments are ordinary return values, not errors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from api.schemas.plan_schemas import CurriculumPlan


class SkillForgeError(Exception):
    """Base exception for all SkillForge engine errors."""

    retryable = False

    def __init__(self, message: str = "", details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details or {}


class GenerationFailure(SkillForgeError):
    """The content generator was unavailable or returned unusable content."""

    retryable = True

    def __init__(self, message: str = "Content generation failed", details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details)


class PersistenceFailure(SkillForgeError):
    """The plan store could not durably record a change.

    ``plan`` carries the optimistic (unsynced) snapshot when the failure happened
    while writing back a mutation; pass it to the same operation again to retry.
    """

    retryable = True

    def __init__(
        self,
        message: str = "Plan store unavailable",
        plan: CurriculumPlan | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.plan = plan


class ModuleLocked(SkillForgeError):
    def __init__(self, module_number: int, next_required: int | None = None) -> None:
        super().__init__(
            f"Module {module_number} is locked; complete module {next_required} first",
            {"module_number": module_number, "next_required": next_required},
        )
        self.module_number = module_number
        self.next_required = next_required


class FinalLocked(SkillForgeError):
    def __init__(self, remaining: list[int] | None = None) -> None:
        remaining = remaining or []
        super().__init__(
            "Final assessment is locked until every module is passed",
            {"remaining": remaining},
        )
        self.remaining = remaining


class IncompleteSubmission(SkillForgeError):
    def __init__(self, missing: list[int]) -> None:
        super().__init__(
            f"{len(missing)} question(s) unanswered",
            {"missing": missing},
        )
        self.missing = missing


class InvalidAnswer(SkillForgeError):
    pass


class UnknownModule(SkillForgeError):
    def __init__(self, module_number: int | None) -> None:
        super().__init__(f"Plan has no module {module_number}", {"module_number": module_number})
        self.module_number = module_number


class InvalidTopic(SkillForgeError):
    pass


class PlanNotFound(SkillForgeError):
    def __init__(self, plan_id: str) -> None:
        super().__init__(f"Plan {plan_id} not found", {"plan_id": plan_id})
        self.plan_id = plan_id
