"""
Unlock rules for a study plan. Pure functions; no I/O.

The curriculum is strictly linear: only the lowest unfinished module is open,
everything after it is locked, and finished modules stay open for retakes.
"""

from __future__ import annotations

from typing import Optional

from api.schemas.plan_schemas import CurriculumPlan, ModuleState, PlanState


def next_required_module(plan: CurriculumPlan) -> Optional[int]:
    """Smallest module number not yet completed, or None when all are done."""
    for number in plan.module_numbers:
        if number not in plan.completed_module_numbers:
            return number
    return None


def is_locked(plan: CurriculumPlan, module_number: int) -> bool:
    if module_number in plan.completed_module_numbers:
        return False
    next_required = next_required_module(plan)
    return next_required is not None and module_number > next_required


def is_final_unlocked(plan: CurriculumPlan) -> bool:
    numbers = plan.module_numbers
    return bool(numbers) and next_required_module(plan) is None and len(plan.completed_module_numbers) == len(numbers)


def module_state(plan: CurriculumPlan, module_number: int) -> ModuleState:
    if module_number in plan.completed_module_numbers:
        return ModuleState.PASSED
    if is_locked(plan, module_number):
        return ModuleState.LOCKED
    return ModuleState.AVAILABLE


def plan_state(plan: CurriculumPlan) -> PlanState:
    if plan.credential is not None:
        return PlanState.CERTIFIED
    if is_final_unlocked(plan):
        return PlanState.FINAL_AVAILABLE
    return PlanState.IN_PROGRESS


def progress_percentage(plan: CurriculumPlan) -> int:
    """Completed share of modules, rounded to a whole percent."""
    if not plan.modules:
        return 0
    return round(len(plan.completed_module_numbers) / len(plan.modules) * 100)
