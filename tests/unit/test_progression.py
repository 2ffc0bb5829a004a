"""Unit tests for the linear unlock rules."""
import pytest
from datetime import date

from api.schemas.plan_schemas import Credential, ModuleState, PlanState
from api.services.progression import (
    is_final_unlocked,
    is_locked,
    module_state,
    next_required_module,
    plan_state,
    progress_percentage,
)


@pytest.mark.unit
class TestNextRequiredModule:
    def test_fresh_plan_starts_at_first_module(self, make_plan):
        assert next_required_module(make_plan(numbers=(1, 2, 3))) == 1

    def test_skips_completed_prefix(self, make_plan):
        assert next_required_module(make_plan(numbers=(1, 2, 3, 4, 5), completed={1, 2})) == 3

    def test_none_when_everything_completed(self, make_plan):
        assert next_required_module(make_plan(numbers=(1, 2, 3), completed={1, 2, 3})) is None

    def test_non_contiguous_numbers(self, make_plan):
        plan = make_plan(numbers=(2, 5, 9), completed={2})
        assert next_required_module(plan) == 5


@pytest.mark.unit
class TestIsLocked:
    def test_only_first_module_open_on_new_plan(self, make_plan):
        plan = make_plan(numbers=(1, 2, 3))
        assert [is_locked(plan, n) for n in (1, 2, 3)] == [False, True, True]

    def test_completed_modules_stay_open(self, make_plan):
        plan = make_plan(numbers=(1, 2, 3, 4, 5), completed={1, 2})
        assert not is_locked(plan, 1)
        assert not is_locked(plan, 2)
        assert not is_locked(plan, 3)
        assert is_locked(plan, 4)
        assert is_locked(plan, 5)

    def test_nothing_locked_when_all_completed(self, make_plan):
        plan = make_plan(numbers=(1, 2, 3), completed={1, 2, 3})
        assert not any(is_locked(plan, n) for n in (1, 2, 3))

    def test_non_contiguous_numbers_follow_order(self, make_plan):
        plan = make_plan(numbers=(10, 20, 30))
        assert not is_locked(plan, 10)
        assert is_locked(plan, 20)
        assert is_locked(plan, 30)


@pytest.mark.unit
class TestFinalUnlocked:
    def test_locked_until_all_modules_done(self, make_plan):
        assert not is_final_unlocked(make_plan(numbers=(1, 2, 3), completed={1, 2}))

    def test_unlocked_when_all_done(self, make_plan):
        assert is_final_unlocked(make_plan(numbers=(1, 2, 3), completed={1, 2, 3}))

    def test_empty_plan_never_unlocks(self, make_plan):
        assert not is_final_unlocked(make_plan(numbers=()))


@pytest.mark.unit
class TestDerivedStates:
    def test_module_states(self, make_plan):
        plan = make_plan(numbers=(1, 2, 3), completed={1})
        assert module_state(plan, 1) == ModuleState.PASSED
        assert module_state(plan, 2) == ModuleState.AVAILABLE
        assert module_state(plan, 3) == ModuleState.LOCKED

    def test_plan_state_progression(self, make_plan):
        assert plan_state(make_plan(numbers=(1, 2), completed={1})) == PlanState.IN_PROGRESS
        assert plan_state(make_plan(numbers=(1, 2), completed={1, 2})) == PlanState.FINAL_AVAILABLE

    def test_certified_plan(self, make_plan):
        credential = Credential(
            id="ABCDEF123456",
            holder_name="Ada",
            course_name="Rust",
            difficulty_tier="Beginner",
            issue_date=date(2026, 10, 19),
        )
        plan = make_plan(numbers=(1, 2), completed={1, 2}, credential=credential)
        assert plan_state(plan) == PlanState.CERTIFIED

    def test_progress_percentage(self, make_plan):
        assert progress_percentage(make_plan(numbers=(1, 2, 3), completed={1})) == 33
        assert progress_percentage(make_plan(numbers=(1, 2, 3, 4), completed={1, 2})) == 50
        assert progress_percentage(make_plan(numbers=())) == 0


@pytest.mark.unit
class TestPlanInvariants:
    def test_duplicate_module_numbers_rejected(self, make_plan):
        with pytest.raises(ValueError):
            make_plan(numbers=(1, 1, 2))

    def test_completed_number_must_exist(self, make_plan):
        with pytest.raises(ValueError):
            make_plan(numbers=(1, 2), completed={3})

    def test_credential_requires_full_completion(self, make_plan):
        credential = Credential(
            id="ABCDEF123456",
            holder_name="Ada",
            course_name="Rust",
            difficulty_tier="Beginner",
            issue_date=date(2026, 10, 19),
        )
        with pytest.raises(ValueError):
            make_plan(numbers=(1, 2), completed={1}, credential=credential)

    def test_display_issue_date(self):
        credential = Credential(
            id="ABCDEF123456",
            holder_name="Ada",
            course_name="Rust",
            difficulty_tier="Beginner",
            issue_date=date(2026, 10, 9),
        )
        assert credential.display_issue_date == "October 9, 2026"
        assert credential.issuer_signature == "Mind is Gear Training"
