"""Unit tests for plan event fan-out."""
import pytest

from api.schemas.plan_schemas import PlanEventType, PlanSyncEvent


def _event(plan, event_type=PlanEventType.APPLIED):
    return PlanSyncEvent(type=event_type, plan_id=plan.id, plan=plan)


@pytest.mark.unit
class TestProgressBroadcaster:
    @pytest.mark.asyncio
    async def test_delivers_to_plan_subscribers_only(self, broadcaster, make_plan):
        got_a, got_b = [], []

        async def on_a(event):
            got_a.append(event)

        async def on_b(event):
            got_b.append(event)

        broadcaster.subscribe("plan-1", on_a)
        broadcaster.subscribe("plan-2", on_b)
        await broadcaster.publish(_event(make_plan()))

        assert len(got_a) == 1 and got_a[0].type == PlanEventType.APPLIED
        assert got_b == []

    @pytest.mark.asyncio
    async def test_failing_subscriber_is_dropped(self, broadcaster, make_plan):
        delivered = []

        async def broken(event):
            raise RuntimeError("socket closed")

        async def healthy(event):
            delivered.append(event)

        broadcaster.subscribe("plan-1", broken)
        broadcaster.subscribe("plan-1", healthy)
        await broadcaster.publish(_event(make_plan()))

        assert broadcaster.subscriber_count("plan-1") == 1
        assert len(delivered) == 1

    def test_subscribe_is_idempotent_and_unsubscribe_cleans_up(self, broadcaster):
        async def cb(event):
            pass

        broadcaster.subscribe("plan-1", cb)
        broadcaster.subscribe("plan-1", cb)
        assert broadcaster.subscriber_count("plan-1") == 1
        broadcaster.unsubscribe("plan-1", cb)
        assert broadcaster.subscriber_count("plan-1") == 0

    def test_event_json_omits_sync_flag(self, make_plan):
        payload = _event(make_plan(completed={1}), PlanEventType.SYNCED).model_dump(mode="json")
        assert payload["type"] == "synced"
        assert payload["plan"]["completed_module_numbers"] == [1]
        assert "synced" not in payload["plan"]
