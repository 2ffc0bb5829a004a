"""
In-memory subscribers per plan_id for plan sync events.
Every mutation publishes applied, then synced or sync_failed; subscribers that
raise while receiving are dropped.
"""

from __future__ import annotations

from typing import Awaitable, Callable

from api.schemas.plan_schemas import PlanSyncEvent
from api.utils.logger import configure_logging

logger = configure_logging()

Subscriber = Callable[[PlanSyncEvent], Awaitable[None]]


class ProgressBroadcaster:
    def __init__(self):
        # plan_id -> subscriber callables
        self._subscribers: dict[str, list[Subscriber]] = {}

    def subscribe(self, plan_id: str, callback: Subscriber) -> None:
        self._subscribers.setdefault(plan_id, [])
        if callback not in self._subscribers[plan_id]:
            self._subscribers[plan_id].append(callback)

    def unsubscribe(self, plan_id: str, callback: Subscriber) -> None:
        if plan_id in self._subscribers:
            if callback in self._subscribers[plan_id]:
                self._subscribers[plan_id].remove(callback)
            if not self._subscribers[plan_id]:
                del self._subscribers[plan_id]

    def subscriber_count(self, plan_id: str) -> int:
        return len(self._subscribers.get(plan_id, []))

    async def publish(self, event: PlanSyncEvent) -> None:
        subscribers = self._subscribers.get(event.plan_id)
        if not subscribers:
            return
        dead: list[Subscriber] = []
        for callback in list(subscribers):
            try:
                await callback(event)
            except Exception as e:
                logger.warning("dropping plan subscriber plan_id=%s error=%r", event.plan_id, e)
                dead.append(callback)
        for callback in dead:
            self.unsubscribe(event.plan_id, callback)


progress_broadcaster = ProgressBroadcaster()
