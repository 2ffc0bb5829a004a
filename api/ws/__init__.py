"""Plan progress event broadcast (feeds the plan WebSocket)."""

from api.ws.progress_broadcast import ProgressBroadcaster, progress_broadcaster

__all__ = ["ProgressBroadcaster", "progress_broadcaster"]
