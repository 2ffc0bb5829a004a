"""
Learner identity for SkillForge routes.

Identity comes from the X-Learner-Id / X-Learner-Name headers set by the portal's
login layer; nothing here verifies it.
"""

from typing import Optional

from fastapi import Header, HTTPException, WebSocket, status

from api.schemas.skillforge_schemas import Learner


def get_current_learner(
    x_learner_id: Optional[str] = Header(None),
    x_learner_name: Optional[str] = Header(None),
) -> Learner:
    learner_id = (x_learner_id or "").strip()
    if not learner_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing learner id",
        )
    name = (x_learner_name or "").strip() or learner_id.split("@", 1)[0]
    return Learner(id=learner_id, name=name)


def get_learner_from_websocket(websocket: WebSocket) -> Optional[str]:
    """Learner id from the X-Learner-Id header or ?learner= query (browsers cannot set WS headers)."""
    learner_id = websocket.headers.get("x-learner-id") or websocket.query_params.get("learner") or ""
    return learner_id.strip() or None
