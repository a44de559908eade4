from typing import Any

from ..store import StoreSession


def log_assignment_event(
    tx: StoreSession,
    *,
    taruf_id: int,
    event_type: str,
    actor_id: str | None = None,
    payload: dict[str, Any] | None = None,
) -> None:
    tx.insert(
        "assignment_event",
        [
            {
                "taruf_id": taruf_id,
                "event_type": event_type,
                "actor_id": actor_id,
                "payload": payload or {},
            }
        ],
    )
