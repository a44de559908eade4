from typing import Any

from fastapi import HTTPException

from .store import Store


def get_store() -> Store:
    return Store()


def ensure_can_act_for(principal: dict[str, Any], registration_id: Any) -> None:
    """Candidates may only act on their own registration; admins on any."""
    if principal.get("role") == "admin":
        return
    if str(principal.get("id") or "") != str(registration_id or "").strip():
        raise HTTPException(status_code=403, detail="Not allowed to act for another registration")
