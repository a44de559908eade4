from __future__ import annotations

import uuid
from typing import Any

from fastapi import Depends, Header, HTTPException

from taruf import config
from taruf.auth.deps import AuthError, extract_bearer, principal_from_token
from taruf.deps import get_store
from taruf.store import Store


def _dev_admin(x_admin_token: str | None) -> dict[str, Any] | None:
    # Dev fallback only.
    if config.ADMIN_TOKEN and x_admin_token and x_admin_token == config.ADMIN_TOKEN:
        return {"id": None, "role": "admin", "auth_mode": "token"}
    return None


def get_current_actor(
    authorization: str | None = Header(default=None, alias="Authorization"),
    x_admin_token: str | None = Header(default=None, alias="X-Admin-Token"),
    store: Store = Depends(get_store),
) -> dict[str, Any]:
    """Candidate or admin; routes decide what each may touch."""
    if not authorization:
        dev = _dev_admin(x_admin_token)
        if dev:
            return dev
    try:
        token = extract_bearer(authorization)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=e.detail)
    return principal_from_token(token, str(uuid.uuid4()), store)


def get_current_admin(actor: dict[str, Any] = Depends(get_current_actor)) -> dict[str, Any]:
    if actor.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin role required")
    return actor
