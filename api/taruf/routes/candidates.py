from typing import Any

from fastapi import APIRouter, Depends

from ..auth.deps import require_candidate
from ..deps import get_store
from ..services.rate_limit import rate_limit_dependency
from ..services.registrations import (
    candidate_login,
    check_registration,
    get_registration_with_taruf,
    list_active_tarufs,
    set_candidate_password,
)
from ..store import Store

router = APIRouter()
scaffold_router = APIRouter()

RL_CANDIDATE_LOGIN = rate_limit_dependency("candidate_login", "RL_CANDIDATE_LOGIN_LIMIT")
RL_CANDIDATE_SET_PASSWORD = rate_limit_dependency("candidate_set_password", "RL_CANDIDATE_SET_PASSWORD_LIMIT")


@scaffold_router.get("/health")
def candidates_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "candidates"}


@router.get("/tarufs/active")
def active_tarufs(store: Store = Depends(get_store)) -> dict[str, Any]:
    return {"success": True, "tarufs": list_active_tarufs(store)}


@router.post("/candidates/check")
def check_candidate(payload: dict[str, Any], store: Store = Depends(get_store)) -> dict[str, Any]:
    return check_registration(store, payload.get("taruf_id"), payload.get("its_number") or payload.get("its"))


@router.post("/candidates/set-password")
def set_password(
    payload: dict[str, Any],
    store: Store = Depends(get_store),
    _: None = RL_CANDIDATE_SET_PASSWORD,
) -> dict[str, Any]:
    return set_candidate_password(store, payload.get("registration_id"), payload.get("password"))


@router.post("/candidates/login")
def login(payload: dict[str, Any], store: Store = Depends(get_store), _: None = RL_CANDIDATE_LOGIN) -> dict[str, Any]:
    return candidate_login(store, payload.get("registration_id"), payload.get("password"))


@router.get("/candidates/me")
def me(principal: dict[str, Any] = Depends(require_candidate), store: Store = Depends(get_store)) -> dict[str, Any]:
    return get_registration_with_taruf(store, principal["id"])
