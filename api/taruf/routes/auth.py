import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from .. import config
from ..auth.admin_deps import get_current_admin
from ..auth.security import create_access_token, hash_password, verify_password
from ..deps import get_store
from ..services.rate_limit import rate_limit_dependency
from ..store import Store, eq

logger = logging.getLogger(__name__)

router = APIRouter()
scaffold_router = APIRouter()

RL_ADMIN_LOGIN = rate_limit_dependency("admin_login", "RL_ADMIN_LOGIN_LIMIT")


def _bootstrap_admin_if_needed(store: Store, email: str) -> None:
    if not config.ADMIN_BOOTSTRAP_EMAIL or not config.ADMIN_BOOTSTRAP_PASSWORD:
        return
    if email != config.ADMIN_BOOTSTRAP_EMAIL:
        return
    if store.select("admins", [eq("email", email)], limit=1):
        return
    store.insert(
        "admins",
        [
            {
                "name": "Administrator",
                "email": email,
                "password_hash": hash_password(config.ADMIN_BOOTSTRAP_PASSWORD),
                "role": "admin",
                "status": 1,
            }
        ],
    )
    logger.info("[auth] bootstrap admin created email=%s", email)


@scaffold_router.get("/health")
def auth_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "auth"}


@router.post("/auth/login")
def admin_login(payload: dict[str, Any], store: Store = Depends(get_store), _: None = RL_ADMIN_LOGIN) -> dict[str, Any]:
    email = str(payload.get("email") or "").strip().lower()
    password = str(payload.get("password") or "")
    if not email or not password:
        raise HTTPException(status_code=400, detail="Missing email or password")

    _bootstrap_admin_if_needed(store, email)
    rows = store.select("admins", [eq("email", email)], limit=1)
    admin = rows[0] if rows else None
    if not admin or int(admin.get("status") or 0) != 1:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not verify_password(password, str(admin.get("password_hash") or "")):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(subject=str(admin["id"]), role="admin", ttl_minutes=config.ADMIN_TOKEN_TTL_MINUTES)
    logger.info("[auth] admin login id=%s", admin["id"])
    return {
        "success": True,
        "token": token,
        "token_type": "bearer",
        "expires_in": config.ADMIN_TOKEN_TTL_MINUTES * 60,
        "user": {"id": admin["id"], "name": admin.get("name"), "role": "admin"},
    }


@router.get("/auth/verify")
def verify_admin(admin: dict[str, Any] = Depends(get_current_admin)) -> dict[str, Any]:
    return {"success": True, "valid": True, "user": admin}
