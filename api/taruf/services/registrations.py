import re
from typing import Any

from fastapi import HTTPException

from .. import config
from ..auth.security import create_access_token, hash_password, verify_password
from ..errors import Conflict, NotFound, ValidationFailed
from ..store import Store, eq
from .identifiers import require_id, require_taruf_id

PRIVATE_FIELDS = {"password_hash"}


def public_registration(row: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in row.items() if k not in PRIVATE_FIELDS}


def list_active_tarufs(store: Store) -> list[dict[str, Any]]:
    return [{"id": t["id"], "name": t["name"]} for t in store.select("tarufs", [eq("status", 1)])]


def _get_registration(store: Store, registration_id: str) -> dict[str, Any]:
    rows = store.select("registrations", [eq("id", registration_id)], limit=1)
    if not rows:
        raise NotFound("Registration not found")
    return rows[0]


def check_registration(store: Store, taruf_id: Any, its_number: Any) -> dict[str, Any]:
    taruf_id = require_taruf_id(taruf_id)
    its = require_id(its_number, "its_number")
    rows = store.select("registrations", [eq("taruf_id", taruf_id), eq("its_number", its)], order_by=("badge_no",), limit=1)
    if not rows:
        return {"success": True, "found": False}
    row = rows[0]
    return {
        "success": True,
        "found": True,
        "registration": {
            "id": row["id"],
            "its_number": row["its_number"],
            "name": row.get("name"),
            "taruf_id": row["taruf_id"],
            "has_password": bool(row.get("password_hash")),
        },
    }


def _validate_pin(password: Any) -> str:
    pin = str(password or "")
    if not re.fullmatch(rf"\d{{{config.CANDIDATE_PIN_LENGTH}}}", pin):
        raise ValidationFailed(f"Password must be exactly {config.CANDIDATE_PIN_LENGTH} digits")
    return pin


def _candidate_token(registration_id: str) -> str:
    return create_access_token(subject=registration_id, role="candidate", ttl_minutes=config.CANDIDATE_TOKEN_TTL_MINUTES)


def set_candidate_password(store: Store, registration_id: Any, password: Any) -> dict[str, Any]:
    registration_id = require_id(registration_id, "registration_id")
    pin = _validate_pin(password)
    row = _get_registration(store, registration_id)
    if row.get("password_hash"):
        raise Conflict("Password already set for this registration")
    store.update("registrations", {"password_hash": hash_password(pin)}, [eq("id", registration_id)])
    return {"success": True, "token": _candidate_token(registration_id)}


def candidate_login(store: Store, registration_id: Any, password: Any) -> dict[str, Any]:
    registration_id = require_id(registration_id, "registration_id")
    if not password:
        raise ValidationFailed("Missing password")
    row = _get_registration(store, registration_id)
    if not row.get("password_hash"):
        raise ValidationFailed("Password not set for this registration")
    if not verify_password(str(password), str(row["password_hash"])):
        raise HTTPException(status_code=401, detail="Incorrect password")
    return {"success": True, "token": _candidate_token(registration_id)}


def get_registration_with_taruf(store: Store, registration_id: Any) -> dict[str, Any]:
    registration_id = require_id(registration_id, "registration_id")
    row = _get_registration(store, registration_id)
    tarufs = store.select("tarufs", [eq("id", row["taruf_id"])], limit=1)
    taruf = None
    if tarufs:
        t = tarufs[0]
        taruf = {
            "id": t["id"],
            "name": t["name"],
            "status": t.get("status"),
            "date": t.get("event_date") or "TBA",
            "start_time": t.get("start_time") or "TBA",
            "end_time": t.get("end_time") or "TBA",
            "location_name": t.get("location_name") or "TBA",
        }
    return {"success": True, "registration": public_registration(row), "taruf": taruf}
