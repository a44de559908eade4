"""
Authentication dependencies for FastAPI.

Every protected route takes a bearer token issued by ``/candidates/login``,
``/candidates/set-password`` or ``/auth/login``. The token carries the
subject id and a role (``candidate`` or ``admin``).
"""

import logging
import uuid
from typing import Any

from fastapi import Depends, Header, HTTPException

from taruf import config
from taruf.auth.security import decode_access_token
from taruf.deps import get_store
from taruf.store import Store, eq

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Raised when authentication fails with detailed reason."""

    def __init__(self, reason: str, detail: str = "unauthorized"):
        self.reason = reason
        self.detail = detail
        self.trace_id = str(uuid.uuid4())
        super().__init__(detail)


def _log_auth_failure(reason: str, trace_id: str, token_prefix: str | None = None, subject: str | None = None) -> None:
    logger.warning("[AUTH_FAILURE] trace_id=%s reason=%s token_prefix=%s subject=%s", trace_id, reason, token_prefix, subject)


def _unauthorized(reason: str, trace_id: str, message: str = "unauthorized", status_code: int = 401) -> HTTPException:
    detail: dict[str, Any] = {"message": message, "trace_id": trace_id}
    if config.DEV_MODE:
        detail["reason"] = reason
    return HTTPException(status_code=status_code, detail=detail)


def extract_bearer(authorization: str | None) -> str:
    if not authorization:
        raise AuthError(reason="missing_token", detail="Missing Authorization header")
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise AuthError(reason="malformed_token", detail="Invalid Authorization header")
    return parts[1].strip()


def principal_from_token(token: str, trace_id: str, store: Store) -> dict[str, Any]:
    token_prefix = token[:8] + "..." if len(token) > 8 else token
    try:
        payload = decode_access_token(token)
    except HTTPException as e:
        if e.status_code != 401:
            raise
        reason = "token_expired" if "expired" in str(e.detail).lower() else "signature_invalid"
        _log_auth_failure(reason, trace_id, token_prefix)
        raise _unauthorized(reason, trace_id)

    subject = str(payload["sub"])
    role = str(payload["role"])
    if role == "candidate":
        if not store.select("registrations", [eq("id", subject)], limit=1):
            _log_auth_failure("token_registration_not_found", trace_id, token_prefix, subject)
            raise _unauthorized("token_registration_not_found", trace_id)
    else:
        admins = store.select("admins", [eq("id", int(subject))], limit=1) if subject.isdigit() else []
        if not admins or int(admins[0].get("status") or 0) != 1:
            _log_auth_failure("admin_inactive", trace_id, token_prefix, subject)
            raise _unauthorized("admin_inactive", trace_id)

    logger.debug("[auth] token valid, sub=%s role=%s", subject, role)
    return {"id": subject, "role": role, "auth_mode": "bearer"}


def get_current_principal(
    authorization: str | None = Header(default=None, alias="Authorization"),
    store: Store = Depends(get_store),
) -> dict[str, Any]:
    trace_id = str(uuid.uuid4())
    try:
        token = extract_bearer(authorization)
    except AuthError as e:
        _log_auth_failure(e.reason, e.trace_id)
        raise _unauthorized(e.reason, e.trace_id, message=e.detail)
    return principal_from_token(token, trace_id, store)


def require_candidate(principal: dict[str, Any] = Depends(get_current_principal)) -> dict[str, Any]:
    if principal.get("role") != "candidate":
        raise HTTPException(status_code=403, detail="Candidate token required")
    return principal
