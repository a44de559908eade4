import pytest

pytest.importorskip("fastapi")
import jwt
from fastapi import HTTPException

from taruf import config
from taruf.auth.deps import AuthError, extract_bearer, principal_from_token
from taruf.auth.security import create_access_token, decode_access_token, hash_password, verify_password
from taruf.store import eq


def test_token_round_trip_carries_role(jwt_secret):
    token = create_access_token(subject="r1", role="candidate", ttl_minutes=5)
    payload = decode_access_token(token)
    assert payload["sub"] == "r1"
    assert payload["role"] == "candidate"
    assert payload["exp"] > payload["iat"]


def test_unknown_role_rejected(jwt_secret):
    with pytest.raises(ValueError):
        create_access_token(subject="r1", role="owner", ttl_minutes=5)


def test_missing_secret_is_server_error(monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", "")
    with pytest.raises(HTTPException) as exc:
        create_access_token(subject="r1", role="candidate", ttl_minutes=5)
    assert exc.value.status_code == 500


def test_expired_and_tampered_tokens(jwt_secret):
    expired = jwt.encode({"sub": "r1", "role": "candidate", "iat": 1, "exp": 2}, jwt_secret, algorithm="HS256")
    with pytest.raises(HTTPException) as exc:
        decode_access_token(expired)
    assert exc.value.detail == "Token expired"

    forged = jwt.encode({"sub": "r1", "role": "admin", "exp": 9999999999}, "other-secret-value-that-is-long-enough", algorithm="HS256")
    with pytest.raises(HTTPException) as exc:
        decode_access_token(forged)
    assert exc.value.status_code == 401


def test_password_hashing():
    hashed = hash_password("123456")
    assert verify_password("123456", hashed)
    assert not verify_password("654321", hashed)
    assert not verify_password("123456", "not-a-hash")


@pytest.mark.parametrize("header", [None, "", "Token abc", "Bearer ", "bearer"])
def test_extract_bearer_rejects_malformed(header):
    with pytest.raises(AuthError):
        extract_bearer(header)


def test_extract_bearer_accepts_case_insensitive_scheme():
    assert extract_bearer("bearer abc.def") == "abc.def"


def test_principal_requires_existing_registration(store, add_registration, jwt_secret):
    token = create_access_token(subject="r1", role="candidate", ttl_minutes=5)
    with pytest.raises(HTTPException) as exc:
        principal_from_token(token, "trace", store)
    assert exc.value.status_code == 401

    add_registration("r1", "100")
    assert principal_from_token(token, "trace", store) == {"id": "r1", "role": "candidate", "auth_mode": "bearer"}


def test_principal_rejects_inactive_admin(store, jwt_secret):
    admin = store.insert("admins", [{"email": "x@taruf.local", "password_hash": hash_password("pw"), "status": 0}])[0]
    token = create_access_token(subject=str(admin["id"]), role="admin", ttl_minutes=5)
    with pytest.raises(HTTPException) as exc:
        principal_from_token(token, "trace", store)
    assert exc.value.status_code == 401

    store.update("admins", {"status": 1}, [eq("id", admin["id"])])
    principal = principal_from_token(token, "trace", store)
    assert principal["role"] == "admin"
    assert principal["id"] == str(admin["id"])
