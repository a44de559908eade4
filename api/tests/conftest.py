from typing import Any

import pytest

from taruf import config
from taruf.database import Base, make_engine, make_session_factory
from taruf.store import Store

TARUF_ID = 7


@pytest.fixture
def store():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield Store(make_session_factory(engine))
    engine.dispose()


@pytest.fixture
def add_registration(store):
    def _add(reg_id: str, its: str, name: str | None = None, taruf_id: int = TARUF_ID, **extra: Any) -> dict[str, Any]:
        row = {"id": reg_id, "taruf_id": taruf_id, "its_number": its, "name": name or f"Candidate {reg_id}", **extra}
        return store.insert("registrations", [row])[0]

    return _add


@pytest.fixture
def add_selection(store):
    def _add(
        selector_id: str,
        selected_id: str,
        *,
        selected_its: str | None = None,
        first_choice: str | None = None,
        room_no: str | None = None,
        taruf_id: int = TARUF_ID,
    ) -> dict[str, Any]:
        row = {
            "taruf_id": taruf_id,
            "selector_registration_id": selector_id,
            "selected_registration_id": selected_id,
            "selected_its": selected_its,
            "first_choice": first_choice,
            "room_no": room_no,
        }
        return store.insert("round1_selected", [row])[0]

    return _add


@pytest.fixture
def jwt_secret(monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", "test-secret-value-that-is-long-enough")
    return config.JWT_SECRET
