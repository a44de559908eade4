import pytest

from taruf import config
from taruf.errors import Conflict, NotFound, ValidationFailed
from taruf.services.selections import (
    add_round1_selection,
    delete_round1_selection,
    is_locked,
    list_candidates_not_selectors,
    list_round1_selected,
    set_round1_first_choice,
    submit_round1,
    submit_round2,
)
from taruf.store import eq

TARUF_ID = 7

SELECTOR = {"registration_id": "a", "its_number": "100", "name": "Ali"}


def _pick(reg_id, its, name=None):
    return {"registration_id": reg_id, "its_number": its, "name": name or reg_id.upper()}


@pytest.fixture
def people(add_registration):
    add_registration("a", "100", "Ali", counsellor="Sh. Yusuf")
    add_registration("b", "200", "Bushra", counsellor="Sh. Hatim")
    add_registration("c", "300", "Fatema")
    add_registration("d", "400", "Zainab")


def test_submit_round1_skips_self_and_duplicates(store, people):
    result = submit_round1(
        store,
        TARUF_ID,
        SELECTOR,
        [_pick("b", "200"), _pick("a", "100"), _pick("b", "200"), _pick("c", "300")],
        first_choice="300",
    )

    assert result == {"success": True, "inserted_count": 2, "skipped_count": 2}
    rows = store.select("round1_selected", [eq("selector_registration_id", "a")])
    assert [r["selected_registration_id"] for r in rows] == ["b", "c"]
    assert {r["first_choice"] for r in rows} == {"300"}
    assert {r["selector_counsellor"] for r in rows} == {"Sh. Yusuf"}


def test_submit_round1_rejects_second_submission(store, people):
    submit_round1(store, TARUF_ID, SELECTOR, [_pick("b", "200")])
    with pytest.raises(Conflict):
        submit_round1(store, TARUF_ID, SELECTOR, [_pick("c", "300")])


def test_submit_round1_limits(store, people):
    with pytest.raises(ValidationFailed):
        submit_round1(store, TARUF_ID, SELECTOR, [])
    too_many = [_pick(f"x{i}", str(900 + i)) for i in range(config.MAX_ROUND1_SELECTIONS + 1)]
    with pytest.raises(ValidationFailed):
        submit_round1(store, TARUF_ID, SELECTOR, too_many)


def test_submit_round1_first_choice_must_be_selected(store, people):
    with pytest.raises(ValidationFailed):
        submit_round1(store, TARUF_ID, SELECTOR, [_pick("b", "200")], first_choice="400")
    assert store.select("round1_selected") == []


def test_add_round1_selection_inherits_first_choice(store, people):
    submit_round1(store, TARUF_ID, SELECTOR, [_pick("b", "200")], first_choice="200")

    result = add_round1_selection(store, TARUF_ID, SELECTOR, _pick("c", "300"))

    assert result["row"]["selected_registration_id"] == "c"
    assert result["row"]["first_choice"] == "200"
    assert result["row"]["selector_counsellor"] == "Sh. Yusuf"


def test_add_round1_selection_conflicts(store, people):
    add_round1_selection(store, TARUF_ID, SELECTOR, _pick("b", "200"))
    with pytest.raises(Conflict):
        add_round1_selection(store, TARUF_ID, SELECTOR, _pick("b", "200"))
    with pytest.raises(ValidationFailed):
        add_round1_selection(store, TARUF_ID, SELECTOR, _pick("a", "100"))


def test_add_round1_selection_max(store, people, monkeypatch):
    monkeypatch.setattr(config, "MAX_ROUND1_SELECTIONS", 2)
    add_round1_selection(store, TARUF_ID, SELECTOR, _pick("b", "200"))
    add_round1_selection(store, TARUF_ID, SELECTOR, _pick("c", "300"))
    with pytest.raises(Conflict):
        add_round1_selection(store, TARUF_ID, SELECTOR, _pick("d", "400"))


def test_locked_selector_cannot_change(store, people, add_selection):
    add_selection("a", "b", selected_its="200", room_no="3")

    rows = store.select("round1_selected", [eq("selector_registration_id", "a")])
    assert is_locked(rows)
    with pytest.raises(Conflict):
        add_round1_selection(store, TARUF_ID, SELECTOR, _pick("c", "300"))
    with pytest.raises(Conflict):
        delete_round1_selection(store, TARUF_ID, "a", "b")
    with pytest.raises(Conflict):
        set_round1_first_choice(store, TARUF_ID, "a", "200")


def test_delete_round1_selection(store, people, add_selection):
    add_selection("a", "b")

    assert delete_round1_selection(store, TARUF_ID, "a", "b")["deleted"] == 1
    with pytest.raises(NotFound):
        delete_round1_selection(store, TARUF_ID, "a", "b")


def test_set_round1_first_choice(store, people):
    submit_round1(store, TARUF_ID, SELECTOR, [_pick("b", "200"), _pick("c", "300")])

    assert set_round1_first_choice(store, TARUF_ID, "a", 300) == {"success": True, "updated": 2}
    rows = store.select("round1_selected", [eq("selector_registration_id", "a")])
    assert {r["first_choice"] for r in rows} == {"300"}

    with pytest.raises(ValidationFailed):
        set_round1_first_choice(store, TARUF_ID, "a", "999")
    set_round1_first_choice(store, TARUF_ID, "a", None)
    rows = store.select("round1_selected", [eq("selector_registration_id", "a")])
    assert {r["first_choice"] for r in rows} == {None}


def test_set_round1_first_choice_without_rows(store, people):
    with pytest.raises(NotFound):
        set_round1_first_choice(store, TARUF_ID, "a", "200")


def test_list_round1_selected_filters(store, people):
    submit_round1(store, TARUF_ID, SELECTOR, [_pick("c", "300")])
    submit_round1(store, TARUF_ID, {"registration_id": "d", "its_number": "400"}, [_pick("b", "200")])

    assert len(list_round1_selected(store, TARUF_ID)) == 2
    assert [r["selected_registration_id"] for r in list_round1_selected(store, TARUF_ID, selector_id="a")] == ["c"]
    by_counsellor = list_round1_selected(store, TARUF_ID, counsellor="hatim")
    assert [r["selector_registration_id"] for r in by_counsellor] == ["d"]


def test_list_candidates_not_selectors(store, people):
    submit_round1(store, TARUF_ID, SELECTOR, [_pick("b", "200")])

    rows = list_candidates_not_selectors(store, TARUF_ID)

    assert {r["id"] for r in rows} == {"b", "c", "d"}
    assert all("password_hash" not in r for r in rows)


def test_submit_round2_requires_round1_and_once(store, people):
    with pytest.raises(Conflict):
        submit_round2(store, TARUF_ID, SELECTOR, _pick("b", "200"))

    submit_round1(store, TARUF_ID, SELECTOR, [_pick("b", "200")])
    assert submit_round2(store, TARUF_ID, SELECTOR, _pick("b", "200")) == {"success": True, "inserted": 1}
    with pytest.raises(Conflict):
        submit_round2(store, TARUF_ID, SELECTOR, _pick("c", "300"))


def test_submit_round2_requires_selection(store, people):
    with pytest.raises(ValidationFailed):
        submit_round2(store, TARUF_ID, SELECTOR, None)
