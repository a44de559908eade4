from taruf.services.schedule import get_candidate_schedule
from taruf.services.slot_assignment import run_auto_assignment

TARUF_ID = 7


def _seed(add_registration, add_selection):
    add_registration("a", "100", "Ali", badge_no=1)
    add_registration("b", "200", "Bushra", badge_no=2, photo1_url="https://img/b.jpg")
    add_registration("c", "300", "Fatema", badge_no=3)
    for x, y in (("a", "b"), ("b", "a"), ("a", "c"), ("c", "a")):
        add_selection(x, y)


def test_schedule_lists_every_slot_sorted(store, add_registration, add_selection):
    _seed(add_registration, add_selection)
    run_auto_assignment(store, TARUF_ID)

    schedule = get_candidate_schedule(store, TARUF_ID, "a")

    assert [e["slot"] for e in schedule] == [1, 2]
    assert [e["partner"]["id"] for e in schedule] == ["b", "c"]
    assert schedule[0]["partner"]["photo1_url"] == "https://img/b.jpg"
    assert schedule[0]["partner"]["its_number"] == "200"
    assert schedule[0]["room_no"] == "1"
    assert schedule[0]["is_perfect_match"] is True


def test_schedule_resolves_partner_from_either_role(store, add_registration, add_selection):
    _seed(add_registration, add_selection)
    run_auto_assignment(store, TARUF_ID)

    schedule = get_candidate_schedule(store, TARUF_ID, "c")

    assert len(schedule) == 1
    assert schedule[0]["slot"] == 2
    assert schedule[0]["partner"]["name"] == "Ali"


def test_schedule_empty_for_unassigned_candidate(store, add_registration, add_selection):
    _seed(add_registration, add_selection)
    run_auto_assignment(store, TARUF_ID)

    assert get_candidate_schedule(store, TARUF_ID, "nobody") == []


def test_schedule_partner_missing_registration(store, add_selection):
    add_selection("a", "ghost")
    add_selection("ghost", "a")
    run_auto_assignment(store, TARUF_ID)

    schedule = get_candidate_schedule(store, TARUF_ID, "a")

    assert len(schedule) == 1
    assert schedule[0]["partner"] is None


def test_schedule_keeps_zero_prefixed_partner_id(store, add_registration, add_selection):
    add_registration("a", "100", "Ali")
    add_registration("0042", "0500", "Sakina")
    add_selection("a", "0042", selected_its="0500")
    add_selection("0042", "a", selected_its="100")
    run_auto_assignment(store, TARUF_ID)

    schedule = get_candidate_schedule(store, TARUF_ID, "a")

    assert schedule[0]["partner"]["id"] == "0042"
    assert schedule[0]["partner"]["its_number"] == "0500"
    assert get_candidate_schedule(store, TARUF_ID, "0042")[0]["partner"]["name"] == "Ali"
