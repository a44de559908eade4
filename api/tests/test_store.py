import pytest
from sqlalchemy.exc import OperationalError

from taruf.errors import Conflict, StoreError
from taruf.store import Store, any_of, eq, gt, in_, neq


def _seed(store):
    store.insert(
        "round1_slot",
        [
            {"taruf_id": 1, "selector_registration_id": "a", "selected_registration_id": "b", "slot": 1, "is_perfect_match": True},
            {"taruf_id": 1, "selector_registration_id": "c", "selected_registration_id": "d", "slot": 2, "is_first_choice": True},
            {"taruf_id": 1, "selector_registration_id": "e", "selected_registration_id": "f", "slot": 0},
            {"taruf_id": 2, "selector_registration_id": "a", "selected_registration_id": "c", "slot": 1},
        ],
    )


def _pairs(rows):
    return [(r["selector_registration_id"], r["selected_registration_id"]) for r in rows]


def test_insert_returns_rows_with_generated_ids(store):
    rows = store.insert("tarufs", [{"name": "Spring"}, {"name": "Autumn", "status": 0}])
    assert [r["name"] for r in rows] == ["Spring", "Autumn"]
    assert rows[0]["id"] < rows[1]["id"]
    assert rows[0]["status"] == 1


def test_filters(store):
    _seed(store)
    assert _pairs(store.select("round1_slot", [eq("taruf_id", 1), gt("slot", 0)])) == [("a", "b"), ("c", "d")]
    assert _pairs(store.select("round1_slot", [neq("taruf_id", 1)])) == [("a", "c")]
    assert _pairs(store.select("round1_slot", [in_("selector_registration_id", ["c", "e"])])) == [("c", "d"), ("e", "f")]
    assert store.select("round1_slot", [in_("selector_registration_id", [])]) == []
    either = any_of(eq("is_perfect_match", True), eq("is_first_choice", True))
    assert _pairs(store.select("round1_slot", [either])) == [("a", "b"), ("c", "d")]


def test_order_by_and_limit(store):
    _seed(store)
    rows = store.select("round1_slot", [eq("taruf_id", 1)], order_by=("-slot",), limit=2)
    assert [r["slot"] for r in rows] == [2, 1]


def test_update_and_delete_return_affected_rows(store):
    _seed(store)
    updated = store.update("round1_slot", {"timings": "9:00"}, [eq("taruf_id", 1), eq("slot", 1)])
    assert _pairs(updated) == [("a", "b")]
    assert updated[0]["timings"] == "9:00"

    deleted = store.delete("round1_slot", [eq("taruf_id", 2)])
    assert _pairs(deleted) == [("a", "c")]
    assert store.select("round1_slot", [eq("taruf_id", 2)]) == []


def test_update_and_delete_require_filters(store):
    with pytest.raises(ValueError):
        store.update("round1_slot", {"slot": 1}, [])
    with pytest.raises(ValueError):
        store.delete("round1_slot", [])


def test_unknown_table_or_column(store):
    with pytest.raises(ValueError):
        store.select("nope")
    with pytest.raises(ValueError):
        store.select("round1_slot", [eq("nope", 1)])


def test_transaction_rolls_back_on_error(store):
    _seed(store)
    with pytest.raises(Conflict):
        with store.transaction() as tx:
            tx.delete("round1_slot", [eq("taruf_id", 1)])
            raise Conflict("stop")
    assert len(store.select("round1_slot", [eq("taruf_id", 1)])) == 3


def test_database_errors_become_store_errors():
    class _BrokenSession:
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

        def execute(self, *args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        def rollback(self):
            return None

        def commit(self):
            return None

    broken = Store(lambda: _BrokenSession())
    with pytest.raises(StoreError) as exc:
        broken.select("round1_slot")
    assert exc.value.status_code == 500
    assert exc.value.payload["error"]["code"] == "store_error"
