from __future__ import annotations

import logging
from typing import Any

from .. import config
from ..errors import Conflict, NotFound, ValidationFailed
from ..store import Store, StoreSession, eq
from .identifiers import normalize_id, require_id, require_taruf_id

logger = logging.getLogger(__name__)

ROUND1_TABLE = "round1_selected"
ROUND2_TABLE = "round2_selected"


def _text(value: Any) -> str | None:
    if value is None:
        return None
    v = str(value).strip()
    return v or None


def is_locked(rows: list[dict[str, Any]]) -> bool:
    return any(_text(r.get("room_no")) for r in rows)


def _selector_rows(tx: StoreSession, taruf_id: int, selector_id: str) -> list[dict[str, Any]]:
    return tx.select(ROUND1_TABLE, [eq("taruf_id", taruf_id), eq("selector_registration_id", selector_id)])


def _ensure_unlocked(rows: list[dict[str, Any]]) -> None:
    if is_locked(rows):
        raise Conflict("Selections locked, room assigned")


def _selector_fields(selector: dict[str, Any]) -> dict[str, Any]:
    return {
        "selector_its": normalize_id(selector.get("its_number") or selector.get("selector_its")),
        "selector_name": _text(selector.get("name") or selector.get("selector_name")),
    }


def _selected_fields(selected: dict[str, Any]) -> dict[str, Any]:
    return {
        "selected_registration_id": normalize_id(selected.get("registration_id") or selected.get("selected_registration_id")),
        "selected_its": normalize_id(selected.get("its_number") or selected.get("selected_its")),
        "selected_name": _text(selected.get("name") or selected.get("selected_name")),
        "selected_photo1url": _text(selected.get("photo1_url") or selected.get("selected_photo1url")),
        "selected_date_of_birth": _text(selected.get("date_of_birth") or selected.get("selected_date_of_birth")),
    }


def _counsellor(tx: StoreSession, taruf_id: int, registration_id: str) -> str | None:
    rows = tx.select("registrations", [eq("taruf_id", taruf_id), eq("id", registration_id)], limit=1)
    return rows[0].get("counsellor") if rows else None


def submit_round1(
    store: Store,
    taruf_id: Any,
    selector: dict[str, Any],
    selections: Any,
    first_choice: Any = None,
) -> dict[str, Any]:
    """Bulk round-1 submission; a selector submits once."""
    taruf_id = require_taruf_id(taruf_id)
    selector_id = require_id(selector.get("registration_id"), "selector registration_id")
    if not isinstance(selections, list) or not selections:
        raise ValidationFailed("No selections provided")
    if len(selections) > config.MAX_ROUND1_SELECTIONS:
        raise ValidationFailed(f"Max {config.MAX_ROUND1_SELECTIONS} selections allowed")

    selector_fields = _selector_fields(selector)
    first_choice_its = normalize_id(first_choice)
    seen: set[str] = set()
    rows: list[dict[str, Any]] = []
    for item in selections:
        if not isinstance(item, dict):
            continue
        fields = _selected_fields(item)
        selected_id = fields["selected_registration_id"]
        if not selected_id or selected_id == selector_id or selected_id in seen:
            continue
        if selector_fields["selector_its"] and fields["selected_its"] == selector_fields["selector_its"]:
            continue
        seen.add(selected_id)
        rows.append({"taruf_id": taruf_id, "selector_registration_id": selector_id, **selector_fields, **fields})

    skipped = len(selections) - len(rows)
    if first_choice_its and not any(r["selected_its"] == first_choice_its for r in rows):
        raise ValidationFailed("first_choice must be the ITS number of one of the selections")

    with store.transaction() as tx:
        if _selector_rows(tx, taruf_id, selector_id):
            raise Conflict("Round1 already submitted by this candidate")
        if not rows:
            return {"success": True, "inserted_count": 0, "skipped_count": skipped}
        counsellor = _counsellor(tx, taruf_id, selector_id)
        for r in rows:
            r["selector_counsellor"] = counsellor
            r["first_choice"] = first_choice_its
        inserted = tx.insert(ROUND1_TABLE, rows)

    logger.info("[selections] taruf=%s selector=%s round1 inserted=%s skipped=%s", taruf_id, selector_id, len(inserted), skipped)
    return {"success": True, "inserted_count": len(inserted), "skipped_count": skipped}


def add_round1_selection(store: Store, taruf_id: Any, selector: dict[str, Any], selected: dict[str, Any]) -> dict[str, Any]:
    taruf_id = require_taruf_id(taruf_id)
    selector_id = require_id(selector.get("registration_id"), "selector_id")
    fields = _selected_fields(selected)
    selected_id = require_id(fields["selected_registration_id"], "selected_registration_id")
    if selected_id == selector_id:
        raise ValidationFailed("A candidate cannot select themselves")

    with store.transaction() as tx:
        existing = _selector_rows(tx, taruf_id, selector_id)
        _ensure_unlocked(existing)
        if len(existing) >= config.MAX_ROUND1_SELECTIONS:
            raise Conflict(f"Max {config.MAX_ROUND1_SELECTIONS} selections allowed")
        if any(normalize_id(r.get("selected_registration_id")) == selected_id for r in existing):
            raise Conflict("Candidate already selected")
        row = {
            "taruf_id": taruf_id,
            "selector_registration_id": selector_id,
            **_selector_fields(selector),
            **fields,
            "selector_counsellor": _counsellor(tx, taruf_id, selector_id),
            # Keep the selector's first choice consistent across all of their rows.
            "first_choice": existing[0].get("first_choice") if existing else None,
        }
        inserted = tx.insert(ROUND1_TABLE, [row])[0]
    return {"success": True, "row": inserted}


def delete_round1_selection(store: Store, taruf_id: Any, selector_id: Any, selected_id: Any) -> dict[str, Any]:
    taruf_id = require_taruf_id(taruf_id)
    selector_id = require_id(selector_id, "selector_id")
    selected_id = require_id(selected_id, "selected_registration_id")

    with store.transaction() as tx:
        _ensure_unlocked(_selector_rows(tx, taruf_id, selector_id))
        deleted = tx.delete(
            ROUND1_TABLE,
            [
                eq("taruf_id", taruf_id),
                eq("selector_registration_id", selector_id),
                eq("selected_registration_id", selected_id),
            ],
        )
    if not deleted:
        raise NotFound("Selection not found or already deleted")
    return {"success": True, "deleted": len(deleted), "message": "Selection deleted successfully"}


def set_round1_first_choice(store: Store, taruf_id: Any, selector_id: Any, first_choice: Any) -> dict[str, Any]:
    taruf_id = require_taruf_id(taruf_id)
    selector_id = require_id(selector_id, "selector_id")
    value = normalize_id(first_choice)

    with store.transaction() as tx:
        existing = _selector_rows(tx, taruf_id, selector_id)
        if not existing:
            raise NotFound("No round-1 selections found for this selector")
        _ensure_unlocked(existing)
        if value is not None and not any(normalize_id(r.get("selected_its")) == value for r in existing):
            raise ValidationFailed("first_choice must be the ITS number of one of the selector's selections")
        updated = tx.update(
            ROUND1_TABLE,
            {"first_choice": value},
            [eq("taruf_id", taruf_id), eq("selector_registration_id", selector_id)],
        )
    return {"success": True, "updated": len(updated)}


def list_round1_selected(
    store: Store,
    taruf_id: Any,
    selector_id: Any = None,
    counsellor: str | None = None,
) -> list[dict[str, Any]]:
    taruf_id = require_taruf_id(taruf_id)
    filters = [eq("taruf_id", taruf_id)]
    selector = normalize_id(selector_id)
    if selector:
        filters.append(eq("selector_registration_id", selector))
    rows = store.select(ROUND1_TABLE, filters)

    needle = (counsellor or "").strip().lower()
    if not needle:
        return rows
    counselled = {
        r["id"]
        for r in store.select("registrations", [eq("taruf_id", taruf_id)])
        if needle in str(r.get("counsellor") or "").lower()
    }
    return [
        r
        for r in rows
        if r.get("selector_registration_id") in counselled or r.get("selected_registration_id") in counselled
    ]


def list_candidates_not_selectors(store: Store, taruf_id: Any) -> list[dict[str, Any]]:
    taruf_id = require_taruf_id(taruf_id)
    registrations = store.select("registrations", [eq("taruf_id", taruf_id)], order_by=("badge_no",))
    selector_its = {
        normalize_id(r.get("selector_its"))
        for r in store.select(ROUND1_TABLE, [eq("taruf_id", taruf_id)])
    }
    selector_its.discard(None)
    out = []
    for r in registrations:
        its = normalize_id(r.get("its_number"))
        if its and its not in selector_its:
            out.append({k: v for k, v in r.items() if k != "password_hash"})
    return out


def submit_round2(store: Store, taruf_id: Any, selector: dict[str, Any], selection: Any) -> dict[str, Any]:
    taruf_id = require_taruf_id(taruf_id)
    selector_id = require_id(selector.get("registration_id"), "selector_id")
    if not isinstance(selection, dict):
        raise ValidationFailed("Missing selection")
    fields = _selected_fields(selection)
    require_id(fields["selected_registration_id"], "selection registration_id")

    with store.transaction() as tx:
        if not _selector_rows(tx, taruf_id, selector_id):
            raise Conflict("Selector did not complete Round 1")
        if tx.select(ROUND2_TABLE, [eq("taruf_id", taruf_id), eq("selector_registration_id", selector_id)], limit=1):
            raise Conflict("Round2 already submitted by this selector")
        tx.insert(
            ROUND2_TABLE,
            [
                {
                    "taruf_id": taruf_id,
                    "selector_registration_id": selector_id,
                    **_selector_fields(selector),
                    "selected_registration_id": fields["selected_registration_id"],
                    "selected_its": fields["selected_its"],
                    "selected_name": fields["selected_name"],
                }
            ],
        )
    return {"success": True, "inserted": 1}
