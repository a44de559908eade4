from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from ..errors import Conflict, NotFound, ValidationFailed
from ..store import Store, any_of, eq, gt, in_
from .events import log_assignment_event
from .identifiers import normalize_id, require_id, require_taruf_id

logger = logging.getLogger(__name__)

SLOTS_TABLE = "round1_slot"


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _slot_number(value: Any) -> int:
    try:
        return max(0, int(str(value).strip()))
    except (TypeError, ValueError):
        return 0


def _room(value: Any) -> str | None:
    if value is None:
        return None
    v = str(value).strip()
    return v or None


def manual_slot_update(
    store: Store,
    *,
    taruf_id: Any,
    selector_id: Any,
    selected_id: Any,
    slot: Any,
    room_no: Any,
    candidate_its: Any = None,
    actor_id: str | None = None,
) -> dict[str, Any]:
    taruf_id = require_taruf_id(taruf_id)
    selector_id = require_id(selector_id, "selector_registration_id")
    selected_id = require_id(selected_id, "selected_registration_id")
    slot_no = _slot_number(slot)
    room = _room(room_no)

    pair = [
        eq("taruf_id", taruf_id),
        eq("selector_registration_id", selector_id),
        eq("selected_registration_id", selected_id),
    ]
    patch: dict[str, Any] = {"slot": slot_no, "room_no": room, "updated_at": _now_utc()}
    its = normalize_id(candidate_its)
    if its is not None:
        patch["candidate_its"] = its

    with store.transaction() as tx:
        existing = tx.select(SLOTS_TABLE, pair, limit=1)
        if existing:
            slot_row = tx.update(SLOTS_TABLE, patch, [eq("id", existing[0]["id"])])[0]
            created = False
        else:
            selection = tx.select("round1_selected", pair, limit=1)
            if not selection:
                raise NotFound("Record not found. No round-1 selection exists for this pair.")
            slot_row = tx.insert(
                SLOTS_TABLE,
                [
                    {
                        "taruf_id": taruf_id,
                        "selector_registration_id": selector_id,
                        "selected_registration_id": selected_id,
                        "candidate_its": its or normalize_id(selection[0].get("selected_its")),
                        "slot": slot_no,
                        "room_no": room,
                        "is_perfect_match": False,
                        "is_first_choice": False,
                        "updated_at": _now_utc(),
                    }
                ],
            )[0]
            created = True
        # A room on the selection row locks the selector's round-1 choices.
        tx.update("round1_selected", {"room_no": room}, pair)
        log_assignment_event(
            tx,
            taruf_id=taruf_id,
            event_type="manual_slot_update",
            actor_id=actor_id,
            payload={
                "selector_registration_id": selector_id,
                "selected_registration_id": selected_id,
                "slot": slot_no,
                "room_no": room,
                "created": created,
            },
        )

    logger.info(
        "[slots] taruf=%s manual %s %s->%s slot=%s room=%s",
        taruf_id,
        "insert" if created else "update",
        selector_id,
        selected_id,
        slot_no,
        room,
    )
    return {
        "success": True,
        "message": "Slot and Room number updated successfully.",
        "created": created,
        "slot_entry": slot_row,
    }


def set_slot_timings(store: Store, taruf_id: Any, timings: Any, actor_id: str | None = None) -> dict[str, Any]:
    taruf_id = require_taruf_id(taruf_id)
    if not isinstance(timings, list):
        raise ValidationFailed("timings must be an array of {slot, timings}")

    updated_slots = 0
    updated_rows = 0
    skipped: list[Any] = []
    with store.transaction() as tx:
        for item in timings:
            item = item if isinstance(item, dict) else {}
            slot_no = _slot_number(item.get("slot"))
            timing = str(item.get("timings") or item.get("timing") or "").strip()
            if slot_no <= 0 or not timing:
                skipped.append(item.get("slot"))
                continue
            rows = tx.update(SLOTS_TABLE, {"timings": timing}, [eq("taruf_id", taruf_id), eq("slot", slot_no)])
            if not rows:
                skipped.append(item.get("slot"))
                continue
            updated_slots += 1
            updated_rows += len(rows)
        log_assignment_event(
            tx,
            taruf_id=taruf_id,
            event_type="set_timings",
            actor_id=actor_id,
            payload={"updated_slots": updated_slots, "updated_rows": updated_rows, "skipped": skipped},
        )

    return {
        "success": True,
        "updated_slots": updated_slots,
        "updated_rows": updated_rows,
        "skipped": skipped,
        "message": f"Successfully updated timings for {updated_slots} slots.",
    }


def replace_first_choice(
    store: Store,
    *,
    taruf_id: Any,
    selector_id: Any,
    new_selected_id: Any,
    actor_id: str | None = None,
) -> dict[str, Any]:
    """Swap the partner in a selector's already-slotted first-choice row.

    The slot and room stay as they are. The new partner must not hold a
    nonzero slot anywhere in the event.
    """
    taruf_id = require_taruf_id(taruf_id)
    selector_id = require_id(selector_id, "selector_registration_id")
    new_selected_id = require_id(new_selected_id, "selected_registration_id")
    if new_selected_id == "0":
        raise ValidationFailed("Clearing the first choice is not supported; select a replacement candidate")

    with store.transaction() as tx:
        booked = tx.select(
            SLOTS_TABLE,
            [
                eq("taruf_id", taruf_id),
                gt("slot", 0),
                any_of(
                    eq("selected_registration_id", new_selected_id),
                    eq("selector_registration_id", new_selected_id),
                ),
            ],
            limit=1,
        )
        if booked:
            raise Conflict(
                f"The selected candidate is already booked in Slot {booked[0]['slot']}.",
                details={"slot": booked[0]["slot"]},
            )

        current = tx.select(
            SLOTS_TABLE,
            [eq("taruf_id", taruf_id), eq("selector_registration_id", selector_id), eq("is_first_choice", True)],
            limit=1,
        )
        if not current:
            raise NotFound("No existing 'First Choice' assignment found for this selector.")

        patch: dict[str, Any] = {"selected_registration_id": new_selected_id, "updated_at": _now_utc()}
        registration = tx.select("registrations", [eq("id", new_selected_id)], limit=1)
        if registration:
            patch["candidate_its"] = normalize_id(registration[0].get("its_number"))
        updated = tx.update(SLOTS_TABLE, patch, [eq("id", current[0]["id"])])[0]
        log_assignment_event(
            tx,
            taruf_id=taruf_id,
            event_type="replace_first_choice",
            actor_id=actor_id,
            payload={
                "selector_registration_id": selector_id,
                "previous_selected_registration_id": current[0]["selected_registration_id"],
                "selected_registration_id": new_selected_id,
                "slot": updated["slot"],
            },
        )

    logger.info(
        "[slots] taruf=%s first choice of %s replaced %s -> %s",
        taruf_id,
        selector_id,
        current[0]["selected_registration_id"],
        new_selected_id,
    )
    return {
        "success": True,
        "message": f"First Choice candidate replaced with ID: {new_selected_id}.",
        "slot_entry": updated,
    }


def list_slots(store: Store, taruf_id: Any = None) -> list[dict[str, Any]]:
    filters = [eq("taruf_id", require_taruf_id(taruf_id))] if taruf_id not in (None, "") else []
    slots = store.select(SLOTS_TABLE, filters, order_by=("taruf_id", "slot"))
    if not slots:
        return []

    ids: set[str] = set()
    for s in slots:
        ids.update(i for i in (s.get("selector_registration_id"), s.get("selected_registration_id")) if i)
    registrations = {r["id"]: r for r in store.select("registrations", [in_("id", sorted(ids))])}

    out: list[dict[str, Any]] = []
    for s in slots:
        selector = registrations.get(s.get("selector_registration_id")) or {}
        selected = registrations.get(s.get("selected_registration_id")) or {}
        out.append(
            {
                "id": s["id"],
                "taruf_id": s.get("taruf_id"),
                "slot": s.get("slot"),
                "timings": s.get("timings"),
                "room_no": s.get("room_no"),
                "admin_note": s.get("admin_note"),
                "is_perfect_match": bool(s.get("is_perfect_match")),
                "is_first_choice": bool(s.get("is_first_choice")),
                "selector_registration_id": s.get("selector_registration_id"),
                "selector_its": selector.get("its_number") or "N/A",
                "selector_name": (selector.get("name") or "").strip(),
                "selected_registration_id": s.get("selected_registration_id"),
                "selected_its": selected.get("its_number") or "N/A",
                "selected_name": (selected.get("name") or "").strip(),
            }
        )
    return out
