from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .. import config
from ..errors import ValidationFailed
from ..store import Store, any_of, eq
from .classifier import ClassifiedSelection, classify
from .events import log_assignment_event
from .identifiers import require_taruf_id

logger = logging.getLogger(__name__)

SELECTIONS_TABLE = "round1_selected"
SLOTS_TABLE = "round1_slot"


def auto_assigned() -> Any:
    # Rows the engine owns; manual rows carry neither flag.
    return any_of(eq("is_perfect_match", True), eq("is_first_choice", True))


@dataclass
class SlotState:
    room_counter: int = 1
    booked: set[str] = field(default_factory=set)


@dataclass
class AssignmentPlan:
    entries: list[dict[str, Any]] = field(default_factory=list)
    max_assigned_slot: int = 0
    unassigned: list[tuple[str, str]] = field(default_factory=list)


def find_available_slot(
    slots: dict[int, SlotState],
    selector_id: str,
    selected_id: str,
    capacity: int,
    max_search: int,
) -> int | None:
    for slot_no in range(1, max_search + 1):
        state = slots.setdefault(slot_no, SlotState())
        if selector_id in state.booked or selected_id in state.booked:
            continue
        if state.room_counter > capacity:
            continue
        return slot_no
    return None


def plan_assignments(
    classified: list[ClassifiedSelection],
    *,
    capacity: int | None = None,
    max_search: int | None = None,
) -> AssignmentPlan:
    """Greedily place every qualifying pair into the lowest free slot.

    Perfect matches are drained first so they claim the earliest slots;
    first-choice-only rows then fill whatever capacity remains. A reciprocal
    pair appears as two rows but is placed once.
    """
    if capacity is None:
        capacity = config.ROOM_CAPACITY
    if max_search is None:
        max_search = config.MAX_SLOT_SEARCH

    perfect = [c for c in classified if c.is_perfect_match]
    first_choice_only = [c for c in classified if not c.is_perfect_match and c.is_first_choice_match]

    plan = AssignmentPlan()
    slots: dict[int, SlotState] = {}
    processed: set[tuple[str, str]] = set()

    def _place(c: ClassifiedSelection, is_first_choice: bool) -> None:
        selector_id, selected_id = c.selector_id, c.selected_id
        if (selector_id, selected_id) in processed:
            return
        processed.add((selector_id, selected_id))
        processed.add((selected_id, selector_id))
        slot_no = find_available_slot(slots, selector_id, selected_id, capacity, max_search)
        if slot_no is None:
            plan.unassigned.append((selector_id, selected_id))
            return
        state = slots[slot_no]
        room_no = state.room_counter
        state.room_counter += 1
        state.booked.update((selector_id, selected_id))
        plan.max_assigned_slot = max(plan.max_assigned_slot, slot_no)
        plan.entries.append(
            {
                "taruf_id": c.taruf_id,
                "selector_registration_id": selector_id,
                "selected_registration_id": selected_id,
                "candidate_its": c.selected_its,
                "slot": slot_no,
                "room_no": str(room_no),
                "timings": config.TIMINGS_PLACEHOLDER,
                "is_perfect_match": c.is_perfect_match,
                "is_first_choice": is_first_choice,
            }
        )

    for c in perfect:
        _place(c, c.is_first_choice_match)
    for c in first_choice_only:
        _place(c, True)
    return plan


def run_auto_assignment(store: Store, taruf_id: Any, actor_id: str | None = None) -> dict[str, Any]:
    taruf_id = require_taruf_id(taruf_id)
    rows = store.select(SELECTIONS_TABLE, [eq("taruf_id", taruf_id)])
    plan = plan_assignments(classify(rows))

    for selector_id, selected_id in plan.unassigned:
        logger.warning(
            "[assign] taruf=%s no slot within %s for pair %s->%s",
            taruf_id,
            config.MAX_SLOT_SEARCH,
            selector_id,
            selected_id,
        )

    # Old auto rows are replaced in the same transaction as the new ones.
    with store.transaction() as tx:
        removed = tx.delete(SLOTS_TABLE, [eq("taruf_id", taruf_id), auto_assigned()])
        tx.insert(SLOTS_TABLE, plan.entries)
        log_assignment_event(
            tx,
            taruf_id=taruf_id,
            event_type="auto_assign",
            actor_id=actor_id,
            payload={
                "assigned_pairs": len(plan.entries),
                "max_assigned_slot": plan.max_assigned_slot,
                "removed_rows": len(removed),
                "unassigned_pairs": len(plan.unassigned),
            },
        )

    logger.info(
        "[assign] taruf=%s selections=%s assigned=%s slots=%s replaced=%s",
        taruf_id,
        len(rows),
        len(plan.entries),
        plan.max_assigned_slot,
        len(removed),
    )
    if plan.entries:
        message = (
            f"Successfully assigned {len(plan.entries)} pairs across {plan.max_assigned_slot} slots. "
            f"Timings are set to '{config.TIMINGS_PLACEHOLDER}'."
        )
    else:
        message = "No new pairs to assign based on current selections."
    return {
        "success": True,
        "assigned_pairs": len(plan.entries),
        "max_assigned_slot": plan.max_assigned_slot,
        "unassigned_pairs": [
            {"selector_registration_id": a, "selected_registration_id": b} for a, b in plan.unassigned
        ],
        "message": message,
    }


def clear_auto_slots(store: Store, taruf_id: Any, slot: Any, actor_id: str | None = None) -> dict[str, Any]:
    taruf_id = require_taruf_id(taruf_id)
    try:
        slot_no = int(str(slot).strip())
    except (TypeError, ValueError):
        raise ValidationFailed("slot must be a positive integer") from None
    if slot_no <= 0:
        raise ValidationFailed("slot must be a positive integer")

    with store.transaction() as tx:
        cleared = tx.delete(SLOTS_TABLE, [eq("taruf_id", taruf_id), eq("slot", slot_no), auto_assigned()])
        log_assignment_event(
            tx,
            taruf_id=taruf_id,
            event_type="clear_auto_slots",
            actor_id=actor_id,
            payload={"slot": slot_no, "cleared": len(cleared)},
        )
    logger.info("[assign] taruf=%s cleared %s auto rows from slot %s", taruf_id, len(cleared), slot_no)
    return {"success": True, "cleared_count": len(cleared)}
