from typing import Any

from fastapi import APIRouter, Depends

from ..auth.admin_deps import get_current_actor, get_current_admin
from ..deps import ensure_can_act_for, get_store
from ..schemas import FirstChoiceUpdateRequest, ManualSlotUpdateRequest, SlotTimingsRequest
from ..services.schedule import get_candidate_schedule
from ..services.slot_admin import list_slots, manual_slot_update, replace_first_choice, set_slot_timings
from ..services.slot_assignment import clear_auto_slots, run_auto_assignment
from ..store import Store

router = APIRouter()
scaffold_router = APIRouter()


@scaffold_router.get("/health")
def slots_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "slots"}


@router.post("/{taruf_id}/round1_slots/auto")
def auto_assign(
    taruf_id: str,
    admin: dict[str, Any] = Depends(get_current_admin),
    store: Store = Depends(get_store),
) -> dict[str, Any]:
    return run_auto_assignment(store, taruf_id, actor_id=admin.get("id"))


@router.post("/{taruf_id}/round1_slots/clear")
def clear_slot(
    taruf_id: str,
    slot: str | None = None,
    admin: dict[str, Any] = Depends(get_current_admin),
    store: Store = Depends(get_store),
) -> dict[str, Any]:
    return clear_auto_slots(store, taruf_id, slot, actor_id=admin.get("id"))


@router.post("/round1_slot/manual-update")
def manual_update(
    payload: ManualSlotUpdateRequest,
    admin: dict[str, Any] = Depends(get_current_admin),
    store: Store = Depends(get_store),
) -> dict[str, Any]:
    return manual_slot_update(
        store,
        taruf_id=payload.taruf_id,
        selector_id=payload.selector_registration_id,
        selected_id=payload.selected_registration_id,
        slot=payload.slot,
        room_no=payload.room_no,
        candidate_its=payload.candidate_its,
        actor_id=admin.get("id"),
    )


@router.post("/{taruf_id}/round1_slots/timings")
def update_timings(
    taruf_id: str,
    payload: SlotTimingsRequest,
    admin: dict[str, Any] = Depends(get_current_admin),
    store: Store = Depends(get_store),
) -> dict[str, Any]:
    return set_slot_timings(store, taruf_id, [t.model_dump() for t in payload.timings], actor_id=admin.get("id"))


@router.post("/round1_slot/first-choice-update")
def first_choice_update(
    payload: FirstChoiceUpdateRequest,
    admin: dict[str, Any] = Depends(get_current_admin),
    store: Store = Depends(get_store),
) -> dict[str, Any]:
    return replace_first_choice(
        store,
        taruf_id=payload.taruf_id,
        selector_id=payload.selector_registration_id,
        new_selected_id=payload.new_selected_registration_id,
        actor_id=admin.get("id"),
    )


@router.get("/candidate_schedule/{taruf_id}/{registration_id}")
def candidate_schedule(
    taruf_id: str,
    registration_id: str,
    actor: dict[str, Any] = Depends(get_current_actor),
    store: Store = Depends(get_store),
) -> dict[str, Any]:
    ensure_can_act_for(actor, registration_id)
    return {"success": True, "schedule": get_candidate_schedule(store, taruf_id, registration_id)}


@router.get("/admin/round1_slots")
def admin_round1_slots(
    taruf_id: str | None = None,
    _: dict[str, Any] = Depends(get_current_admin),
    store: Store = Depends(get_store),
) -> dict[str, Any]:
    return {"success": True, "data": list_slots(store, taruf_id)}
