from typing import Any

from fastapi import APIRouter, Depends

from ..auth.admin_deps import get_current_actor, get_current_admin
from ..deps import ensure_can_act_for, get_store
from ..errors import ValidationFailed
from ..services.selections import (
    add_round1_selection,
    delete_round1_selection,
    list_candidates_not_selectors,
    list_round1_selected,
    set_round1_first_choice,
    submit_round1,
    submit_round2,
)
from ..store import Store

router = APIRouter()
scaffold_router = APIRouter()


@scaffold_router.get("/health")
def selections_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "selections"}


def _selector(payload: dict[str, Any], actor: dict[str, Any]) -> dict[str, Any]:
    selector = payload.get("selector")
    if not isinstance(selector, dict):
        raise ValidationFailed("Missing selector")
    ensure_can_act_for(actor, selector.get("registration_id"))
    return selector


@router.post("/{taruf_id}/round1/submit")
def round1_submit(
    taruf_id: str,
    payload: dict[str, Any],
    actor: dict[str, Any] = Depends(get_current_actor),
    store: Store = Depends(get_store),
) -> dict[str, Any]:
    selector = _selector(payload, actor)
    return submit_round1(store, taruf_id, selector, payload.get("selections"), payload.get("first_choice"))


@router.get("/round1_selected")
def round1_selected(
    taruf_id: str | None = None,
    selector_id: str | None = None,
    counsellor: str | None = None,
    actor: dict[str, Any] = Depends(get_current_actor),
    store: Store = Depends(get_store),
) -> dict[str, Any]:
    if actor.get("role") != "admin":
        # Candidates only ever see their own selections.
        selector_id = selector_id or actor.get("id")
        ensure_can_act_for(actor, selector_id)
        counsellor = None
    rows = list_round1_selected(store, taruf_id, selector_id=selector_id, counsellor=counsellor)
    return {"success": True, "data": rows}


@router.post("/{taruf_id}/round1_selected")
def round1_add(
    taruf_id: str,
    payload: dict[str, Any],
    actor: dict[str, Any] = Depends(get_current_actor),
    store: Store = Depends(get_store),
) -> dict[str, Any]:
    selector = _selector(payload, actor)
    selected = payload.get("selected")
    if not isinstance(selected, dict):
        raise ValidationFailed("Missing selected candidate")
    return add_round1_selection(store, taruf_id, selector, selected)


@router.delete("/{taruf_id}/round1_selected")
def round1_delete(
    taruf_id: str,
    selector_id: str | None = None,
    selected_id: str | None = None,
    actor: dict[str, Any] = Depends(get_current_actor),
    store: Store = Depends(get_store),
) -> dict[str, Any]:
    ensure_can_act_for(actor, selector_id)
    return delete_round1_selection(store, taruf_id, selector_id, selected_id)


@router.patch("/{taruf_id}/round1_selected/first_choice")
def round1_first_choice(
    taruf_id: str,
    payload: dict[str, Any],
    actor: dict[str, Any] = Depends(get_current_actor),
    store: Store = Depends(get_store),
) -> dict[str, Any]:
    selector_id = payload.get("selector_id")
    ensure_can_act_for(actor, selector_id)
    return set_round1_first_choice(store, taruf_id, selector_id, payload.get("first_choice"))


@router.get("/candidates_not_selectors")
def candidates_not_selectors(
    taruf_id: str | None = None,
    _: dict[str, Any] = Depends(get_current_admin),
    store: Store = Depends(get_store),
) -> dict[str, Any]:
    return {"success": True, "data": list_candidates_not_selectors(store, taruf_id)}


@router.post("/{taruf_id}/round2/submit")
def round2_submit(
    taruf_id: str,
    payload: dict[str, Any],
    actor: dict[str, Any] = Depends(get_current_actor),
    store: Store = Depends(get_store),
) -> dict[str, Any]:
    selector = _selector(payload, actor)
    return submit_round2(store, taruf_id, selector, payload.get("selection"))
