from typing import Any

from ..store import Store, any_of, eq, in_
from .identifiers import normalize_id, require_id, require_taruf_id

PROFILE_FIELDS = ("id", "name", "photo1_url", "its_number", "badge_no")


def _profile(row: dict[str, Any] | None) -> dict[str, Any] | None:
    if not row:
        return None
    return {k: row.get(k) for k in PROFILE_FIELDS}


def get_candidate_schedule(store: Store, taruf_id: Any, registration_id: Any) -> list[dict[str, Any]]:
    """Personal round-1 schedule: one entry per slot row the candidate appears in, by slot."""
    taruf_id = require_taruf_id(taruf_id)
    registration_id = require_id(registration_id, "registration_id")

    rows = store.select(
        "round1_slot",
        [
            eq("taruf_id", taruf_id),
            any_of(
                eq("selector_registration_id", registration_id),
                eq("selected_registration_id", registration_id),
            ),
        ],
    )
    if not rows:
        return []

    partner_ids: list[str] = []
    for r in rows:
        partner = _partner_id(r, registration_id)
        if partner and partner not in partner_ids:
            partner_ids.append(partner)
    profiles = {
        normalize_id(p["id"]): p
        for p in store.select("registrations", [in_("id", partner_ids)], order_by=("badge_no",))
    }

    schedule = [
        {
            "slot": r.get("slot"),
            "timings": r.get("timings"),
            "room_no": r.get("room_no"),
            "partner": _profile(profiles.get(_partner_id(r, registration_id))),
            "is_perfect_match": bool(r.get("is_perfect_match")),
            "is_first_choice": bool(r.get("is_first_choice")),
        }
        for r in rows
    ]
    schedule.sort(key=lambda e: int(e["slot"] or 0))
    return schedule


def _partner_id(row: dict[str, Any], registration_id: str) -> str | None:
    selector = normalize_id(row.get("selector_registration_id"))
    if selector == registration_id:
        return normalize_id(row.get("selected_registration_id"))
    return selector
