from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .identifiers import normalize_id, same_id


@dataclass
class ClassifiedSelection:
    row: dict[str, Any]
    is_perfect_match: bool
    is_first_choice_match: bool

    @property
    def taruf_id(self) -> Any:
        return self.row.get("taruf_id")

    @property
    def selector_id(self) -> str:
        return normalize_id(self.row.get("selector_registration_id")) or ""

    @property
    def selected_id(self) -> str:
        return normalize_id(self.row.get("selected_registration_id")) or ""

    @property
    def selected_its(self) -> str | None:
        return normalize_id(self.row.get("selected_its"))

    @property
    def qualifies(self) -> bool:
        return self.is_perfect_match or self.is_first_choice_match


def classify(rows: list[dict[str, Any]]) -> list[ClassifiedSelection]:
    """Annotate every round-1 selection row of one event with its match flags.

    A row is a perfect match when the reverse row (selected -> selector) is
    also present, and a first-choice match when its ``first_choice`` names
    its own selected candidate. Rows are returned in input order, unfiltered.
    """
    pairs = {
        (normalize_id(r.get("selector_registration_id")), normalize_id(r.get("selected_registration_id")))
        for r in rows
    }
    out: list[ClassifiedSelection] = []
    for r in rows:
        reverse = (normalize_id(r.get("selected_registration_id")), normalize_id(r.get("selector_registration_id")))
        out.append(
            ClassifiedSelection(
                row=r,
                is_perfect_match=reverse in pairs,
                is_first_choice_match=same_id(r.get("first_choice"), r.get("selected_its")),
            )
        )
    return out
