from typing import Any

from pydantic import BaseModel, Field


class TimingEntry(BaseModel):
    slot: Any = None
    timings: Any = None


class SlotTimingsRequest(BaseModel):
    timings: list[TimingEntry] = Field(default_factory=list)


class ManualSlotUpdateRequest(BaseModel):
    taruf_id: Any = None
    selector_registration_id: Any = None
    selected_registration_id: Any = None
    slot: Any = None
    room_no: Any = None
    candidate_its: Any = None


class FirstChoiceUpdateRequest(BaseModel):
    taruf_id: Any = None
    selector_registration_id: Any = None
    new_selected_registration_id: Any = None
