"""Demo slot domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...models import DemoSlot, DemoSlotStatus


def _validate_duration(v):
    if v is not None and v < 1:
        raise ValueError("Duration must be a positive number of minutes")
    return v


class DemoSlotCreate(BaseModel):
    """Schema for requesting a demo slot.

    title/eventId are optional here so missing values surface as a 400 from
    the booking workflow rather than a 422.
    """

    eventId: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    requestedTime: Optional[str] = None
    durationMinutes: Optional[int] = None

    @field_validator("durationMinutes")
    @classmethod
    def validate_duration(cls, v):
        return _validate_duration(v)


class DemoSlotUpdate(BaseModel):
    """Schema for editing slot details; status changes go through /status"""

    title: Optional[str] = None
    description: Optional[str] = None
    requestedTime: Optional[str] = None
    durationMinutes: Optional[int] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Title cannot be empty")
        return v

    @field_validator("durationMinutes")
    @classmethod
    def validate_duration(cls, v):
        return _validate_duration(v)


class StatusTransitionRequest(BaseModel):
    status: DemoSlotStatus


class DemoSlotRead(BaseModel):
    """Schema for demo slot response"""

    id: str
    memberId: str
    eventId: str
    title: str
    description: Optional[str] = None
    requestedTime: Optional[str] = None
    durationMinutes: int
    status: DemoSlotStatus
    confirmedByOrganizer: bool
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def from_model(cls, slot: DemoSlot) -> "DemoSlotRead":
        return cls(
            id=slot.id,
            memberId=slot.member_id,
            eventId=slot.event_id,
            title=slot.title,
            description=slot.description,
            requestedTime=slot.requested_time,
            durationMinutes=slot.duration_minutes,
            status=slot.status,
            confirmedByOrganizer=slot.confirmed_by_organizer,
            createdAt=slot.created_at,
            updatedAt=slot.updated_at,
        )


class SlotMember(BaseModel):
    id: str
    lumaEmail: str
    githubUsername: Optional[str] = None


class SlotEvent(BaseModel):
    id: str
    name: str
    startAt: Optional[datetime] = None


def slot_member(slot: DemoSlot) -> SlotMember:
    return SlotMember(
        id=slot.member.id,
        lumaEmail=slot.member.luma_email,
        githubUsername=slot.member.github_username,
    )


class DemoSlotWithMemberRead(DemoSlotRead):
    """Demo slot with its presenter, for an event's demo list"""

    member: SlotMember

    @classmethod
    def from_model(cls, slot: DemoSlot) -> "DemoSlotWithMemberRead":
        base = DemoSlotRead.from_model(slot).model_dump()
        return cls(**base, member=slot_member(slot))


class AdminDemoSlotRead(DemoSlotWithMemberRead):
    """Demo slot with presenter and event, for the organizer dashboard"""

    event: SlotEvent

    @classmethod
    def from_model(cls, slot: DemoSlot) -> "AdminDemoSlotRead":
        base = DemoSlotRead.from_model(slot).model_dump()
        return cls(
            **base,
            member=slot_member(slot),
            event=SlotEvent(id=slot.event.id, name=slot.event.name, startAt=slot.event.start_at),
        )


class ActionResponse(BaseModel):
    success: bool
    message: str
    demoSlot: Optional[DemoSlotRead] = None
