"""Demo slot router - FastAPI endpoints for demo slot booking and review"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_admin, get_current_profile
from ...database import get_db, get_session_factory
from ...models import Profile
from .notifications import DemoSlotNotifier, NotificationConfig
from .schemas import (
    ActionResponse,
    AdminDemoSlotRead,
    DemoSlotCreate,
    DemoSlotRead,
    DemoSlotUpdate,
    DemoSlotWithMemberRead,
    StatusTransitionRequest,
)
from .service import DemoSlotService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/demo-slots", tags=["Demo Slots"])
admin_router = APIRouter(prefix="/admin/demo-slots", tags=["Demo Slots Admin"])


def get_notification_config() -> NotificationConfig:
    """Dependency for notification settings; overridable in tests"""
    return NotificationConfig.from_env()


def get_notifier(
    config: NotificationConfig = Depends(get_notification_config),
    session_factory=Depends(get_session_factory),
) -> DemoSlotNotifier:
    return DemoSlotNotifier(config, session_factory)


def get_demo_slot_service(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: DemoSlotNotifier = Depends(get_notifier),
) -> DemoSlotService:
    """Dependency injection for DemoSlotService"""
    return DemoSlotService(db, notifier, background_tasks)


# ============================================================================
# MEMBER ROUTES
# ============================================================================


@router.get("", response_model=list[DemoSlotWithMemberRead])
async def list_demo_slots(
    event_id: Optional[str] = Query(None, alias="eventId"),
    member_id: Optional[str] = Query(None, alias="memberId"),
    status: Optional[str] = Query(None),
    service: DemoSlotService = Depends(get_demo_slot_service),
):
    """List demo slots for an event or member, each with its presenter"""
    slots = service.list_slots(event_id=event_id, member_id=member_id, status=status)
    return [DemoSlotWithMemberRead.from_model(s) for s in slots]


@router.get("/mine", response_model=list[DemoSlotRead])
async def list_my_demo_slots(
    status: Optional[str] = Query(None),
    current_profile: Profile = Depends(get_current_profile),
    service: DemoSlotService = Depends(get_demo_slot_service),
):
    """List the current member's demo slots"""
    slots = service.list_slots(member_id=current_profile.id, status=status)
    return [DemoSlotRead.from_model(s) for s in slots]


@router.get("/{slot_id}", response_model=DemoSlotRead)
async def get_demo_slot(
    slot_id: str,
    service: DemoSlotService = Depends(get_demo_slot_service),
):
    """Get a specific demo slot"""
    return DemoSlotRead.from_model(service.get_slot(slot_id))


@router.post("", response_model=DemoSlotRead, status_code=201)
async def request_demo_slot(
    data: DemoSlotCreate,
    current_profile: Profile = Depends(get_current_profile),
    service: DemoSlotService = Depends(get_demo_slot_service),
):
    """Request a demo slot for an event; confirmation emails are sent after the response"""
    slot = service.request_slot(
        acting_member_id=current_profile.id,
        event_id=data.eventId,
        title=data.title,
        description=data.description,
        requested_time=data.requestedTime,
        duration_minutes=data.durationMinutes,
    )
    return DemoSlotRead.from_model(slot)


@router.patch("/{slot_id}", response_model=DemoSlotRead)
async def update_demo_slot(
    slot_id: str,
    data: DemoSlotUpdate,
    current_profile: Profile = Depends(get_current_profile),
    service: DemoSlotService = Depends(get_demo_slot_service),
):
    """Edit demo slot details (owner or admin)"""
    slot = service.update_slot(slot_id, current_profile.id, **data.model_dump(exclude_unset=True))
    return DemoSlotRead.from_model(slot)


@router.post("/{slot_id}/status", response_model=DemoSlotRead)
async def transition_demo_slot(
    slot_id: str,
    data: StatusTransitionRequest,
    current_profile: Profile = Depends(get_current_profile),
    service: DemoSlotService = Depends(get_demo_slot_service),
):
    """Change a demo slot's status (owner or admin; confirming is admin only)"""
    slot = service.transition(slot_id, current_profile.id, data.status)
    return DemoSlotRead.from_model(slot)


@router.delete("/{slot_id}")
async def delete_demo_slot(
    slot_id: str,
    current_profile: Profile = Depends(get_current_profile),
    service: DemoSlotService = Depends(get_demo_slot_service),
):
    """Delete a demo slot (legacy)"""
    service.delete_slot(slot_id, current_profile.id)
    return {"success": True}


# ============================================================================
# ORGANIZER ROUTES
# ============================================================================


@admin_router.get("", response_model=list[AdminDemoSlotRead])
async def admin_list_demo_slots(
    event_id: Optional[str] = Query(None, alias="eventId"),
    status: Optional[str] = Query(None),
    current_admin: Profile = Depends(get_current_admin),
    service: DemoSlotService = Depends(get_demo_slot_service),
):
    """All demo slots with presenter and event details"""
    slots = service.admin_list(current_admin.id, event_id=event_id, status=status)
    return [AdminDemoSlotRead.from_model(s) for s in slots]


@admin_router.post("/{slot_id}/{action}", response_model=ActionResponse)
async def admin_demo_slot_action(
    slot_id: str,
    action: str,
    current_admin: Profile = Depends(get_current_admin),
    service: DemoSlotService = Depends(get_demo_slot_service),
):
    """Confirm, cancel or reset a demo slot to pending"""
    slot, message = service.admin_action(slot_id, current_admin.id, action)
    return ActionResponse(success=True, message=message, demoSlot=DemoSlotRead.from_model(slot))


__all__ = ["router", "admin_router"]
