"""Demo slot service - Booking and status workflows for demo slots"""

import asyncio
import logging
from typing import Optional

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from ...models import DemoSlot, DemoSlotStatus, Profile
from ...shared.errors import (
    AuthorizationError,
    NotFoundError,
    NotificationError,
    ValidationError,
)
from ...shared.validators import clean_optional_text
from ..events.repository import EventRepository
from ..profiles.repository import ProfileRepository
from .notifications import DemoSlotNotifier
from .repository import DEFAULT_DURATION_MINUTES, DemoSlotRepository
from .schemas import DemoSlotRead

logger = logging.getLogger(__name__)

# Value of confirmed_by_organizer after moving to each status
ORGANIZER_CONFIRMATION = {
    DemoSlotStatus.PENDING: False,
    DemoSlotStatus.CONFIRMED: True,
    DemoSlotStatus.CANCELED: False,
}

# Statuses that email the presenter when entered
STATUS_EMAIL_STATUSES = (DemoSlotStatus.CONFIRMED, DemoSlotStatus.CANCELED)

# Admin dashboard verbs
ADMIN_ACTIONS = {
    "confirm": (DemoSlotStatus.CONFIRMED, "Demo slot confirmed"),
    "cancel": (DemoSlotStatus.CANCELED, "Demo slot canceled"),
    "pending": (DemoSlotStatus.PENDING, "Demo slot set to pending"),
}

# API field name -> column name for detail edits
EDITABLE_FIELDS = {
    "title": "title",
    "description": "description",
    "requestedTime": "requested_time",
    "durationMinutes": "duration_minutes",
}


async def run_notifications(label: str, jobs: dict) -> None:
    """
    Run notification coroutines concurrently and log each outcome.

    Never raises: a failed notification must not affect the request that
    triggered it.
    """
    names = list(jobs)
    results = await asyncio.gather(*jobs.values(), return_exceptions=True)
    for name, result in zip(names, results):
        try:
            if isinstance(result, BaseException):
                raise NotificationError(f"{type(result).__name__}: {result}")
            if not result.get("success"):
                raise NotificationError(result.get("error") or "Unknown error")
            logger.info(f"✅ {label}: {name} sent")
        except NotificationError as e:
            logger.error(f"❌ {label}: {name} failed - {e.message}")


def parse_status(value) -> DemoSlotStatus:
    try:
        return DemoSlotStatus(value)
    except ValueError as e:
        raise ValidationError(f"Invalid status: {value}") from e


class DemoSlotService:
    """Service layer for demo slot business logic"""

    def __init__(
        self,
        db: Session,
        notifier: DemoSlotNotifier,
        background_tasks: BackgroundTasks,
    ):
        self.db = db
        self.repo = DemoSlotRepository()
        self.notifier = notifier
        self.background_tasks = background_tasks

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _get_profile(self, member_id: str) -> Profile:
        profile = ProfileRepository.get_by_id(self.db, member_id)
        if not profile:
            raise NotFoundError("Profile not found")
        return profile

    def get_slot(self, slot_id: str) -> DemoSlot:
        """Get a specific demo slot"""
        slot = self.repo.get_by_id(self.db, slot_id)
        if not slot:
            raise NotFoundError("Demo slot not found")
        return slot

    def _authorize_owner_or_admin(self, slot: DemoSlot, actor: Profile) -> None:
        if slot.member_id != actor.id and not actor.is_app_admin:
            logger.warning(f"⚠️ Profile {actor.id} denied access to demo slot {slot.id}")
            raise AuthorizationError("Unauthorized")

    def _require_admin(self, actor: Profile) -> None:
        if not actor.is_app_admin:
            logger.warning(f"⚠️ Non-admin profile {actor.id} attempted an organizer action")
            raise AuthorizationError("Access denied - admin only")

    def list_slots(
        self,
        event_id: Optional[str] = None,
        member_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[DemoSlot]:
        """List slots for an event or a member, optionally by status"""
        status_filter = parse_status(status) if status else None
        if event_id:
            return self.repo.list_by_event(self.db, event_id, status_filter)
        if member_id:
            return self.repo.list_by_member(self.db, member_id, status_filter)
        return self.repo.list_all(self.db, status_filter)

    def admin_list(
        self,
        acting_member_id: str,
        event_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[DemoSlot]:
        """Organizer dashboard listing with member and event details"""
        self._require_admin(self._get_profile(acting_member_id))
        status_filter = parse_status(status) if status else None
        return self.repo.list_with_members_and_events(self.db, event_id, status_filter)

    # ------------------------------------------------------------------
    # Booking workflow
    # ------------------------------------------------------------------

    def request_slot(
        self,
        acting_member_id: str,
        event_id: Optional[str],
        title: Optional[str],
        description: Optional[str] = None,
        requested_time: Optional[str] = None,
        duration_minutes: Optional[int] = None,
    ) -> DemoSlot:
        """Book a pending demo slot and send booking emails in the background"""
        if not title or not title.strip() or not event_id:
            raise ValidationError("Missing required fields")

        profile = self._get_profile(acting_member_id)
        if not EventRepository.get_by_id(self.db, event_id):
            raise NotFoundError("Event not found")

        slot = self.repo.create(
            self.db,
            member_id=profile.id,
            event_id=event_id,
            title=title.strip(),
            description=clean_optional_text(description),
            requested_time=clean_optional_text(requested_time),
            duration_minutes=duration_minutes or DEFAULT_DURATION_MINUTES,
        )
        logger.info(f"✅ Demo slot {slot.id} requested by profile {profile.id} for event {event_id}")

        snapshot = DemoSlotRead.from_model(slot)
        self.background_tasks.add_task(self._send_booking_notifications, snapshot)
        return slot

    async def _send_booking_notifications(self, snapshot: DemoSlotRead) -> None:
        await run_notifications(
            f"Demo slot {snapshot.id} booking",
            {
                "booking confirmation": self.notifier.send_booking_confirmation(snapshot),
                "organizer alert": self.notifier.notify_organizers(snapshot),
            },
        )

    # ------------------------------------------------------------------
    # Status transition workflow
    # ------------------------------------------------------------------

    def transition(self, slot_id: str, acting_member_id: str, new_status) -> DemoSlot:
        """
        Move a slot to a new status.

        The owner or an admin may transition a slot, but only an admin may
        confirm one. Confirming marks the slot organizer-confirmed; pending and
        canceled clear that flag. Entering confirmed or canceled from another
        status emails the presenter in the background.
        """
        new_status = parse_status(new_status)
        slot = self.get_slot(slot_id)
        actor = self._get_profile(acting_member_id)

        self._authorize_owner_or_admin(slot, actor)
        if new_status == DemoSlotStatus.CONFIRMED and not actor.is_app_admin:
            raise AuthorizationError("Only organizers can confirm demo slots")

        previous_status = slot.status
        self.repo.update(
            self.db,
            slot.id,
            status=new_status,
            confirmed_by_organizer=ORGANIZER_CONFIRMATION[new_status],
        )
        slot = self.get_slot(slot.id)
        logger.info(
            f"✅ Demo slot {slot.id} transitioned: {previous_status.value} → {new_status.value} "
            f"by profile {actor.id}"
        )

        if new_status != previous_status and new_status in STATUS_EMAIL_STATUSES:
            snapshot = DemoSlotRead.from_model(slot)
            self.background_tasks.add_task(self._send_status_notification, snapshot, new_status)

        return slot

    async def _send_status_notification(
        self, snapshot: DemoSlotRead, status: DemoSlotStatus
    ) -> None:
        await run_notifications(
            f"Demo slot {snapshot.id} {status.value}",
            {"status update": self.notifier.send_status_update(snapshot, status)},
        )

    def admin_action(self, slot_id: str, acting_member_id: str, action: str) -> tuple[DemoSlot, str]:
        """Apply an organizer dashboard action (confirm, cancel, pending)"""
        self._require_admin(self._get_profile(acting_member_id))
        if action not in ADMIN_ACTIONS:
            raise ValidationError("Invalid action")

        new_status, message = ADMIN_ACTIONS[action]
        return self.transition(slot_id, acting_member_id, new_status), message

    # ------------------------------------------------------------------
    # Detail edits and legacy delete
    # ------------------------------------------------------------------

    def update_slot(self, slot_id: str, acting_member_id: str, **fields) -> DemoSlot:
        """Edit title, description, requested time or duration"""
        slot = self.get_slot(slot_id)
        actor = self._get_profile(acting_member_id)
        self._authorize_owner_or_admin(slot, actor)

        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot edit fields: {', '.join(sorted(unknown))}")

        updates = {}
        for key, value in fields.items():
            if value is None:
                continue
            if key in ("description", "requestedTime"):
                value = clean_optional_text(value)
            elif key == "title":
                value = value.strip()
                if not value:
                    raise ValidationError("Title cannot be empty")
            updates[EDITABLE_FIELDS[key]] = value

        self.repo.update(self.db, slot.id, **updates)
        return self.get_slot(slot.id)

    def delete_slot(self, slot_id: str, acting_member_id: str) -> None:
        """Delete a demo slot (legacy; the dashboard cancels instead)"""
        slot = self.get_slot(slot_id)
        actor = self._get_profile(acting_member_id)
        self._authorize_owner_or_admin(slot, actor)

        self.repo.delete(self.db, slot.id)
        logger.info(f"🗑️ Demo slot {slot_id} deleted by profile {actor.id}")
