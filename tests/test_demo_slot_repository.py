from datetime import datetime

import pytest
from sqlalchemy import Text

from app.domain.demo_slots.repository import DemoSlotRepository
from app.models import DemoSlot, DemoSlotStatus, Event
from app.shared.errors import ValidationError


def create_slot(db, member, event, title="Demo X", **kwargs):
    return DemoSlotRepository.create(db, member_id=member.id, event_id=event.id, title=title, **kwargs)


class TestCreate:
    def test_defaults(self, db, member, event):
        slot = create_slot(db, member, event)

        assert slot.id
        assert slot.status == DemoSlotStatus.PENDING
        assert slot.confirmed_by_organizer is False
        assert slot.duration_minutes == 5
        assert slot.description is None
        assert slot.requested_time is None
        assert slot.created_at == slot.updated_at

    def test_blank_optional_fields_stored_as_null(self, db, member, event):
        slot = create_slot(db, member, event, description="", requested_time="", duration_minutes=0)

        assert slot.description is None
        assert slot.requested_time is None
        assert slot.duration_minutes == 5

    @pytest.mark.parametrize("column", ["title", "description", "requested_time"])
    def test_free_text_columns_are_unbounded(self, column):
        assert isinstance(DemoSlot.__table__.c[column].type, Text)

    @pytest.mark.parametrize(
        "member_id,event_id,title",
        [("", "e1", "Demo"), ("m1", "", "Demo"), ("m1", "e1", ""), ("m1", "e1", "   ")],
    )
    def test_missing_required_fields(self, db, member, event, member_id, event_id, title):
        with pytest.raises(ValidationError):
            DemoSlotRepository.create(db, member_id=member_id, event_id=event_id, title=title)

        assert db.query(DemoSlot).count() == 0


class TestQueries:
    def test_get_by_id_missing(self, db):
        assert DemoSlotRepository.get_by_id(db, "nope") is None

    def test_list_by_event_in_creation_order_with_status_filter(self, db, member, event):
        first = create_slot(db, member, event, title="First")
        second = create_slot(db, member, event, title="Second")
        DemoSlotRepository.update(db, second.id, status=DemoSlotStatus.CANCELED)

        all_slots = DemoSlotRepository.list_by_event(db, event.id)
        pending = DemoSlotRepository.list_by_event(db, event.id, DemoSlotStatus.PENDING)

        assert [s.title for s in all_slots] == ["First", "Second"]
        assert [s.id for s in pending] == [first.id]

    def test_list_by_member(self, db, member, other_member, event):
        mine = create_slot(db, member, event)
        create_slot(db, other_member, event, title="Not mine")

        assert [s.id for s in DemoSlotRepository.list_by_member(db, member.id)] == [mine.id]
        assert DemoSlotRepository.list_by_member(db, member.id, DemoSlotStatus.CONFIRMED) == []

    def test_list_with_members_and_events_newest_event_first(self, db, member, event):
        later = Event(id="e2", name="Hack Night #43", start_at=datetime(2026, 3, 10, 19, 0))
        db.add(later)
        db.commit()
        create_slot(db, member, event, title="Older event")
        create_slot(db, member, later, title="Newer event")

        slots = DemoSlotRepository.list_with_members_and_events(db)

        assert [s.title for s in slots] == ["Newer event", "Older event"]
        assert slots[0].member.luma_email == member.luma_email
        assert slots[0].event.name == "Hack Night #43"
        assert [s.title for s in DemoSlotRepository.list_with_members_and_events(db, event_id="e1")] == [
            "Older event"
        ]


class TestUpdate:
    def test_partial_update_stamps_updated_at(self, db, member, event):
        slot = create_slot(db, member, event)
        before = slot.updated_at

        assert DemoSlotRepository.update(db, slot.id, title="Renamed", duration_minutes=10) is True

        slot = DemoSlotRepository.get_by_id(db, slot.id)
        assert slot.title == "Renamed"
        assert slot.duration_minutes == 10
        assert slot.updated_at > before

    def test_empty_update_still_advances_updated_at(self, db, member, event):
        slot = create_slot(db, member, event)
        before = slot.updated_at

        DemoSlotRepository.update(db, slot.id)

        assert DemoSlotRepository.get_by_id(db, slot.id).updated_at > before

    def test_identity_fields_are_immutable(self, db, member, other_member, event):
        slot = create_slot(db, member, event)

        with pytest.raises(ValidationError):
            DemoSlotRepository.update(db, slot.id, member_id=other_member.id)

        assert DemoSlotRepository.get_by_id(db, slot.id).member_id == member.id

    def test_missing_slot(self, db):
        assert DemoSlotRepository.update(db, "missing", title="x") is False


class TestDelete:
    def test_delete(self, db, member, event):
        slot = create_slot(db, member, event)

        assert DemoSlotRepository.delete(db, slot.id) is True
        assert DemoSlotRepository.delete(db, slot.id) is False
        assert DemoSlotRepository.get_by_id(db, slot.id) is None
