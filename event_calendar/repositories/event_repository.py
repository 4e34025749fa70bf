from typing import Dict, List, Optional

from event_calendar.extensions import db
from event_calendar.models import Attendee, Event


class EventRepository:
    @staticmethod
    def get_event(event_id: str) -> Optional[dict]:
        event = db.session.get(Event, event_id)
        return event.to_dict() if event else None

    @staticmethod
    def list_events() -> List[dict]:
        events = db.session.execute(db.select(Event)).scalars().all()
        return [event.to_dict() for event in events]

    @staticmethod
    def find_by_creator(creator_id: str, limit: int, offset: int) -> List[dict]:
        events = db.session.execute(
            db.select(Event)
            .where(Event.creator_id == creator_id)
            .order_by(Event.created_at.desc())
            .limit(limit)
            .offset(offset)
        ).scalars().all()
        return [event.to_dict() for event in events]

    @staticmethod
    def create_event(attrs: dict) -> dict:
        event = Event(**attrs)
        db.session.add(event)
        db.session.commit()
        return event.to_dict()

    @staticmethod
    def update_event(event_id: str, attrs: dict) -> Optional[dict]:
        event = db.session.get(Event, event_id)
        if not event:
            return None
        for key, value in attrs.items():
            if hasattr(event, key):
                setattr(event, key, value)
        db.session.commit()
        return event.to_dict()

    @staticmethod
    def delete_event(event_id: str) -> bool:
        num_deleted = db.session.execute(
            db.delete(Event).where(Event.id == event_id)
        ).rowcount
        db.session.commit()
        return num_deleted > 0

    @staticmethod
    def attendee_counts(event_ids: Optional[List[str]] = None) -> Dict[str, int]:
        """Attendee count per event id, from a single grouped query."""
        query = db.select(Attendee.event_id, db.func.count()).group_by(Attendee.event_id)
        if event_ids is not None:
            if not event_ids:
                return {}
            query = query.where(Attendee.event_id.in_(event_ids))
        return {str(event_id): int(count) for event_id, count in db.session.execute(query)}
