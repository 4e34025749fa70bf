from typing import List, Optional

from event_calendar.extensions import db
from event_calendar.models import Attendee, Event
from event_calendar.utils.data import transform_attendee_row, transform_event_row


class AttendeeRepository:
    @staticmethod
    def get_attendee(attendee_id: str) -> Optional[dict]:
        attendee = db.session.get(Attendee, attendee_id)
        return attendee.to_dict() if attendee else None

    @staticmethod
    def find_attendee(event_id: str, user_id: str) -> Optional[dict]:
        """Find a registration by event_id and user_id"""
        attendee = db.session.execute(
            db.select(Attendee).filter_by(event_id=event_id, user_id=user_id)
        ).scalars().first()
        return attendee.to_dict() if attendee else None

    @staticmethod
    def count_attendees(event_id: str) -> int:
        return db.session.execute(
            db.select(db.func.count()).select_from(Attendee).where(Attendee.event_id == event_id)
        ).scalar_one()

    @staticmethod
    def insert_attendee(
        attendee_id: str,
        event_id: str,
        user_id: Optional[str],
        email: str,
        created_at: int,
        capacity: Optional[int] = None,
    ) -> bool:
        """Insert a registration in a single statement.

        With a ``capacity`` the row is only written while the event has fewer
        than ``capacity`` attendees. Returns whether a row was written.
        """
        values = db.select(
            db.literal(attendee_id, db.String),
            db.literal(event_id, db.String),
            db.literal(user_id, db.String),
            db.literal(email, db.String),
            db.literal(created_at, db.BigInteger),
        )
        if capacity is not None:
            current = (
                db.select(db.func.count())
                .select_from(Attendee)
                .where(Attendee.event_id == event_id)
                .correlate(None)
                .scalar_subquery()
            )
            values = values.where(current < capacity)

        result = db.session.execute(
            db.insert(Attendee).from_select(
                ["id", "event_id", "user_id", "email", "created_at"], values
            )
        )
        db.session.commit()
        return result.rowcount == 1

    @staticmethod
    def delete_attendee(attendee_id: str) -> bool:
        num_deleted = db.session.execute(
            db.delete(Attendee).where(Attendee.id == attendee_id)
        ).rowcount
        db.session.commit()
        return num_deleted > 0

    @staticmethod
    def find_registrations_for_user(user_id: str, limit: int, offset: int) -> List[dict]:
        """A user's registrations joined with their events, newest first."""
        rows = db.session.execute(
            db.select(
                Attendee.id.label("attendee_id"),
                Attendee.event_id,
                Attendee.email.label("attendee_email"),
                Attendee.user_id,
                Attendee.created_at.label("registered_at"),
                Event.title.label("event_title"),
                Event.date.label("event_date"),
                Event.location.label("event_location"),
                Event.description.label("event_description"),
                Event.image_url.label("event_image_url"),
                Event.capacity.label("event_capacity"),
                Event.created_at.label("event_created_at"),
                Event.creator_id.label("event_creator_id"),
            )
            .join(Event, Event.id == Attendee.event_id)
            .where(Attendee.user_id == user_id)
            .order_by(Attendee.created_at.desc())
            .limit(limit)
            .offset(offset)
        ).mappings().all()

        registrations = []
        for row in rows:
            event = transform_event_row(
                {
                    "id": row["event_id"],
                    "title": row["event_title"],
                    "date": row["event_date"],
                    "location": row["event_location"],
                    "description": row["event_description"],
                    "image_url": row["event_image_url"],
                    "capacity": row["event_capacity"],
                    "created_at": row["event_created_at"],
                    "creator_id": row["event_creator_id"],
                }
            )
            attendee = transform_attendee_row(
                {
                    "id": row["attendee_id"],
                    "event_id": row["event_id"],
                    "email": row["attendee_email"],
                    "user_id": row["user_id"],
                    "created_at": row["registered_at"],
                }
            )
            registrations.append({"attendee": attendee, "event": event})
        return registrations

    @staticmethod
    def reassign_user(from_user_id: str, to_user_id: str, email: str) -> int:
        """Move every registration of one user to another."""
        num_updated = db.session.execute(
            db.update(Attendee)
            .where(Attendee.user_id == from_user_id)
            .values(user_id=to_user_id, email=email)
        ).rowcount
        db.session.commit()
        return num_updated
