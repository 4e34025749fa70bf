from event_calendar.extensions import db
from event_calendar.utils.data import current_time_millis, generate_id, transform_attendee_row


class Attendee(db.Model):
    __tablename__ = "attendees"

    id = db.Column(db.String(32), primary_key=True, default=generate_id)
    # Logical reference only; one row per (event_id, user_id) is enforced by
    # the registration service.
    event_id = db.Column(db.String(32), nullable=False, index=True)
    user_id = db.Column(db.String(32), nullable=True, index=True)
    email = db.Column(db.String(255), nullable=False)
    # milliseconds since epoch, unlike events.created_at
    created_at = db.Column(db.BigInteger, nullable=False, default=current_time_millis)

    def to_row(self):
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}

    def to_dict(self):
        return transform_attendee_row(self.to_row())

    def __repr__(self):
        return (
            f"Attendee("
            f"id={self.id}, "
            f"event_id={self.event_id}, "
            f"user_id={self.user_id}, "
            f"email={self.email}, "
            f"created_at={self.created_at}"
            f")"
        )
