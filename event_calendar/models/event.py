import time

from event_calendar.extensions import db
from event_calendar.utils.data import generate_id, transform_event_row


class Event(db.Model):
    __tablename__ = "events"

    id = db.Column(db.String(32), primary_key=True, default=generate_id)
    title = db.Column(db.String(100), nullable=False)
    # "2025年9月6日20:00", wall-clock time in EVENT_TIMEZONE
    date = db.Column(db.String(50), nullable=False)
    location = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    image_url = db.Column(db.String(500), nullable=True)
    capacity = db.Column(db.Integer, nullable=True)
    creator_id = db.Column(db.String(32), nullable=True, index=True)
    # seconds since epoch
    created_at = db.Column(db.Integer, nullable=False, default=lambda: int(time.time()))

    def to_row(self):
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}

    def to_dict(self):
        return transform_event_row(self.to_row())

    def __repr__(self):
        return (
            f"Event("
            f"id={self.id}, "
            f"title='{self.title}', "
            f"date='{self.date}', "
            f"capacity={self.capacity}, "
            f"creator_id={self.creator_id}"
            f")"
        )
