from event_calendar.extensions import db
from event_calendar.utils.data import generate_id, transform_user_row


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(32), primary_key=True, default=generate_id)
    email = db.Column(db.String(255), unique=True, nullable=False)
    # null for anonymous users
    password = db.Column(db.String(255), nullable=True)
    name = db.Column(db.String(20), nullable=True)
    image = db.Column(db.String(500), nullable=True)
    email_verified = db.Column(db.Boolean, nullable=False, default=False)
    is_anonymous = db.Column(db.Boolean, nullable=False, default=False)
    updated_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    created_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self):
        return transform_user_row(
            {column.name: getattr(self, column.name) for column in self.__table__.columns}
        )

    def __repr__(self):
        return (
            f"User("
            f"id={self.id}, "
            f"email='{self.email}', "
            f"is_anonymous={self.is_anonymous}"
            f")"
        )
