from event_calendar.extensions import db
from event_calendar.models import User


class UserRepository:
    @staticmethod
    def sign_up(user):
        db.session.add(user)
        db.session.commit()
        return user

    @staticmethod
    def find_by_email(email):
        return db.session.execute(db.select(User).filter_by(email=email)).scalars().first()

    @staticmethod
    def find_by_id(user_id: str):
        return db.session.get(User, user_id)

    @staticmethod
    def update_user(user, attrs: dict):
        for key, value in attrs.items():
            if hasattr(user, key):
                setattr(user, key, value)
        db.session.commit()
        return user

    @staticmethod
    def delete(user):
        db.session.delete(user)
        db.session.commit()
