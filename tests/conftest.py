from datetime import datetime, timedelta

import pytest
import pytz
from werkzeug.security import generate_password_hash

from event_calendar import create_app
from event_calendar.extensions import db
from event_calendar.models import User
from event_calendar.repositories import EventRepository, UserRepository
from event_calendar.services.user_service import issue_token
from event_calendar.utils.data import generate_id
from event_calendar.utils.event_dates import format_event_date

PAST_EVENT_DATE = "2020年1月1日10:00"


def future_event_date(days=30):
    return format_event_date(datetime.now(pytz.timezone("Asia/Tokyo")) + timedelta(days=days))


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def app(tmp_path):
    app = create_app(
        {
            "ENVIRONMENT": "testing",
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "JWT_SECRET_KEY": "test-secret-key-with-enough-length-for-hs256",
            "RATELIMIT_ENABLED": False,
            "IMAGE_STORAGE_DIR": str(tmp_path / "images"),
            "IMAGES_PUBLIC_URL": None,
        }
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    """Create a user directly in the database and return (user, token)."""

    def _make_user(email=None, name="テストユーザー", anonymous=False, password="password123"):
        user_id = generate_id()
        user = UserRepository.sign_up(
            User(
                id=user_id,
                email=email or f"{user_id}@example.com",
                password=None if anonymous else generate_password_hash(password),
                name=name,
                is_anonymous=anonymous,
            )
        )
        return user, issue_token(user)

    return _make_user


@pytest.fixture
def make_event(app):
    def _make_event(creator_id=None, date=None, capacity=None, title="テストイベント", image_url=None):
        return EventRepository.create_event(
            {
                "title": title,
                "date": date or future_event_date(),
                "location": "東京",
                "description": "説明",
                "image_url": image_url,
                "capacity": capacity,
                "creator_id": creator_id,
            }
        )

    return _make_event
