"""
Script to create demo accounts, events and registrations for local development.
"""
import sys
import os

sys.path.append(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
)  # relative imports

from datetime import datetime, timedelta
from random import randrange, sample

from werkzeug.security import generate_password_hash

from event_calendar import create_app
from event_calendar.extensions import db
from event_calendar.models import Attendee, Event, User
from event_calendar.utils.data import current_time_millis, generate_id
from event_calendar.utils.event_dates import format_event_date, get_timezone

app = create_app()

# Print the database URI the app is configured to use
with app.app_context():
    print(f"INFO: Connecting to database: {app.config['SQLALCHEMY_DATABASE_URI']}")

EVENT_TEMPLATES = [
    ("もくもく会", "渋谷区民会館", "各自の作業を持ち寄って進める会です。\\n初心者歓迎。", 10),
    ("Python勉強会", "オンライン", "Flaskでのアプリ開発をテーマに話します。", None),
    ("読書会", "新宿カフェ", "今月の課題本について語りましょう。", 6),
    ("週末ハイキング", "高尾山口駅", "雨天中止です。", 15),
    ("ボードゲーム会", "池袋コミュニティセンター", "", 8),
]


def create_demo_users(count=8):
    """Create demo users and return them, the first one being the organizer"""
    users = []
    for i in range(count):
        email = f"user{i+1}@example.com"
        user = db.session.execute(db.select(User).filter_by(email=email)).scalars().first()
        if not user:
            user = User(
                id=generate_id(),
                email=email,
                password=generate_password_hash("password123"),
                name=f"ユーザー{i+1}",
                is_anonymous=False,
            )
            db.session.add(user)
        users.append(user)
    db.session.commit()
    print(f"Prepared {len(users)} demo users (password: password123)")
    return users


def create_demo_events(organizer):
    """Create upcoming events plus one that already took place"""
    tz = get_timezone(app.config["EVENT_TIMEZONE"])
    now = datetime.now(tz).replace(minute=0, second=0, microsecond=0)

    events = []
    for i, (title, location, description, capacity) in enumerate(EVENT_TEMPLATES):
        starts_at = now + timedelta(days=3 + i * 4, hours=randrange(0, 6))
        events.append(
            Event(
                title=title,
                date=format_event_date(starts_at),
                location=location,
                description=description,
                capacity=capacity,
                creator_id=organizer.id,
            )
        )
    events.append(
        Event(
            title="先月の交流会",
            date=format_event_date(now - timedelta(days=30)),
            location="渋谷",
            description="終了したイベントです。",
            capacity=20,
            creator_id=organizer.id,
        )
    )
    db.session.add_all(events)
    db.session.commit()
    print(f"Created {len(events)} demo events")
    return events


def register_demo_attendees(events, users):
    """Register a random subset of users for each event, within capacity"""
    total = 0
    for event in events:
        seats = event.capacity or len(users)
        for user in sample(users, min(seats, randrange(0, len(users) + 1))):
            db.session.add(
                Attendee(
                    event_id=event.id,
                    user_id=user.id,
                    email=user.email,
                    created_at=current_time_millis(),
                )
            )
            total += 1
    db.session.commit()
    print(f"Created {total} demo registrations")


def main():
    with app.app_context():
        db.create_all()
        users = create_demo_users()
        events = create_demo_events(users[0])
        register_demo_attendees(events, users[1:])
        print("Demo data ready")


if __name__ == "__main__":
    main()
