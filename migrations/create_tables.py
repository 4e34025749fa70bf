"""Create the events, attendees and users tables without running alembic.

Useful for a fresh local SQLite database; deployed databases go through
``flask db upgrade`` with the revisions in ``migrations/versions``.
"""
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from event_calendar import create_app  # noqa: E402
from event_calendar.extensions import db  # noqa: E402
import event_calendar.models  # noqa: E402,F401


def create_tables(drop_first=False):
    app = create_app()
    with app.app_context():
        if drop_first:
            db.drop_all()
        db.create_all()
        print(f"Tables on {app.config['SQLALCHEMY_DATABASE_URI']}: {', '.join(sorted(db.metadata.tables))}")


if __name__ == "__main__":
    create_tables(drop_first="--reset" in sys.argv[1:])
