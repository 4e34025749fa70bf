#!/usr/bin/env python3
"""Development server for the event calendar API."""
import os

from dotenv import load_dotenv

load_dotenv()

from event_calendar import create_app  # noqa: E402
from event_calendar.extensions import db  # noqa: E402
import event_calendar.models  # noqa: E402,F401

app = create_app()

with app.app_context():
    db.create_all()
    app.logger.info(f"Database ready ({', '.join(sorted(db.metadata.tables))})")
    app.logger.info(f"Serving images from {app.config['IMAGE_STORAGE_DIR']}")

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5001))
    app.run(host="0.0.0.0", port=port, debug=app.config["ENVIRONMENT"] == "development")
