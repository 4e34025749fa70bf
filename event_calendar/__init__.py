from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException
import os
from event_calendar.extensions import db, migrate, jwt, limiter
from event_calendar.utils.responses import error_response
from event_calendar.utils.storage import LocalBucket
from datetime import timedelta
import logging

# Load environment variables
load_dotenv()


def create_app(test_config=None):
    app = Flask(__name__, instance_relative_config=True)

    app.config["ENVIRONMENT"] = os.getenv("ENVIRONMENT", "development")
    app.config["TESTING"] = app.config["ENVIRONMENT"] == "testing"

    # Configure database
    app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv(
        "DATABASE_URL", "sqlite:///local_dev.db"
    )
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

    # Configure JWT
    app.config["JWT_SECRET_KEY"] = os.getenv("JWT_SECRET_KEY", "dev-secret-key")
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(
        days=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES_DAYS", 7))
    )
    app.config["JWT_TOKEN_LOCATION"] = ["headers", "cookies"]
    app.config["JWT_HEADER_NAME"] = "Authorization"
    app.config["JWT_HEADER_TYPE"] = "Bearer"
    app.config["JWT_COOKIE_SAMESITE"] = "Lax"
    app.config["JWT_COOKIE_SECURE"] = app.config["ENVIRONMENT"] == "production"

    # Event dates are stored without a timezone
    app.config["EVENT_TIMEZONE"] = os.getenv("EVENT_TIMEZONE", "Asia/Tokyo")

    # Image storage
    app.config["IMAGE_STORAGE_DIR"] = os.getenv(
        "IMAGE_STORAGE_DIR", os.path.join(app.instance_path, "images")
    )
    app.config["IMAGES_PUBLIC_URL"] = os.getenv("IMAGES_PUBLIC_URL")
    app.config["MAX_CONTENT_LENGTH"] = 6 * 1024 * 1024

    # Rate limiting
    app.config["RATELIMIT_STORAGE_URI"] = os.getenv("LIMITER_STORAGE_URI", "memory://")

    if test_config is not None:
        app.config.update(test_config)

    # Configure logging
    log_level = logging.DEBUG if app.config["ENVIRONMENT"] == "development" else logging.INFO
    logging.basicConfig(level=log_level)
    logging.getLogger("event_calendar").setLevel(log_level)
    app.logger.setLevel(log_level)

    app.json.ensure_ascii = False

    # Initialize Flask extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)
    app.extensions["image_bucket"] = LocalBucket(app.config["IMAGE_STORAGE_DIR"])

    # Register blueprints
    from event_calendar.routes.event_routes import event_bp
    from event_calendar.routes.auth_routes import auth_bp
    from event_calendar.routes.user_routes import user_bp
    from event_calendar.routes.upload_routes import upload_bp
    from event_calendar.routes.health_routes import health_bp

    app.register_blueprint(event_bp, url_prefix="/api")
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(user_bp, url_prefix="/api/user")
    app.register_blueprint(upload_bp, url_prefix="/api")
    app.register_blueprint(health_bp, url_prefix="/api")

    # Set up CORS
    cors_origins = os.getenv(
        "CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
    ).split(",")
    app.logger.info(f"Initializing CORS with origins: {cors_origins}")

    CORS(
        app,
        resources={
            r"/api/*": {"origins": cors_origins},
        },
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept"],
        expose_headers=["Content-Type"],
    )

    # Errors raised by Flask itself (unknown route, wrong method, rate limit)
    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        if e.code == 405:
            return error_response("Method not allowed", 405)
        return error_response(e.description or e.name, e.code)

    return app
