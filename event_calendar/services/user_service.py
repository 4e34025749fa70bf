from event_calendar.exceptions import ConflictError, UnauthorizedError
from event_calendar.models import User
from event_calendar.repositories import AttendeeRepository, UserRepository
from event_calendar.schemas import LoginSchema, RegisterSchema, UserRegistrationsQuerySchema
from event_calendar.utils.data import generate_id
from event_calendar.utils.event_dates import get_timezone, is_not_yet_started
from event_calendar.utils.validation import validate_request
from werkzeug.security import generate_password_hash, check_password_hash
from flask_jwt_extended import create_access_token
from flask import current_app
import logging

logger = logging.getLogger(__name__)

ANONYMOUS_EMAIL_DOMAIN = "anonymous.invalid"


def issue_token(user):
    return create_access_token(
        identity=str(user.id),
        additional_claims={"email": user.email, "is_anonymous": bool(user.is_anonymous)},
    )


class UserService:
    @staticmethod
    def sign_up(user_data, current_user=None):
        """Create an account.

        When the caller holds an anonymous session, that user's registrations
        move to the new account and the anonymous user is removed.
        """
        validated = validate_request(RegisterSchema, user_data)

        existing_user = UserRepository.find_by_email(validated.email)
        if existing_user:
            logger.warning(f"Signup attempt with existing email: {validated.email}")
            raise ConflictError("このメールアドレスは既に登録されています")

        user = User(
            id=generate_id(),
            email=validated.email,
            password=generate_password_hash(validated.password),
            name=validated.name,
            is_anonymous=False,
        )
        created_user = UserRepository.sign_up(user)

        if current_user is not None and current_user.is_anonymous:
            UserService.link_anonymous_user(current_user.id, created_user)

        logger.info(f"User created successfully: {created_user.email}")
        return {
            "success": True,
            "authenticated": True,
            "token": issue_token(created_user),
            "user": created_user.to_dict(),
            "message": "ユーザー登録が完了しました",
        }

    @staticmethod
    def link_anonymous_user(anonymous_user_id, user):
        anonymous_user = UserRepository.find_by_id(anonymous_user_id)
        if not anonymous_user or not anonymous_user.is_anonymous:
            return 0

        moved = AttendeeRepository.reassign_user(anonymous_user.id, user.id, user.email)
        UserRepository.delete(anonymous_user)
        logger.info(f"Linked anonymous user {anonymous_user_id} to {user.id}: {moved} registrations moved")
        return moved

    @staticmethod
    def sign_in(user_data):
        validated = validate_request(LoginSchema, user_data)

        user = UserRepository.find_by_email(validated.email)
        if not user or user.is_anonymous or not user.password:
            logger.warning(f"Login attempt with non-existent email: {validated.email}")
            raise UnauthorizedError("メールアドレスまたはパスワードが正しくありません")

        if not check_password_hash(user.password, validated.password):
            logger.warning(f"Failed login attempt for user: {validated.email}")
            raise UnauthorizedError("メールアドレスまたはパスワードが正しくありません")

        logger.info(f"User logged in successfully: {validated.email}")
        return {
            "success": True,
            "authenticated": True,
            "token": issue_token(user),
            "user": user.to_dict(),
            "message": "ログインしました",
        }

    @staticmethod
    def sign_in_anonymous():
        user_id = generate_id()
        user = UserRepository.sign_up(
            User(
                id=user_id,
                email=f"temp-{user_id}@{ANONYMOUS_EMAIL_DOMAIN}",
                name="ゲスト",
                is_anonymous=True,
            )
        )
        logger.info(f"Anonymous user created: {user.id}")
        return {
            "success": True,
            "authenticated": True,
            "token": issue_token(user),
            "user": user.to_dict(),
            "message": "ゲストとしてログインしました",
        }

    @staticmethod
    def get_session(current_user):
        if current_user is None:
            return {"success": True, "authenticated": False, "message": "認証されていません"}

        user = UserRepository.find_by_id(current_user.id)
        if not user:
            return {"success": True, "authenticated": False, "message": "認証されていません"}
        return {"success": True, "authenticated": True, "user": user.to_dict(), "message": "認証済みです"}

    @staticmethod
    def get_registrations(current_user, query, now=None):
        if current_user is None:
            raise UnauthorizedError("認証が必要です")

        validated = validate_request(UserRegistrationsQuerySchema, query)
        tz = get_timezone(current_app.config.get("EVENT_TIMEZONE"))

        registrations = [
            {
                "id": row["attendee"]["id"],
                "event": row["event"],
                "registered_at": row["attendee"]["created_at"],
                "can_cancel": is_not_yet_started(row["event"]["date"], now=now, tz=tz),
            }
            for row in AttendeeRepository.find_registrations_for_user(
                current_user.id, validated.limit, validated.offset
            )
        ]

        logger.debug(
            f"Registrations for user {current_user.id}: count={len(registrations)}, "
            f"cancellable={sum(1 for r in registrations if r['can_cancel'])}"
        )
        return {"registrations": registrations}
