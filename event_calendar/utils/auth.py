from dataclasses import dataclass
from typing import Optional

from flask import current_app
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from event_calendar.repositories import UserRepository


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: str
    is_anonymous: bool = False

    @classmethod
    def from_user(cls, user):
        return cls(id=str(user.id), email=str(user.email), is_anonymous=bool(user.is_anonymous))


def get_current_user() -> Optional[AuthenticatedUser]:
    """Resolve the caller from the access token in the headers or cookies.

    Returns None for missing, invalid or expired tokens and for tokens whose
    user no longer exists.
    """
    try:
        verify_jwt_in_request(optional=True)
        user_id = get_jwt_identity()
    except Exception as e:
        current_app.logger.info(f"Rejected access token: {str(e)}")
        return None

    if not user_id:
        return None

    user = UserRepository.find_by_id(user_id)
    if not user:
        current_app.logger.info(f"Access token for unknown user {user_id}")
        return None

    return AuthenticatedUser.from_user(user)
