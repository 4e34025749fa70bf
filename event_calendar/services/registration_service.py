"""Event registration workflow: apply for an event and cancel a registration.

The workflow knows nothing about HTTP. Route handlers resolve the caller and
the request body, then call into here with an explicit RegistrationContext;
every rejection is raised as an ApiError subclass carrying its status code.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

import pytz

from event_calendar.exceptions import (
    BadRequestError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
)
from event_calendar.repositories import AttendeeRepository, EventRepository
from event_calendar.schemas import EventApplySchema, EventCancelSchema
from event_calendar.utils.data import generate_id
from event_calendar.utils.event_dates import EventDateError, get_timezone, parse_event_date
from event_calendar.utils.validation import validate_request

logger = logging.getLogger(__name__)


@dataclass
class RegistrationContext:
    """Collaborators and settings for one workflow call."""

    events: Any = EventRepository
    attendees: Any = AttendeeRepository
    timezone: Any = field(default_factory=get_timezone)

    @classmethod
    def from_config(cls, config):
        return cls(timezone=get_timezone(config.get("EVENT_TIMEZONE")))


def _to_millis(now: datetime) -> int:
    return int(now.timestamp() * 1000)


class RegistrationService:
    @staticmethod
    def _load_event(ctx: RegistrationContext, user, event_id, body, schema):
        if user is None:
            raise UnauthorizedError("認証が必要です")
        if not event_id:
            raise BadRequestError("イベントIDが指定されていません")

        validated = validate_request(schema, body if body is not None else {})

        event = ctx.events.get_event(event_id)
        if not event:
            raise NotFoundError("指定されたイベントが見つかりません")
        logger.debug(f"Event found: id={event['id']}, title={event['title']}")
        return event, validated

    @staticmethod
    def _has_started(ctx: RegistrationContext, event: dict, now: datetime, action: str) -> bool:
        """Whether the event start is at or before ``now``.

        An unparseable date is logged and treated as not started.
        """
        try:
            starts_at = parse_event_date(event["date"], tz=ctx.timezone)
        except EventDateError as e:
            logger.error(f"Date parsing error in {action} for event {event['id']}: {str(e)}")
            logger.debug(f"Date parsing failed, allowing {action} by default")
            return False

        logger.debug(
            f"Period check for {action}: event_date={event['date']}, "
            f"parsed={starts_at.isoformat()}, now={now.isoformat()}"
        )
        return starts_at <= now

    @staticmethod
    def apply(ctx: RegistrationContext, user, event_id: str, body: Optional[Any] = None, now: Optional[datetime] = None) -> dict:
        now = now or datetime.now(pytz.UTC)
        event, _ = RegistrationService._load_event(ctx, user, event_id, body, EventApplySchema)
        logger.debug(f"Event apply attempt by user {user.id} for event {event_id}")

        if ctx.attendees.find_attendee(event_id, user.id):
            logger.warning(f"User {user.id} already registered for event {event_id}")
            raise BadRequestError("すでにこのイベントに申し込み済みです")

        if RegistrationService._has_started(ctx, event, now, "registration"):
            raise BadRequestError("イベント開始後の申し込みはできません")

        capacity = event["capacity"]
        full_message = f"このイベントは満員です（定員：{capacity}人）"
        if capacity:
            current_attendees = ctx.attendees.count_attendees(event_id)
            if current_attendees >= capacity:
                logger.warning(
                    f"User {user.id} blocked from registering for event {event_id} - "
                    f"event full ({current_attendees}/{capacity})"
                )
                raise BadRequestError(full_message)
            logger.debug(f"Capacity check passed: current={current_attendees}, capacity={capacity}")

        attendee_id = generate_id()
        inserted = ctx.attendees.insert_attendee(
            attendee_id, event_id, user.id, user.email, _to_millis(now), capacity=capacity
        )
        if not inserted:
            # Another registration took the last seat after the count above
            logger.warning(f"Capacity reached while inserting registration for user {user.id}, event {event_id}")
            raise BadRequestError(full_message)

        registration = ctx.attendees.get_attendee(attendee_id)
        if not registration:
            logger.error(f"Failed to retrieve created registration {attendee_id}")
            raise InternalError("申し込み情報の取得に失敗しました")
        if not registration["user_id"]:
            logger.error(f"User ID missing in registration {attendee_id}")
            raise InternalError("申し込み処理でエラーが発生しました")

        logger.info(f"Registered user {user.id} for event {event_id} (registration {attendee_id})")
        return {
            "success": True,
            "message": "イベントに申し込みました",
            "registration": {
                "id": registration["id"],
                "event_id": registration["event_id"],
                "user_id": registration["user_id"],
                "email": registration["email"],
                "created_at": registration["created_at"],
            },
        }

    @staticmethod
    def cancel(ctx: RegistrationContext, user, event_id: str, body: Optional[Any] = None, now: Optional[datetime] = None) -> dict:
        now = now or datetime.now(pytz.UTC)
        event, validated = RegistrationService._load_event(ctx, user, event_id, body, EventCancelSchema)
        logger.debug(f"Event cancel attempt by user {user.id} for event {event_id}")

        registration = ctx.attendees.find_attendee(event_id, user.id)
        if not registration:
            raise BadRequestError("このイベントに申し込みをしていません")

        if RegistrationService._has_started(ctx, event, now, "cancellation"):
            raise BadRequestError("イベント開始後のキャンセルはできません")

        ctx.attendees.delete_attendee(registration["id"])

        if validated.reason:
            logger.info(f"Cancellation reason for registration {registration['id']}: {validated.reason}")
        logger.info(f"Cancelled registration {registration['id']} of user {user.id} for event {event_id}")
        return {
            "success": True,
            "message": "イベントの申し込みをキャンセルしました",
            "cancelled_registration_id": registration["id"],
        }
