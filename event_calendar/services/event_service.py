import logging

from event_calendar.exceptions import (
    BadRequestError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
)
from event_calendar.repositories import AttendeeRepository, EventRepository
from event_calendar.schemas import (
    CreateEventSchema,
    UpdateEventSchema,
    UserCreatedEventsQuerySchema,
)
from event_calendar.services.image_service import ImageService
from event_calendar.utils.data import with_attendee_count
from event_calendar.utils.validation import validate_request

logger = logging.getLogger(__name__)

ACTION_LABELS = {"edit": "編集", "delete": "削除"}


class EventService:
    @staticmethod
    def get_events():
        events = EventRepository.list_events()
        counts = EventRepository.attendee_counts()
        return [with_attendee_count(event, counts.get(event["id"], 0)) for event in events]

    @staticmethod
    def get_event(event_id):
        if not event_id:
            raise BadRequestError("イベントIDが指定されていません")
        event = EventRepository.get_event(event_id)
        if not event:
            raise NotFoundError("イベントが見つかりません")
        return with_attendee_count(event, AttendeeRepository.count_attendees(event_id))

    @staticmethod
    def get_owned_event(user, event_id, action="edit"):
        """Load an event the caller is allowed to edit or delete."""
        if user is None:
            raise UnauthorizedError("認証が必要です")
        if not event_id:
            raise BadRequestError("イベントIDが指定されていません")

        event = EventRepository.get_event(event_id)
        if not event:
            raise NotFoundError("イベントが見つかりません")
        if event["creator_id"] != user.id:
            logger.warning(f"User {user.id} tried to {action} event {event_id} owned by {event['creator_id']}")
            raise ForbiddenError(f"このイベントを{ACTION_LABELS[action]}する権限がありません")
        return event

    @staticmethod
    def create_event(user, data):
        if user is None:
            raise UnauthorizedError("認証が必要です")
        if user.is_anonymous:
            raise ForbiddenError(
                "イベントの作成には正規のアカウント登録が必要です。アカウントを作成してください。"
            )

        validated = validate_request(CreateEventSchema, data)
        event = EventRepository.create_event(
            {
                "title": validated.title,
                "date": validated.date,
                "location": validated.location,
                "description": validated.description or "",
                "image_url": validated.image_url or None,
                "capacity": validated.capacity,
                "creator_id": user.id,
            }
        )
        logger.info(f"Event {event['id']} created by user {user.id}")

        return {
            "success": True,
            "message": "イベントが作成されました",
            "eventId": event["id"],
            "event": event,
        }

    @staticmethod
    def update_event(user, event_id, data):
        event = EventService.get_owned_event(user, event_id, "edit")
        validated = validate_request(UpdateEventSchema, data)

        changes = {
            key: value
            for key, value in validated.model_dump(exclude_unset=True).items()
            if value is not None
        }
        # An empty image_url clears the image
        if "image_url" in changes and changes["image_url"] == "":
            changes["image_url"] = None

        updated = EventRepository.update_event(event_id, changes)
        if not updated:
            raise NotFoundError("イベントが見つかりません")

        if "image_url" in changes and event["image_url"] != updated["image_url"]:
            ImageService.delete_replaced_image(event["image_url"], updated["image_url"], "event", user.id)

        logger.info(f"Event {event_id} updated by user {user.id}: fields={sorted(changes)}")
        return {
            "message": "イベントが更新されました",
            "eventId": event_id,
            "event": updated,
        }

    @staticmethod
    def delete_event(user, event_id):
        EventService.get_owned_event(user, event_id, "delete")

        count = AttendeeRepository.count_attendees(event_id)
        if count > 0:
            raise BadRequestError(f"参加者が{count}人いるため削除できません")

        EventRepository.delete_event(event_id)
        logger.info(f"Event {event_id} deleted by user {user.id}")
        return {"message": "イベントが削除されました", "eventId": event_id}

    @staticmethod
    def get_created_events(user, query):
        if user is None:
            raise UnauthorizedError("認証が必要です")
        if user.is_anonymous:
            raise ForbiddenError("正規アカウントでのみアクセス可能です")

        validated = validate_request(UserCreatedEventsQuerySchema, query)
        events = EventRepository.find_by_creator(user.id, validated.limit, validated.offset)
        if not events:
            return {"createdEvents": []}

        counts = EventRepository.attendee_counts([event["id"] for event in events])
        created_events = []
        for event in events:
            attendee_count = counts.get(event["id"], 0)
            created_events.append(
                {
                    "id": event["id"],
                    "event": with_attendee_count(event, attendee_count),
                    "created_at": event["created_at"],
                    "attendee_count": attendee_count,
                    "can_edit": True,
                    "can_delete": attendee_count == 0,
                }
            )

        logger.debug(
            f"Created events for user {user.id}: count={len(created_events)}, "
            f"deletable={sum(1 for e in created_events if e['can_delete'])}"
        )
        return {"createdEvents": created_events}
