from flask import Blueprint, current_app, jsonify, request

from event_calendar.exceptions import ApiError
from event_calendar.services import EventService, RegistrationContext, RegistrationService
from event_calendar.utils.auth import get_current_user
from event_calendar.utils.responses import error_response

event_bp = Blueprint("event", __name__)


@event_bp.route("/events", methods=["GET", "OPTIONS"])
def get_all_events():
    if request.method == "OPTIONS":
        return "", 204

    try:
        return jsonify(EventService.get_events()), 200
    except Exception as e:
        current_app.logger.error(f"Error fetching events: {str(e)}", exc_info=True)
        return error_response("イベントの取得中にエラーが発生しました", 500)


@event_bp.route("/events/<event_id>", methods=["GET", "OPTIONS"])
def get_event(event_id):
    if request.method == "OPTIONS":
        return "", 204

    try:
        return jsonify(EventService.get_event(event_id)), 200
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Error fetching event {event_id}: {str(e)}", exc_info=True)
        return error_response("イベントの取得中にエラーが発生しました", 500)


@event_bp.route("/events/create", methods=["POST", "OPTIONS"])
def create_event():
    if request.method == "OPTIONS":
        return "", 204

    try:
        result = EventService.create_event(get_current_user(), request.get_json(silent=True))
        return jsonify(result), 201
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Error creating event: {str(e)}", exc_info=True)
        return jsonify(
            {
                "success": False,
                "message": "イベントの作成中にエラーが発生しました",
                "error": "イベントの作成中にエラーが発生しました",
            }
        ), 500


@event_bp.route("/events/<event_id>/update", methods=["PUT", "OPTIONS"])
def update_event(event_id):
    if request.method == "OPTIONS":
        return "", 204

    try:
        result = EventService.update_event(get_current_user(), event_id, request.get_json(silent=True))
        return jsonify(result), 200
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Error updating event {event_id}: {str(e)}", exc_info=True)
        return error_response("イベントの更新中にエラーが発生しました", 500)


@event_bp.route("/events/<event_id>/delete", methods=["DELETE", "OPTIONS"])
def delete_event(event_id):
    if request.method == "OPTIONS":
        return "", 204

    try:
        result = EventService.delete_event(get_current_user(), event_id)
        return jsonify(result), 200
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Error deleting event {event_id}: {str(e)}", exc_info=True)
        return error_response("イベントの削除中にエラーが発生しました", 500)


@event_bp.route("/events/<event_id>/apply", methods=["POST", "OPTIONS"])
def apply_for_event(event_id):
    if request.method == "OPTIONS":
        return "", 204

    try:
        ctx = RegistrationContext.from_config(current_app.config)
        result = RegistrationService.apply(ctx, get_current_user(), event_id, request.get_json(silent=True))
        return jsonify(result), 200
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Error applying to event {event_id}: {str(e)}", exc_info=True)
        return error_response("イベントの申し込み中にエラーが発生しました", 500)


@event_bp.route("/events/<event_id>/cancel", methods=["DELETE", "OPTIONS"])
def cancel_registration(event_id):
    if request.method == "OPTIONS":
        return "", 204

    try:
        ctx = RegistrationContext.from_config(current_app.config)
        result = RegistrationService.cancel(ctx, get_current_user(), event_id, request.get_json(silent=True))
        return jsonify(result), 200
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Error cancelling registration for event {event_id}: {str(e)}", exc_info=True)
        return error_response("イベントのキャンセル中にエラーが発生しました", 500)
