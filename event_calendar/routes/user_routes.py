from flask import Blueprint, current_app, jsonify, request

from event_calendar.exceptions import ApiError
from event_calendar.services import EventService, UserService
from event_calendar.utils.auth import get_current_user
from event_calendar.utils.responses import error_response

user_bp = Blueprint("user", __name__)


@user_bp.route("/registrations", methods=["GET"])
def get_registrations():
    try:
        result = UserService.get_registrations(get_current_user(), request.args.to_dict())
        return jsonify(result), 200
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Error fetching user registrations: {str(e)}", exc_info=True)
        return error_response("申し込み履歴の取得中にエラーが発生しました", 500)


@user_bp.route("/created-events", methods=["GET"])
def get_created_events():
    try:
        result = EventService.get_created_events(get_current_user(), request.args.to_dict())
        return jsonify(result), 200
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Error fetching user created events: {str(e)}", exc_info=True)
        return error_response("作成イベント履歴の取得中にエラーが発生しました", 500)
