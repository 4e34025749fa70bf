from flask import Blueprint, current_app, jsonify, make_response, request
from flask_jwt_extended import set_access_cookies, unset_jwt_cookies

from event_calendar.exceptions import ApiError
from event_calendar.extensions import limiter
from event_calendar.services import UserService
from event_calendar.utils.auth import get_current_user
from event_calendar.utils.responses import error_response

auth_bp = Blueprint("auth", __name__)


def _auth_response(result, status):
    response = make_response(jsonify(result), status)
    set_access_cookies(response, result["token"])
    return response


@auth_bp.route("/sign-up", methods=["POST"])
@limiter.limit("10 per minute")
def sign_up():
    try:
        result = UserService.sign_up(request.get_json(silent=True), current_user=get_current_user())
        return _auth_response(result, 201)
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Sign up error: {str(e)}", exc_info=True)
        return error_response("ユーザー登録中にエラーが発生しました", 500)


@auth_bp.route("/sign-in", methods=["POST"])
@limiter.limit("10 per minute")
def sign_in():
    try:
        result = UserService.sign_in(request.get_json(silent=True))
        return _auth_response(result, 200)
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Login error: {str(e)}", exc_info=True)
        return error_response("ログイン中にエラーが発生しました", 500)


@auth_bp.route("/anonymous", methods=["POST"])
@limiter.limit("10 per minute")
def sign_in_anonymous():
    try:
        return _auth_response(UserService.sign_in_anonymous(), 201)
    except Exception as e:
        current_app.logger.error(f"Anonymous sign in error: {str(e)}", exc_info=True)
        return error_response("ゲストログイン中にエラーが発生しました", 500)


@auth_bp.route("/session", methods=["GET"])
def get_session():
    return jsonify(UserService.get_session(get_current_user())), 200


@auth_bp.route("/sign-out", methods=["POST"])
def sign_out():
    response = make_response(
        jsonify({"success": True, "authenticated": False, "message": "ログアウトしました"}), 200
    )
    unset_jwt_cookies(response)
    return response
