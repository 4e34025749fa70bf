from flask import Blueprint, current_app, jsonify, make_response, request

from event_calendar.exceptions import ApiError
from event_calendar.services import ImageService
from event_calendar.utils.auth import get_current_user
from event_calendar.utils.responses import error_response

upload_bp = Blueprint("upload", __name__)


def _require_multipart():
    if not request.mimetype or request.mimetype != "multipart/form-data":
        return error_response("FormDataでのリクエストが必要です。", 400)
    return None


@upload_bp.route("/upload/event-image", methods=["POST"])
def upload_event_image():
    user = get_current_user()
    if user is None:
        return error_response("ログインが必要です。", 401)

    invalid = _require_multipart()
    if invalid:
        return invalid

    try:
        result = ImageService.upload_event_image(
            user, request.form.get("eventId"), request.files.get("file")
        )
        return jsonify(result), 200
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Event image upload error: {str(e)}", exc_info=True)
        return error_response("アップロード中にエラーが発生しました。しばらく時間をおいて再度お試しください。", 500)


@upload_bp.route("/upload/avatar", methods=["POST"])
def upload_avatar():
    user = get_current_user()
    if user is None:
        return error_response("ログインが必要です。", 401)

    invalid = _require_multipart()
    if invalid:
        return invalid

    try:
        result = ImageService.upload_avatar(user, request.files.get("file"))
        return jsonify(result), 200
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Avatar upload error: {str(e)}", exc_info=True)
        return error_response("アップロード中にエラーが発生しました。しばらく時間をおいて再度お試しください。", 500)


@upload_bp.route("/upload/event-image", methods=["GET"])
def get_event_image():
    try:
        result = ImageService.get_event_image(get_current_user(), request.args.get("eventId"))
        return jsonify(result), 200
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Event image info error: {str(e)}", exc_info=True)
        return error_response("イベント画像情報の取得に失敗しました。", 500)


@upload_bp.route("/upload/event-image", methods=["DELETE"])
def delete_event_image():
    try:
        result = ImageService.delete_event_image(get_current_user(), request.get_json(silent=True))
        return jsonify(result), 200
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Event image deletion error: {str(e)}", exc_info=True)
        return error_response("サーバーエラーが発生しました。", 500)


@upload_bp.route("/upload/avatar", methods=["GET"])
def get_avatar():
    try:
        return jsonify(ImageService.get_avatar(get_current_user())), 200
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Avatar info error: {str(e)}", exc_info=True)
        return error_response("アバター情報の取得に失敗しました。", 500)


@upload_bp.route("/upload/avatar", methods=["DELETE"])
def delete_avatar():
    try:
        return jsonify(ImageService.delete_avatar(get_current_user())), 200
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Avatar deletion error: {str(e)}", exc_info=True)
        return error_response("サーバーエラーが発生しました。", 500)


@upload_bp.route("/upload/image", methods=["POST"])
def upload_image():
    user = get_current_user()
    if user is None:
        return error_response("ログインが必要です。", 401)

    invalid = _require_multipart()
    if invalid:
        return invalid

    try:
        result = ImageService.upload_typed_image(user, request.files.get("file"), request.form.get("type"))
        return jsonify(result), 200
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Image upload error: {str(e)}", exc_info=True)
        return error_response("サーバーエラーが発生しました。", 500)


@upload_bp.route("/upload/image", methods=["GET"])
def list_images():
    try:
        result = ImageService.list_user_images(get_current_user(), request.args.to_dict())
        return jsonify(result), 200
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Image list error: {str(e)}", exc_info=True)
        return error_response("画像一覧の取得に失敗しました。", 500)


@upload_bp.route("/upload/image", methods=["DELETE"])
def delete_image():
    try:
        result = ImageService.delete_user_image(get_current_user(), request.get_json(silent=True))
        return jsonify(result), 200
    except ApiError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        current_app.logger.error(f"Image deletion error: {str(e)}", exc_info=True)
        return error_response("サーバーエラーが発生しました。", 500)


@upload_bp.route("/images/<path:key>", methods=["GET"])
def get_image(key):
    try:
        image = ImageService.get_image(key)
    except ApiError as e:
        return error_response(e.message, e.status_code)

    response = make_response(image.data)
    response.headers["Content-Type"] = image.content_type
    response.headers["Cache-Control"] = "public, max-age=31536000"
    return response
