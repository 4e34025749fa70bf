import logging
import os
import re
import time

from flask import current_app

from event_calendar.exceptions import (
    BadRequestError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
)
from event_calendar.repositories import EventRepository, UserRepository
from event_calendar.schemas import EventImageDeleteSchema, ImageDeleteSchema, ImageListQuerySchema
from event_calendar.utils.data import generate_id
from event_calendar.utils.validation import validate_request

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ["image/jpeg", "image/png", "image/webp"]

IMAGE_CONFIGS = {
    "avatar": {"folder": "avatars", "max_size": 2 * 1024 * 1024, "allowed_types": ALLOWED_IMAGE_TYPES},
    "event": {"folder": "events", "max_size": 5 * 1024 * 1024, "allowed_types": ALLOWED_IMAGE_TYPES},
}

IMAGE_KEY_PATTERN = re.compile(r"(?:events|avatars)/[^/]+/[^/]+$")

MAX_LIST_LIMIT = 100


def get_bucket():
    return current_app.extensions["image_bucket"]


def file_extension(filename):
    _, ext = os.path.splitext(filename or "")
    return ext.lower() if ext else ".jpg"


def user_folder(image_type, user_id):
    return f"{IMAGE_CONFIGS[image_type]['folder']}/{user_id}/"


def generate_image_key(filename, image_type, user_id):
    return f"{user_folder(image_type, user_id)}{int(time.time() * 1000)}-{generate_id()}{file_extension(filename)}"


def extract_image_key(image_url):
    """Storage key referenced by an image URL, or None for external images."""
    if not image_url:
        return None
    match = IMAGE_KEY_PATTERN.search(image_url)
    return match.group(0) if match else None


def owned_image_key(image_url, image_type, user_id):
    """Storage key of ``image_url`` if it lives in the user's own folder.

    Image URLs on events and profiles are user supplied and may point at
    another user's upload; only keys under ``<folder>/<user_id>/`` are
    ever deleted on a user's behalf.
    """
    key = extract_image_key(image_url)
    if key and key.startswith(user_folder(image_type, user_id)):
        return key
    return None


def is_user_key(key, user_id):
    return any(key.startswith(user_folder(image_type, user_id)) for image_type in IMAGE_CONFIGS)


def public_url(key):
    base = current_app.config.get("IMAGES_PUBLIC_URL")
    if base:
        return f"{base.rstrip('/')}/{key}"
    return f"/api/images/{key}"


def validate_image(filename, content_type, size, image_type):
    config = IMAGE_CONFIGS[image_type]
    if size > config["max_size"]:
        max_size_mb = round(config["max_size"] / (1024 * 1024))
        raise BadRequestError(f"ファイルサイズが制限を超えています。最大{max_size_mb}MBまで対応しています。")
    if content_type not in config["allowed_types"]:
        raise BadRequestError("対応していないファイル形式です。JPEG、PNG、WebP形式のみ対応しています。")
    if not filename or len(filename) > 255:
        raise BadRequestError("ファイル名が無効です。")


class ImageService:
    @staticmethod
    def upload_image(file, image_type, user_id):
        """Validate and store an uploaded werkzeug FileStorage."""
        data = file.read()
        content_type = file.mimetype or "image/jpeg"
        validate_image(file.filename, content_type, len(data), image_type)

        key = generate_image_key(file.filename, image_type, user_id)
        get_bucket().put(
            key,
            data,
            content_type,
            {
                "original_name": file.filename,
                "uploaded_by": user_id,
                "image_type": image_type,
                "upload_timestamp": str(int(time.time() * 1000)),
                "file_size": str(len(data)),
            },
        )
        logger.info(f"Stored {image_type} image {key} ({len(data)} bytes) for user {user_id}")
        return {"key": key, "url": public_url(key), "file_name": file.filename, "file_size": len(data)}

    @staticmethod
    def delete_image(key):
        try:
            return get_bucket().delete(key)
        except Exception as e:
            logger.error(f"Failed to delete image {key}: {str(e)}")
            return False

    @staticmethod
    def delete_replaced_image(old_url, new_url, image_type, user_id):
        """Delete the user's own image behind ``old_url`` once ``new_url`` replaces it."""
        old_key = owned_image_key(old_url, image_type, user_id)
        if old_key and old_key != extract_image_key(new_url):
            ImageService.delete_image(old_key)
            return old_key
        if old_url and not old_key:
            logger.debug(f"Keeping image {old_url}: not stored under {user_folder(image_type, user_id)}")
        return None

    @staticmethod
    def _owned_event(user, event_id, missing_id_message):
        if user is None:
            raise UnauthorizedError("ログインが必要です。")
        if not event_id:
            raise BadRequestError(missing_id_message)

        event = EventRepository.get_event(event_id)
        if not event:
            raise NotFoundError("イベントが見つかりません。")
        if event["creator_id"] != user.id:
            raise ForbiddenError("このイベントの画像を編集する権限がありません。")
        return event

    @staticmethod
    def upload_event_image(user, event_id, file):
        if user is None:
            raise UnauthorizedError("ログインが必要です。")
        if user.is_anonymous:
            raise ForbiddenError("イベント画像の設定にはアカウント登録が必要です。")
        if file is None:
            raise BadRequestError("イベント画像が選択されていません。")
        event = ImageService._owned_event(user, event_id, "イベントIDが指定されていません。")

        uploaded = ImageService.upload_image(file, "event", user.id)

        try:
            updated = EventRepository.update_event(event_id, {"image_url": uploaded["url"]})
        except Exception as e:
            logger.error(f"Failed to update image_url of event {event_id}: {str(e)}")
            ImageService.delete_image(uploaded["key"])
            raise InternalError("イベント画像情報の更新に失敗しました。") from e

        previous = ImageService.delete_replaced_image(event["image_url"], uploaded["url"], "event", user.id)
        return {
            "success": True,
            "message": "イベント画像が更新されました。",
            "data": {
                "url": uploaded["url"],
                "key": uploaded["key"],
                "fileName": uploaded["file_name"],
                "fileSize": uploaded["file_size"],
                "eventId": event_id,
                "userId": user.id,
                "previousImage": "deleted" if previous else "none",
                "event": updated,
            },
        }

    @staticmethod
    def get_event_image(user, event_id):
        event = ImageService._owned_event(user, event_id, "イベントIDが指定されていません。")
        image_url = event["image_url"]
        return {
            "success": True,
            "message": "イベント画像情報を取得しました。" if image_url else "イベント画像は設定されていません。",
            "data": {
                "eventId": event_id,
                "hasImage": bool(image_url),
                "url": image_url,
                "event": event,
                "userId": user.id,
            },
        }

    @staticmethod
    def delete_event_image(user, data):
        if user is None:
            raise UnauthorizedError("ログインが必要です。")
        if user.is_anonymous:
            raise ForbiddenError("イベント画像の削除にはアカウント登録が必要です。")

        event_id = validate_request(EventImageDeleteSchema, data).eventId
        event = ImageService._owned_event(user, event_id, "イベントIDを指定してください。")
        image_url = event["image_url"]
        if not image_url:
            raise BadRequestError("削除するイベント画像がありません。")

        try:
            updated = EventRepository.update_event(event_id, {"image_url": None})
        except Exception as e:
            logger.error(f"Failed to clear image_url of event {event_id}: {str(e)}")
            raise InternalError("イベント画像情報の更新に失敗しました。") from e

        key = owned_image_key(image_url, "event", user.id)
        if key:
            ImageService.delete_image(key)

        logger.info(f"Removed image of event {event_id} (key={key})")
        return {
            "success": True,
            "message": "イベント画像が削除されました。",
            "data": {
                "eventId": event_id,
                "deletedUrl": image_url,
                "deletedKey": key,
                "userId": user.id,
                "event": updated,
            },
        }

    @staticmethod
    def _account(user):
        if user is None:
            raise UnauthorizedError("ログインが必要です。")
        account = UserRepository.find_by_id(user.id)
        if not account:
            raise NotFoundError("ユーザー情報が見つかりません。")
        return account

    @staticmethod
    def upload_avatar(user, file):
        if user is None:
            raise UnauthorizedError("ログインが必要です。")
        if file is None:
            raise BadRequestError("画像が選択されていません。")
        account = ImageService._account(user)

        uploaded = ImageService.upload_image(file, "avatar", user.id)
        previous_url = account.image

        try:
            UserRepository.update_user(account, {"image": uploaded["url"]})
        except Exception as e:
            logger.error(f"Failed to update avatar of user {user.id}: {str(e)}")
            ImageService.delete_image(uploaded["key"])
            raise InternalError("プロフィール画像の更新に失敗しました。") from e

        previous = ImageService.delete_replaced_image(previous_url, uploaded["url"], "avatar", user.id)
        return {
            "success": True,
            "message": "プロフィール画像が更新されました。",
            "data": {
                "url": uploaded["url"],
                "key": uploaded["key"],
                "fileName": uploaded["file_name"],
                "fileSize": uploaded["file_size"],
                "previousImage": "deleted" if previous else "none",
                "user": account.to_dict(),
            },
        }

    @staticmethod
    def get_avatar(user):
        account = ImageService._account(user).to_dict()
        return {
            "success": True,
            "message": "アバター画像情報を取得しました。" if account["image"] else "アバター画像は設定されていません。",
            "data": {
                "hasAvatar": bool(account["image"]),
                "url": account["image"],
                "updatedAt": account["updated_at"],
                "userId": account["id"],
                "isAnonymous": account["is_anonymous"],
            },
        }

    @staticmethod
    def delete_avatar(user):
        if user is not None and user.is_anonymous:
            raise ForbiddenError("アバター画像の削除にはアカウント登録が必要です。")
        account = ImageService._account(user)
        image_url = account.image
        if not image_url:
            raise BadRequestError("削除するアバター画像がありません。")

        try:
            UserRepository.update_user(account, {"image": None})
        except Exception as e:
            logger.error(f"Failed to clear avatar of user {user.id}: {str(e)}")
            raise InternalError("アバター情報の更新に失敗しました。") from e

        key = owned_image_key(image_url, "avatar", user.id)
        if key:
            ImageService.delete_image(key)

        return {
            "success": True,
            "message": "アバター画像が削除されました。",
            "data": {"deletedUrl": image_url, "deletedKey": key, "userId": user.id},
        }

    @staticmethod
    def upload_typed_image(user, file, image_type):
        """Store an image without attaching it to an event or profile."""
        if user is None:
            raise UnauthorizedError("ログインが必要です。")
        if file is None:
            raise BadRequestError("画像ファイルが選択されていません。")
        if image_type not in IMAGE_CONFIGS:
            raise BadRequestError("画像タイプ（avatar または event）を指定してください。")

        uploaded = ImageService.upload_image(file, image_type, user.id)
        return {
            "success": True,
            "message": "画像がアップロードされました。",
            "data": {
                "url": uploaded["url"],
                "key": uploaded["key"],
                "type": image_type,
                "fileName": uploaded["file_name"],
                "fileSize": uploaded["file_size"],
                "userId": user.id,
            },
        }

    @staticmethod
    def delete_user_image(user, data):
        if user is None:
            raise UnauthorizedError("ログインが必要です。")

        key = validate_request(ImageDeleteSchema, data).key
        if not is_user_key(key, user.id):
            logger.warning(f"User {user.id} tried to delete image {key}")
            raise ForbiddenError("この画像を削除する権限がありません。")

        try:
            get_bucket().delete(key)
        except Exception as e:
            logger.error(f"Failed to delete image {key}: {str(e)}")
            raise InternalError("画像の削除に失敗しました。") from e

        return {
            "success": True,
            "message": "画像が削除されました。",
            "data": {"deletedKey": key, "userId": user.id},
        }

    @staticmethod
    def list_user_images(user, query):
        if user is None:
            raise UnauthorizedError("ログインが必要です。")

        validated = validate_request(ImageListQuerySchema, query)
        image_types = [validated.type] if validated.type else list(IMAGE_CONFIGS)
        limit = min(validated.limit, MAX_LIST_LIMIT)

        bucket = get_bucket()
        keys = []
        for image_type in image_types:
            keys.extend(bucket.list(user_folder(image_type, user.id)))

        images = []
        for key in keys[:limit]:
            stored = bucket.get(key)
            if stored is None:
                continue
            images.append(
                {
                    "key": key,
                    "url": public_url(key),
                    "size": len(stored.data),
                    "uploaded": stored.metadata.get("upload_timestamp"),
                    "type": "avatar" if key.startswith("avatars/") else "event",
                    "metadata": stored.metadata,
                }
            )

        return {
            "success": True,
            "message": f"{len(images)}件の画像が見つかりました。",
            "data": {"images": images, "total": len(images), "hasMore": len(keys) > limit},
        }

    @staticmethod
    def get_image(key):
        image = get_bucket().get(key)
        if image is None:
            raise NotFoundError("画像が見つかりません")
        return image
