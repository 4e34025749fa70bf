"""Request schemas.

Each schema maps pydantic error types onto the user-facing messages shown by
the frontend, keyed by ``(field, error type)``. Errors without an entry keep
pydantic's own message.
"""
import re
from typing import Annotated, ClassVar, Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic_core import PydanticCustomError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
URL_PATTERN = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)
IMAGE_PATH_PATTERN = re.compile(r"^(/api/images/)?(events|avatars)/[^/\s]+/[^/\s]+$")

INVALID_BODY_MESSAGE = "リクエストの形式が正しくありません"


class RequestSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    messages: ClassVar[Dict[Tuple[str, str], str]] = {}

    @classmethod
    def message_for(cls, error: dict) -> str:
        field = ".".join(str(part) for part in error.get("loc", ()))
        if not field:
            return INVALID_BODY_MESSAGE
        return cls.messages.get((field, error["type"]), error["msg"])


def _check_image_url(value):
    if value is None or value == "":
        return value
    if URL_PATTERN.match(value) or IMAGE_PATH_PATTERN.match(value):
        return value
    raise PydanticCustomError("url", "有効なURLを入力してください")


# Auth

class LoginSchema(RequestSchema):
    email: Annotated[str, StringConstraints(min_length=1)]
    password: Annotated[str, StringConstraints(min_length=1)]

    messages = {
        ("email", "missing"): "メールアドレスは必須です",
        ("email", "string_type"): "メールアドレスは必須です",
        ("email", "string_too_short"): "メールアドレスは必須です",
        ("password", "missing"): "パスワードは必須です",
        ("password", "string_type"): "パスワードは必須です",
        ("password", "string_too_short"): "パスワードは必須です",
    }

    @field_validator("email")
    @classmethod
    def check_email(cls, value):
        if not EMAIL_PATTERN.match(value):
            raise PydanticCustomError("email", "有効なメールアドレスを入力してください")
        return value


class RegisterSchema(LoginSchema):
    password: Annotated[str, StringConstraints(min_length=8, max_length=128)]
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=20)]

    messages = {
        **LoginSchema.messages,
        ("password", "string_too_short"): "パスワードは8文字以上で入力してください",
        ("password", "string_too_long"): "パスワードは128文字以内で入力してください",
        ("name", "missing"): "お名前は必須です",
        ("name", "string_type"): "お名前は必須です",
        ("name", "string_too_short"): "お名前は必須です",
        ("name", "string_too_long"): "お名前は20文字以内で入力してください",
    }


# Events

EVENT_MESSAGES = {
    ("title", "missing"): "タイトルは必須です",
    ("title", "string_type"): "タイトルは必須です",
    ("title", "string_too_short"): "タイトルは必須です",
    ("title", "string_too_long"): "タイトルは100文字以内で入力してください",
    ("date", "missing"): "開催日時は必須です",
    ("date", "string_type"): "開催日時は必須です",
    ("date", "string_too_short"): "開催日時は必須です",
    ("location", "missing"): "開催場所は必須です",
    ("location", "string_type"): "開催場所は必須です",
    ("location", "string_too_short"): "開催場所は必須です",
    ("location", "string_too_long"): "開催場所は100文字以内で入力してください",
    ("description", "string_too_long"): "説明は1000文字以内で入力してください",
    ("image_url", "string_type"): "有効なURLを入力してください",
    ("capacity", "int_type"): "定員は数値で入力してください",
    ("capacity", "greater_than_equal"): "定員は1人以上で設定してください",
}


class CreateEventSchema(RequestSchema):
    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
    date: Annotated[str, StringConstraints(min_length=1)]
    location: Annotated[str, StringConstraints(min_length=1, max_length=100)]
    description: Optional[Annotated[str, StringConstraints(max_length=1000)]] = None
    image_url: Optional[str] = None
    capacity: Optional[Annotated[int, Field(ge=1, strict=True)]] = None

    messages = EVENT_MESSAGES

    @field_validator("image_url")
    @classmethod
    def check_image_url(cls, value):
        return _check_image_url(value)


class UpdateEventSchema(RequestSchema):
    title: Optional[Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]] = None
    date: Optional[Annotated[str, StringConstraints(min_length=1)]] = None
    location: Optional[Annotated[str, StringConstraints(min_length=1, max_length=100)]] = None
    description: Optional[Annotated[str, StringConstraints(max_length=1000)]] = None
    image_url: Optional[str] = None
    capacity: Optional[Annotated[int, Field(ge=1, strict=True)]] = None

    messages = EVENT_MESSAGES

    @field_validator("image_url")
    @classmethod
    def check_image_url(cls, value):
        return _check_image_url(value)


# Registrations

class EventApplySchema(RequestSchema):
    """Body of an apply request. Empty for now; unknown keys are ignored."""


class EventCancelSchema(RequestSchema):
    reason: Optional[Annotated[str, StringConstraints(max_length=500)]] = None

    messages = {
        ("reason", "string_too_long"): "キャンセル理由は500文字以内で入力してください",
    }


# Listing queries

class PaginationQuerySchema(RequestSchema):
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)

    messages = {
        ("limit", "int_parsing"): "limitは数値で指定してください",
        ("limit", "greater_than_equal"): "limitは1以上で指定してください",
        ("limit", "less_than_equal"): "limitは100以下で指定してください",
        ("offset", "int_parsing"): "offsetは数値で指定してください",
        ("offset", "greater_than_equal"): "offsetは0以上で指定してください",
    }


class UserRegistrationsQuerySchema(PaginationQuerySchema):
    pass


class UserCreatedEventsQuerySchema(PaginationQuerySchema):
    pass


# Images

class EventImageDeleteSchema(RequestSchema):
    eventId: Annotated[str, StringConstraints(min_length=1)]

    messages = {
        ("eventId", "missing"): "イベントIDを指定してください。",
        ("eventId", "string_type"): "イベントIDを指定してください。",
        ("eventId", "string_too_short"): "イベントIDを指定してください。",
    }


class ImageDeleteSchema(RequestSchema):
    key: Annotated[str, StringConstraints(min_length=1)]

    messages = {
        ("key", "missing"): "削除する画像のキーを指定してください。",
        ("key", "string_type"): "削除する画像のキーを指定してください。",
        ("key", "string_too_short"): "削除する画像のキーを指定してください。",
    }


class ImageListQuerySchema(RequestSchema):
    type: Optional[Literal["avatar", "event"]] = None
    # values above the maximum are clamped by the service
    limit: int = Field(default=10, ge=1)

    messages = {
        ("type", "literal_error"): "画像タイプ（avatar または event）を指定してください。",
        ("limit", "int_parsing"): "limitは数値で指定してください",
        ("limit", "greater_than_equal"): "limitは1以上で指定してください",
    }
