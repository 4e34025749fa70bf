from event_calendar.extensions import db
from event_calendar.models import Attendee
from event_calendar.repositories import AttendeeRepository, UserRepository

from tests.conftest import auth_headers


def sign_up_payload(**overrides):
    payload = {"email": "hanako@example.com", "password": "password123", "name": "花子"}
    payload.update(overrides)
    return payload


def test_sign_up(client):
    response = client.post("/api/auth/sign-up", json=sign_up_payload())
    assert response.status_code == 201

    body = response.get_json()
    assert body["authenticated"] is True
    assert body["token"]
    assert body["user"]["email"] == "hanako@example.com"
    assert body["user"]["is_anonymous"] is False
    assert "password" not in body["user"]
    assert any(c.startswith("access_token_cookie=") for c in response.headers.getlist("Set-Cookie"))


def test_sign_up_with_existing_email(client, make_user):
    make_user(email="hanako@example.com")
    response = client.post("/api/auth/sign-up", json=sign_up_payload())
    assert response.status_code == 409
    assert response.get_json()["error"] == "このメールアドレスは既に登録されています"


def test_sign_up_validation(client):
    response = client.post("/api/auth/sign-up", json=sign_up_payload(email="invalid", password="short"))
    assert response.status_code == 400
    assert response.get_json()["error"] == (
        "有効なメールアドレスを入力してください, パスワードは8文字以上で入力してください"
    )


def test_sign_up_upgrades_anonymous_session(client, make_user, make_event):
    anonymous, token = make_user(anonymous=True)
    event = make_event()
    db.session.add(Attendee(event_id=event["id"], user_id=anonymous.id, email=anonymous.email))
    db.session.commit()
    anonymous_id = anonymous.id

    response = client.post("/api/auth/sign-up", json=sign_up_payload(), headers=auth_headers(token))
    assert response.status_code == 201
    new_user_id = response.get_json()["user"]["id"]

    db.session.expire_all()
    assert UserRepository.find_by_id(anonymous_id) is None
    registration = AttendeeRepository.find_attendee(event["id"], new_user_id)
    assert registration is not None
    assert registration["email"] == "hanako@example.com"


def test_sign_in(client, make_user):
    make_user(email="taro@example.com", password="secret-password")
    response = client.post("/api/auth/sign-in", json={"email": "taro@example.com", "password": "secret-password"})
    assert response.status_code == 200
    assert response.get_json()["user"]["email"] == "taro@example.com"


def test_sign_in_with_wrong_password(client, make_user):
    make_user(email="taro@example.com", password="secret-password")
    response = client.post("/api/auth/sign-in", json={"email": "taro@example.com", "password": "wrong-password"})
    assert response.status_code == 401
    assert response.get_json()["error"] == "メールアドレスまたはパスワードが正しくありません"


def test_sign_in_missing_fields(client):
    response = client.post("/api/auth/sign-in", json={})
    assert response.status_code == 400
    assert response.get_json()["error"] == "メールアドレスは必須です, パスワードは必須です"


def test_anonymous_sign_in(client):
    response = client.post("/api/auth/anonymous")
    assert response.status_code == 201
    user = response.get_json()["user"]
    assert user["is_anonymous"] is True
    assert user["email"].endswith("@anonymous.invalid")


def test_session(client, make_user):
    user, token = make_user()
    response = client.get("/api/auth/session", headers=auth_headers(token))
    assert response.status_code == 200
    assert response.get_json()["user"]["id"] == user.id

    response = client.get("/api/auth/session")
    assert response.get_json()["authenticated"] is False


def test_sign_out(client):
    response = client.post("/api/auth/sign-out")
    assert response.status_code == 200
    assert response.get_json()["authenticated"] is False
