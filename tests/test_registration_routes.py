from event_calendar.extensions import db
from event_calendar.models import Attendee
from event_calendar.repositories import AttendeeRepository

from tests.conftest import PAST_EVENT_DATE, auth_headers


def test_apply_and_cancel(client, make_user, make_event):
    user, token = make_user(email="taro@example.com")
    event = make_event(capacity=5)

    response = client.post(f"/api/events/{event['id']}/apply", json={}, headers=auth_headers(token))
    assert response.status_code == 200
    body = response.get_json()
    assert body["message"] == "イベントに申し込みました"
    assert body["registration"]["user_id"] == user.id
    assert body["registration"]["email"] == "taro@example.com"
    assert AttendeeRepository.count_attendees(event["id"]) == 1

    response = client.delete(f"/api/events/{event['id']}/cancel", headers=auth_headers(token))
    assert response.status_code == 200
    assert response.get_json()["cancelled_registration_id"] == body["registration"]["id"]
    assert AttendeeRepository.count_attendees(event["id"]) == 0


def test_apply_without_token_is_unauthorized(client, make_event):
    event = make_event()
    response = client.post(f"/api/events/{event['id']}/apply", json={})
    assert response.status_code == 401
    assert response.get_json() == {"error": "認証が必要です"}


def test_apply_with_invalid_token_is_unauthorized(client, make_event):
    event = make_event()
    response = client.post(f"/api/events/{event['id']}/apply", json={}, headers=auth_headers("not-a-jwt"))
    assert response.status_code == 401


def test_apply_to_unknown_event(client, make_user):
    _, token = make_user()
    response = client.post("/api/events/unknown/apply", json={}, headers=auth_headers(token))
    assert response.status_code == 404
    assert response.get_json()["error"] == "指定されたイベントが見つかりません"


def test_apply_accepts_missing_body(client, make_user, make_event):
    _, token = make_user()
    event = make_event()
    response = client.post(f"/api/events/{event['id']}/apply", headers=auth_headers(token))
    assert response.status_code == 200


def test_apply_to_full_event(client, make_user, make_event):
    event = make_event(capacity=1)
    _, first = make_user()
    _, second = make_user()

    assert client.post(f"/api/events/{event['id']}/apply", json={}, headers=auth_headers(first)).status_code == 200
    response = client.post(f"/api/events/{event['id']}/apply", json={}, headers=auth_headers(second))
    assert response.status_code == 400
    assert response.get_json()["error"] == "このイベントは満員です（定員：1人）"


def test_apply_twice(client, make_user, make_event):
    _, token = make_user()
    event = make_event()
    client.post(f"/api/events/{event['id']}/apply", json={}, headers=auth_headers(token))
    response = client.post(f"/api/events/{event['id']}/apply", json={}, headers=auth_headers(token))
    assert response.status_code == 400
    assert response.get_json()["error"] == "すでにこのイベントに申し込み済みです"


def test_apply_and_cancel_on_past_event(client, make_user, make_event):
    user, token = make_user()
    event = make_event(date=PAST_EVENT_DATE)

    response = client.post(f"/api/events/{event['id']}/apply", json={}, headers=auth_headers(token))
    assert response.status_code == 400
    assert response.get_json()["error"] == "イベント開始後の申し込みはできません"

    db.session.add(Attendee(event_id=event["id"], user_id=user.id, email=user.email))
    db.session.commit()
    response = client.delete(f"/api/events/{event['id']}/cancel", headers=auth_headers(token))
    assert response.status_code == 400
    assert response.get_json()["error"] == "イベント開始後のキャンセルはできません"


def test_cancel_without_registration(client, make_user, make_event):
    _, token = make_user()
    event = make_event()
    response = client.delete(f"/api/events/{event['id']}/cancel", headers=auth_headers(token))
    assert response.status_code == 400
    assert response.get_json()["error"] == "このイベントに申し込みをしていません"


def test_wrong_method_is_not_allowed(client, make_event):
    event = make_event()
    response = client.get(f"/api/events/{event['id']}/apply")
    assert response.status_code == 405
    assert response.get_json() == {"error": "Method not allowed"}

    response = client.post(f"/api/events/{event['id']}/cancel")
    assert response.status_code == 405


def test_preflight_request(client, make_event):
    event = make_event()
    response = client.options(f"/api/events/{event['id']}/apply")
    assert response.status_code == 204


def test_insert_attendee_respects_capacity(app, make_event):
    event = make_event(capacity=2)

    assert AttendeeRepository.insert_attendee("a1", event["id"], "u1", "u1@example.com", 1, capacity=2)
    assert AttendeeRepository.insert_attendee("a2", event["id"], "u2", "u2@example.com", 2, capacity=2)
    assert not AttendeeRepository.insert_attendee("a3", event["id"], "u3", "u3@example.com", 3, capacity=2)

    assert AttendeeRepository.count_attendees(event["id"]) == 2
    assert AttendeeRepository.get_attendee("a3") is None


def test_insert_attendee_without_capacity(app, make_event):
    event = make_event()
    for i in range(5):
        assert AttendeeRepository.insert_attendee(f"a{i}", event["id"], f"u{i}", "x@example.com", i)
    assert AttendeeRepository.count_attendees(event["id"]) == 5
    assert AttendeeRepository.get_attendee("a4")["created_at"] == 4
