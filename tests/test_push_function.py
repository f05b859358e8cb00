"""
Testes da edge function /functions/v1/send-push-notifications
"""
from app.services.push_gateway import PushGatewayClient
from tests.helpers import add_token

URL = "/functions/v1/send-push-notifications"


def test_sends_to_active_tokens(client, db_session, fake_fcm):
    add_token(db_session, "u2", "token-u2")
    add_token(db_session, "u3", "token-u3")
    fake_fcm.failing_tokens.add("token-u3")

    response = client.post(URL, json={
        "userIds": ["u2", "u3"],
        "title": "New Post Available!",
        "body": "iPhone 13 has been shared in New York",
        "type": "new_listing",
        "data": {"item_id": "123"},
    })

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["sentCount"] == 1
    assert data["failedCount"] == 1
    assert data["message"] == "Push notifications processed: 1 sent, 1 failed"
    assert data["details"] == [
        {"token": "token-u2", "success": True},
        {"token": "token-u3", "success": False, "error": "NotRegistered"},
    ]
    assert fake_fcm.requests[0]["message"]["data"]["item_id"] == "123"


def test_missing_title_is_rejected_without_sending(client, db_session, fake_fcm):
    add_token(db_session, "u2", "token-u2")

    response = client.post(URL, json={"userIds": ["u2"], "body": "b"})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields: userIds, title, body"}
    assert fake_fcm.requests == []


def test_missing_user_ids_is_rejected(client, fake_fcm):
    response = client.post(URL, json={"title": "t", "body": "b"})

    assert response.status_code == 400
    assert fake_fcm.requests == []


def test_invalid_json_is_rejected(client, fake_fcm):
    response = client.post(URL, content=b"not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert "error" in response.json()


def test_no_active_tokens(client):
    response = client.post(URL, json={"userIds": ["nobody"], "title": "t", "body": "b"})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "No active device tokens found",
        "sentCount": 0,
    }


def test_empty_user_ids_is_not_a_validation_error(client, fake_fcm):
    response = client.post(URL, json={"userIds": [], "title": "t", "body": "b"})

    assert response.status_code == 200
    assert response.json()["sentCount"] == 0
    assert fake_fcm.requests == []


def test_preflight_returns_cors_headers(client):
    response = client.options(URL)

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "content-type" in response.headers["access-control-allow-headers"]
    assert response.content == b""


def test_cors_headers_on_responses(client):
    response = client.post(URL, json={"title": "t"})
    assert response.headers["access-control-allow-origin"] == "*"


def test_missing_server_key_is_internal_error(client, test_app, fake_fcm):
    test_app.state.push_gateway_factory = lambda: PushGatewayClient("")

    response = client.post(URL, json={"userIds": ["u2"], "title": "t", "body": "b"})

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "Internal server error"
    assert "FCM_SERVER_KEY" in data["message"]
    assert fake_fcm.requests == []
