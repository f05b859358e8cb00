"""
Testes do fan-out de eventos de items (outbox -> resolver -> writer -> push)
"""
import asyncio
from datetime import datetime, timedelta, timezone
from app.models import Notification, NotificationOutbox
from app.models.notification_outbox import OUTBOX_DONE, OUTBOX_FAILED, OUTBOX_PENDING, OUTBOX_PROCESSING
from app.schemas.item import ItemCreate
from app.services.item_service import create_item, soft_delete_item
from app.services.notification_events import (
    DEFAULT_DELETION_REASON,
    claim_outbox_event,
    create_system_alert,
    notification_content,
    process_outbox_event,
)
from tests.helpers import FakeFCM, add_profiles, add_token


def _item_data(**overrides):
    data = {
        "title": "Winter Jacket",
        "main_category": "Clothing",
        "sub_category": "Men",
        "location": "Lahore",
        "contact_number": "03001234567",
    }
    data.update(overrides)
    return ItemCreate(**data)


def _process(db, event, gateway):
    return asyncio.run(process_outbox_event(db, event, gateway))


def _notifications(db):
    db.expire_all()
    return db.query(Notification).order_by(Notification.user_id).all()


def test_new_listing_notifies_everyone_but_the_uploader(db_session):
    add_profiles(db_session, "u1", "u2", "u3")
    add_token(db_session, "u1", "token-u1")
    add_token(db_session, "u2", "token-u2")
    fake = FakeFCM()

    item, event = create_item(db_session, _item_data(), "u1")
    status = _process(db_session, event, fake.gateway())

    assert status == OUTBOX_DONE
    rows = _notifications(db_session)
    assert [r.user_id for r in rows] == ["u2", "u3"]
    for row in rows:
        assert row.type == "new_listing"
        assert row.title == "New Clothing Available"
        assert row.body == "Winter Jacket has been shared in Lahore"
        assert row.payload["item_id"] == item.id
        assert row.payload["uploader_id"] == "u1"
        assert row.is_read is False
    # push só para quem tem token ativo, nunca para o autor
    assert fake.sent_tokens == ["token-u2"]
    assert fake.requests[0]["message"]["data"]["item_id"] == item.id

    db_session.expire_all()
    stored = db_session.get(NotificationOutbox, event.id)
    assert stored.status == OUTBOX_DONE
    assert stored.last_error is None
    assert stored.processed_at is not None


def test_deletion_notifies_with_reason_and_timestamp(db_session):
    add_profiles(db_session, "u1", "u2")
    fake = FakeFCM()
    item, _ = create_item(db_session, _item_data(title="Bread", main_category="Food", location="Downtown"), "u1")

    _, event = soft_delete_item(db_session, item.id, "u1", "Sold out")
    _process(db_session, event, fake.gateway())

    row = [r for r in _notifications(db_session) if r.type == "post_deleted"][0]
    assert row.type == "post_deleted"
    assert row.title == "Post No Longer Available"
    assert row.body == "Bread has been removed from Downtown"
    assert row.payload["deletion_reason"] == "Sold out"
    datetime.fromisoformat(row.payload["deleted_at"])


def test_deletion_without_reason_uses_default(db_session):
    item, _ = create_item(db_session, _item_data(), "u1")
    _, event = soft_delete_item(db_session, item.id, "u1")
    assert event.payload["deletion_reason"] == DEFAULT_DELETION_REASON


def test_actor_id_in_different_format_is_excluded(db_session):
    add_profiles(db_session, "User-1", "u2")
    add_token(db_session, "USER-1 ", "token-actor")
    fake = FakeFCM()

    _, event = create_item(db_session, _item_data(), "user-1")
    _process(db_session, event, fake.gateway())

    assert [r.user_id for r in _notifications(db_session)] == ["u2"]
    assert fake.requests == []


def test_no_other_users_marks_event_done(db_session):
    add_profiles(db_session, "u1")
    fake = FakeFCM()

    _, event = create_item(db_session, _item_data(), "u1")

    assert _process(db_session, event, fake.gateway()) == OUTBOX_DONE
    assert _notifications(db_session) == []
    assert fake.requests == []


def test_without_gateway_notifications_are_still_written(db_session):
    add_profiles(db_session, "u1", "u2")
    add_token(db_session, "u2", "token-u2")

    _, event = create_item(db_session, _item_data(), "u1")

    assert _process(db_session, event, None) == OUTBOX_DONE
    assert [r.user_id for r in _notifications(db_session)] == ["u2"]
    db_session.expire_all()
    assert db_session.get(NotificationOutbox, event.id).last_error == "push gateway not configured"


def test_push_failures_are_recorded_but_event_is_done(db_session):
    add_profiles(db_session, "u1", "u2")
    add_token(db_session, "u2", "token-u2")
    fake = FakeFCM(failing_tokens=["token-u2"])

    _, event = create_item(db_session, _item_data(), "u1")

    assert _process(db_session, event, fake.gateway()) == OUTBOX_DONE
    db_session.expire_all()
    assert db_session.get(NotificationOutbox, event.id).last_error == "1 push deliveries failed"


def test_write_failure_marks_event_failed_and_skips_push(db_session, engine):
    add_profiles(db_session, "u1", "u2")
    add_token(db_session, "u2", "token-u2")
    fake = FakeFCM()
    _, event = create_item(db_session, _item_data(), "u1")
    Notification.__table__.drop(bind=engine)

    assert _process(db_session, event, fake.gateway()) == OUTBOX_FAILED
    assert fake.requests == []
    db_session.expire_all()
    assert db_session.get(NotificationOutbox, event.id).last_error == "notification write failed"


def test_claim_is_exclusive(db_session):
    _, event = create_item(db_session, _item_data(), "u1")
    assert event.status == OUTBOX_PENDING

    claimed = claim_outbox_event(db_session, event.id)
    assert claimed is not None
    assert claimed.status == OUTBOX_PROCESSING
    assert claimed.attempts == 1

    assert claim_outbox_event(db_session, event.id) is None


def test_failed_event_can_be_claimed_again(db_session):
    _, event = create_item(db_session, _item_data(), "u1")
    claim_outbox_event(db_session, event.id)
    event.status = OUTBOX_FAILED
    db_session.commit()

    claimed = claim_outbox_event(db_session, event.id)
    assert claimed.attempts == 2


def test_notification_content_per_event_type():
    payload = {"category": "Electronics", "title": "Phone", "location": "Karachi"}
    assert notification_content("new_listing", payload) == (
        "New Electronics Available", "Phone has been shared in Karachi"
    )
    assert notification_content("post_deleted", payload) == (
        "Post No Longer Available", "Phone has been removed from Karachi"
    )


def test_system_alert_writes_notifications(db_session):
    assert create_system_alert(db_session, ["u1", "u2"], "Maintenance", "Back soon", {"window": "2h"}) is True

    rows = _notifications(db_session)
    assert [r.type for r in rows] == ["system_alert", "system_alert"]
    assert rows[0].payload == {"window": "2h"}


def test_stale_processing_event_can_be_claimed_again(db_session):
    _, event = create_item(db_session, _item_data(), "u1")
    claim_outbox_event(db_session, event.id, stale_seconds=900)
    event.claimed_at = datetime.now(timezone.utc) - timedelta(seconds=1000)
    db_session.commit()

    claimed = claim_outbox_event(db_session, event.id, stale_seconds=900)

    assert claimed is not None
    assert claimed.attempts == 2
