"""
Testes da remoção automática de itens de comida vencidos
"""
from datetime import datetime, timedelta, timezone
from unittest.mock import patch
from app.models import Item, NotificationOutbox
from app.schemas.item import ItemCreate
from app.services.item_service import FOOD_EXPIRED_REASON, create_item, expire_food_items
from app.tasks.item_tasks import expire_food_items_task


def _create(db, title, category="Food", expires_in_hours=None, owner="u1"):
    expires_at = None
    if expires_in_hours is not None:
        expires_at = datetime.now(timezone.utc) + timedelta(hours=expires_in_hours)
    item, _ = create_item(db, ItemCreate(
        title=title,
        main_category=category,
        location="Downtown",
        contact_number="123",
        expires_at=expires_at,
    ), owner)
    return item.id


def _is_active(db, item_id):
    db.expire_all()
    return db.get(Item, item_id).is_active


def test_only_expired_active_food_items_are_removed(db_session):
    expired = _create(db_session, "Bread", expires_in_hours=-2)
    fresh = _create(db_session, "Rice", expires_in_hours=5)
    no_expiry = _create(db_session, "Lentils")
    other_category = _create(db_session, "Old Jacket", category="Clothing", expires_in_hours=-2)

    events = expire_food_items(db_session)

    assert [e.item_id for e in events] == [expired]
    assert _is_active(db_session, expired) is False
    assert _is_active(db_session, fresh) is True
    assert _is_active(db_session, no_expiry) is True
    assert _is_active(db_session, other_category) is True


def test_expiry_creates_post_deleted_event(db_session):
    item_id = _create(db_session, "Bread", expires_in_hours=-1, owner="u7")

    event = expire_food_items(db_session)[0]

    assert event.event_type == "post_deleted"
    assert event.actor_id == "u7"
    assert event.payload["deletion_reason"] == FOOD_EXPIRED_REASON
    assert event.payload["item_id"] == item_id


def test_expiry_uses_explicit_now_and_skips_already_removed(db_session):
    item_id = _create(db_session, "Bread", expires_in_hours=3)

    later = datetime.now(timezone.utc) + timedelta(hours=4)
    assert len(expire_food_items(db_session, now=later)) == 1
    assert expire_food_items(db_session, now=later) == []
    assert _is_active(db_session, item_id) is False


def test_expiry_with_non_utc_offset_is_compared_in_utc(db_session):
    # 1h no passado, expresso em UTC+5
    expires_at = datetime.now(timezone(timedelta(hours=5))) - timedelta(hours=1)
    item, _ = create_item(db_session, ItemCreate(
        title="Bread", main_category="Food", location="Lahore",
        contact_number="123", expires_at=expires_at,
    ), "u1")

    assert [e.item_id for e in expire_food_items(db_session)] == [item.id]


def test_expiry_task_enqueues_one_notification_per_removed_item(test_app, db_session):
    _create(db_session, "Bread", expires_in_hours=-1)
    _create(db_session, "Milk", expires_in_hours=-3)

    with patch("app.tasks.item_tasks.get_session_factory", return_value=test_app.state.session_factory), \
         patch("app.tasks.item_tasks.enqueue_notification_event") as mock_enqueue:
        result = expire_food_items_task.apply().get()

    assert result == {"expired": 2}
    db_session.expire_all()
    deleted_ids = {
        e.id for e in db_session.query(NotificationOutbox).filter(
            NotificationOutbox.event_type == "post_deleted"
        )
    }
    assert {c.args[0] for c in mock_enqueue.call_args_list} == deleted_ids
