"""
Service para gerenciar items (anúncios)
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from app.models.item import Item
from app.models.notification_outbox import NotificationOutbox
from app.schemas.item import ItemCreate
from app.schemas.notification import NotificationType
from app.services.notification_events import add_outbox_event
from app.utils.identity import same_user

logger = logging.getLogger(__name__)

FOOD_CATEGORY = "Food"
FOOD_EXPIRED_REASON = "Food item expired"


class ItemNotFound(Exception):
    """Item inexistente ou que não pertence ao usuário"""
    pass


def _to_utc(value: Optional[datetime]) -> Optional[datetime]:
    # datetime sem fuso é tratado como UTC
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc)


def create_item(db: Session, data: ItemCreate, owner_id: str) -> Tuple[Item, NotificationOutbox]:
    """
    Cria o item e o evento de notificação na mesma transação.
    """
    item = Item(
        title=data.title.strip(),
        description=data.description,
        main_category=data.main_category.strip(),
        sub_category=data.sub_category,
        location=data.location.strip(),
        latitude=data.latitude,
        longitude=data.longitude,
        contact_number=data.contact_number,
        contact1=data.contact1,
        contact2=data.contact2,
        owner_id=owner_id,
        is_active=True,
        image_urls=list(data.image_urls),
        video_url=data.video_url,
        expires_at=_to_utc(data.expires_at),
    )
    db.add(item)
    db.flush()

    event = add_outbox_event(db, NotificationType.NEW_LISTING, item, owner_id)
    db.commit()
    db.refresh(item)

    logger.info(f"Item created: {item.id} (outbox event {event.id})")
    return item, event


def soft_delete_item(
    db: Session,
    item_id: str,
    owner_id: str,
    reason: Optional[str] = None,
) -> Tuple[Item, Optional[NotificationOutbox]]:
    """
    Marca o item como inativo. Só o dono pode remover.
    Item já inativo não gera novo evento.

    Raises:
        ItemNotFound: se o item não existir ou não for do usuário
    """
    item = db.query(Item).filter(Item.id == item_id).first()
    if not item or not same_user(item.owner_id, owner_id):
        raise ItemNotFound(item_id)

    if not item.is_active:
        logger.info(f"Item {item_id} already inactive")
        return item, None

    item.is_active = False
    event = add_outbox_event(db, NotificationType.POST_DELETED, item, item.owner_id, reason)
    db.commit()
    db.refresh(item)

    logger.info(f"Item soft-deleted: {item.id} (outbox event {event.id})")
    return item, event


def list_active_items(db: Session, limit: int = 50, offset: int = 0) -> List[Item]:
    return db.query(Item).filter(
        Item.is_active.is_(True)
    ).order_by(Item.created_at.desc(), Item.id).limit(limit).offset(offset).all()


def list_user_items(db: Session, owner_id: str) -> List[Item]:
    return db.query(Item).filter(
        Item.owner_id == owner_id,
        Item.is_active.is_(True),
    ).order_by(Item.created_at.desc()).all()


def expire_food_items(db: Session, now: Optional[datetime] = None) -> List[NotificationOutbox]:
    """
    Remove (soft delete) os itens ativos da categoria Food com expires_at no
    passado. Cada remoção passa por soft_delete_item e gera o evento de
    post_deleted como uma remoção feita pelo dono.

    Falha em um item é logada e não interrompe os demais.

    Returns:
        eventos de outbox criados
    """
    now = now or datetime.now(timezone.utc)
    expired = db.query(Item).filter(
        Item.is_active.is_(True),
        Item.main_category == FOOD_CATEGORY,
        Item.expires_at.isnot(None),
        Item.expires_at < now,
    ).order_by(Item.expires_at, Item.id).all()

    if not expired:
        logger.info("No expired food items found")
        return []

    logger.info(f"Found {len(expired)} expired food items")
    events = []
    for item in expired:
        try:
            _, event = soft_delete_item(db, item.id, item.owner_id, FOOD_EXPIRED_REASON)
        except Exception as e:
            logger.error(f"Failed to expire item {item.id}: {e}", exc_info=True)
            db.rollback()
            continue
        if event is not None:
            events.append(event)

    logger.info(f"Expiry cleanup completed: {len(events)} of {len(expired)} items removed")
    return events
