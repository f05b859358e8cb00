"""
Router para endpoints de items (anúncios)
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Body, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies.auth import get_current_user
from app.schemas.item import ItemCreate, ItemResponse, ItemDeleteRequest
from app.services.item_service import (
    ItemNotFound,
    create_item,
    soft_delete_item,
    list_active_items,
    list_user_items,
)
from app.tasks.notification_tasks import enqueue_notification_event

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/items", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def create_listing(
    body: ItemCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """
    Cria um anúncio. A notificação dos outros usuários é processada em
    background e não afeta a resposta.
    """
    try:
        item, event = create_item(db, body, user_id)
    except Exception as e:
        logger.error(f"Error creating item: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error creating item"
        )

    enqueue_notification_event(event.id)
    return ItemResponse.model_validate(item)


@router.get("/items", response_model=List[ItemResponse])
async def list_items(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """Lista anúncios ativos, mais recentes primeiro."""
    return [ItemResponse.model_validate(i) for i in list_active_items(db, limit, offset)]


@router.get("/items/mine", response_model=List[ItemResponse])
async def list_my_items(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """Lista os anúncios ativos do usuário."""
    return [ItemResponse.model_validate(i) for i in list_user_items(db, user_id)]


@router.delete("/items/{item_id}", response_model=ItemResponse)
async def delete_listing(
    item_id: str,
    body: Optional[ItemDeleteRequest] = Body(default=None),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """
    Remove (soft delete) um anúncio do próprio usuário e notifica os demais.
    """
    reason = body.reason if body else None
    try:
        item, event = soft_delete_item(db, item_id, user_id, reason)
    except ItemNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    except Exception as e:
        logger.error(f"Error deleting item: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error deleting item"
        )

    if event is not None:
        enqueue_notification_event(event.id)
    return ItemResponse.model_validate(item)
