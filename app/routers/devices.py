"""
Router para registro de dispositivos (tokens FCM)
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies.auth import get_current_user
from app.schemas.device_token import RegisterDeviceRequest, DeviceResponse
from app.services.device_registry import register_or_refresh, deactivate_all

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/devices/register", response_model=DeviceResponse)
async def register_device(
    body: RegisterDeviceRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """
    Registra o token FCM do dispositivo do usuário.
    Chamado pelo app após login e a cada rotação de token. Idempotente.
    """
    if not register_or_refresh(db, user_id, body.device_token, body.platform):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error registering device token"
        )
    return DeviceResponse(success=True, message="Device token registered")


@router.post("/devices/deactivate", response_model=DeviceResponse)
async def deactivate_devices(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """
    Desativa os tokens do usuário (logout). Nunca falha o logout: erro de
    banco só é refletido em success=false.
    """
    ok = deactivate_all(db, user_id)
    message = "Device tokens deactivated" if ok else "Could not deactivate device tokens"
    return DeviceResponse(success=ok, message=message)
