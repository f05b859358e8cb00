"""
Edge function de envio de push: POST /send-push-notifications

Contrato JSON próprio (camelCase, erros em {"error": ...}) e CORS aberto,
independente das rotas da API.
"""
import logging
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.push import SendPushRequest
from app.services.push_dispatcher import (
    DispatchValidationError,
    MISSING_FIELDS_MESSAGE,
    PushDispatcher,
)
from app.services.push_gateway import PushGatewayClient

logger = logging.getLogger(__name__)
router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def get_push_gateway(request: Request) -> PushGatewayClient:
    """Constrói o cliente FCM; lança PushConfigError sem FCM_SERVER_KEY."""
    return request.app.state.push_gateway_factory()


def _json(content: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=content, status_code=status_code, headers=CORS_HEADERS)


@router.options("/send-push-notifications")
async def send_push_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/send-push-notifications")
async def send_push_notifications(request: Request, db: Session = Depends(get_db)):
    """
    Envia push para os tokens ativos dos usuários.

    Body:
    {
        "userIds": ["uuid1", ...],
        "title": "New Post Available!",
        "body": "iPhone 13 has been shared in New York",
        "type": "new_listing",
        "data": {"item_id": "123"}
    }
    """
    try:
        logger.info("Push notification function called")
        gateway = get_push_gateway(request)

        try:
            raw = await request.json()
            payload = SendPushRequest.model_validate(raw)
        except (ValueError, ValidationError) as e:
            logger.warning(f"Invalid push request body: {e}")
            return _json({"error": MISSING_FIELDS_MESSAGE}, status_code=400)

        dispatcher = PushDispatcher(db, gateway)
        try:
            result = await dispatcher.dispatch(
                payload.user_ids,
                payload.title,
                payload.body,
                payload.type,
                payload.data,
            )
        except DispatchValidationError as e:
            return _json({"error": str(e)}, status_code=400)

        if not result.has_tokens:
            return _json({"success": True, "message": result.message, "sentCount": 0})

        return _json({
            "success": True,
            "message": result.message,
            "sentCount": result.success_count,
            "failedCount": result.failure_count,
            "details": [r.to_dict() for r in result.results],
        })

    except Exception as e:
        logger.error(f"Error in push notification function: {e}", exc_info=True)
        return _json({"error": "Internal server error", "message": str(e)}, status_code=500)
