"""
Disparo de push para uma lista de usuários com contabilização por token
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from app.models.send_log import NotificationSendLog
from app.services.device_registry import list_active_tokens_for, token_prefix
from app.services.push_gateway import PushGatewayClient

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Missing required fields: userIds, title, body"
NO_TOKENS_MESSAGE = "No active device tokens found"


class DispatchValidationError(ValueError):
    """Campos obrigatórios ausentes; nenhum envio é feito"""
    pass


@dataclass
class TokenResult:
    token: str
    success: bool
    error: Optional[str] = None

    def to_dict(self, mask_token: bool = False) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "token": token_prefix(self.token) if mask_token else self.token,
            "success": self.success,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class DispatchResult:
    success_count: int = 0
    failure_count: int = 0
    results: List[TokenResult] = field(default_factory=list)
    message: str = ""

    @property
    def has_tokens(self) -> bool:
        return bool(self.results)


class PushDispatcher:
    """
    Envia uma mensagem por token ativo dos destinatários.

    Os envios são sequenciais, na ordem do registro de tokens. Depois da
    validação nenhuma falha de token interrompe o disparo e o método sempre
    devolve o agregado.
    """

    def __init__(self, db: Session, gateway: PushGatewayClient):
        self.db = db
        self.gateway = gateway

    @staticmethod
    def validate(user_ids: Optional[List[str]], title: Optional[str], body: Optional[str]) -> None:
        if user_ids is None or not title or not body:
            raise DispatchValidationError(MISSING_FIELDS_MESSAGE)

    async def dispatch(
        self,
        user_ids: Optional[List[str]],
        title: Optional[str],
        body: Optional[str],
        notification_type: str = "",
        data: Optional[Dict[str, Any]] = None,
    ) -> DispatchResult:
        """
        Dispara o push.

        Raises:
            DispatchValidationError: se user_ids, title ou body estiverem ausentes
        """
        self.validate(user_ids, title, body)

        logger.info(f"Fetching device tokens for {len(user_ids)} users")
        tokens = list_active_tokens_for(self.db, user_ids)
        logger.info(f"Found {len(tokens)} active device tokens")

        if not tokens:
            return DispatchResult(message=NO_TOKENS_MESSAGE)

        result = DispatchResult()
        async with self.gateway.open_client() as client:
            for device in tokens:
                message = self.gateway.build_message(
                    device_token=device.device_token,
                    user_id=device.user_id,
                    title=title,
                    body=body,
                    notification_type=notification_type,
                    data=data,
                )
                logger.info(f"Sending notification to token: {token_prefix(device.device_token)}")
                try:
                    outcome = await self.gateway.send(message, client)
                except Exception as e:
                    result.failure_count += 1
                    result.results.append(TokenResult(token=device.device_token, success=False, error=str(e)))
                    logger.error(f"Exception sending notification: {e}")
                    continue

                if outcome.success:
                    result.success_count += 1
                    result.results.append(TokenResult(token=device.device_token, success=True))
                else:
                    result.failure_count += 1
                    result.results.append(
                        TokenResult(token=device.device_token, success=False, error=outcome.error)
                    )
                    logger.warning(f"Failed to send notification: {outcome.error}")

        result.message = (
            f"Push notifications processed: {result.success_count} sent, "
            f"{result.failure_count} failed"
        )
        logger.info(result.message)

        self._write_send_log(user_ids, title, body, notification_type, result)
        return result

    def _write_send_log(
        self,
        user_ids: List[str],
        title: str,
        body: str,
        notification_type: str,
        result: DispatchResult,
    ) -> None:
        """Grava o log agregado do disparo; falhas aqui não alteram o resultado."""
        try:
            self.db.add(NotificationSendLog(
                user_ids=list(user_ids),
                title=title,
                body=body,
                type=notification_type,
                success_count=result.success_count,
                failure_count=result.failure_count,
                results=[r.to_dict(mask_token=True) for r in result.results],
            ))
            self.db.commit()
        except Exception as e:
            logger.warning(f"Failed to log notification results: {e}")
            self.db.rollback()
