"""
Cliente do gateway de push (Firebase Cloud Messaging, API HTTP legada)
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
import httpx
from app.config import Settings

logger = logging.getLogger(__name__)


class PushConfigError(Exception):
    """Gateway de push não configurado (FCM_SERVER_KEY ausente)"""
    pass


@dataclass
class GatewayResult:
    success: bool
    error: Optional[str] = None


def stringify_data(data: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """O bloco data do FCM só aceita valores string; None é descartado."""
    if not data:
        return {}
    return {str(k): str(v) for k, v in data.items() if v is not None}


class PushGatewayClient:
    """
    Envia uma mensagem por token ao FCM.

    Sem estado de conexão: cada disparo abre seu próprio cliente HTTP com
    open_client() e o passa para send(), então a instância pode ser
    compartilhada entre disparos concorrentes.
    """

    def __init__(
        self,
        server_key: str,
        send_url: str = "https://fcm.googleapis.com/fcm/send",
        timeout: float = 10.0,
        channel_id: str = "madadgar_notifications",
        icon: str = "ic_notification",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not server_key:
            raise PushConfigError("FCM_SERVER_KEY environment variable not set")
        self.server_key = server_key
        self.send_url = send_url
        self.timeout = timeout
        self.channel_id = channel_id
        self.icon = icon
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "PushGatewayClient":
        return cls(
            server_key=settings.FCM_SERVER_KEY,
            send_url=settings.FCM_SEND_URL,
            timeout=settings.FCM_TIMEOUT,
            channel_id=settings.PUSH_CHANNEL_ID,
            icon=settings.PUSH_ICON,
            transport=transport,
        )

    def open_client(self) -> httpx.AsyncClient:
        """Novo cliente HTTP; quem abre é responsável por fechar (async with)."""
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"key={self.server_key}",
            "Content-Type": "application/json",
        }

    def build_message(
        self,
        device_token: str,
        user_id: str,
        title: str,
        body: str,
        notification_type: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Monta a mensagem de um token. Os blocos genérico, Android e APNs são
        preenchidos com o mesmo título/corpo/dados.
        """
        message_data = stringify_data(data)
        message_data.update({
            "type": notification_type or "",
            "user_id": user_id,
            "click_action": "OPEN_APP",
        })
        return {
            "to": device_token,
            "notification": {
                "title": title,
                "body": body,
                "icon": self.icon,
                "sound": "default",
                "click_action": "FLUTTER_NOTIFICATION_CLICK",
            },
            "data": message_data,
            "android": {
                "notification": {
                    "channel_id": self.channel_id,
                    "priority": "high",
                    "sound": "default",
                }
            },
            "apns": {
                "payload": {
                    "aps": {
                        "alert": {"title": title, "body": body},
                        "sound": "default",
                        "badge": 1,
                    }
                }
            },
        }

    @staticmethod
    def _parse_response(response: httpx.Response) -> GatewayResult:
        try:
            result = response.json()
        except ValueError:
            result = None

        if not isinstance(result, dict):
            if response.is_success:
                return GatewayResult(success=False, error="Unknown FCM error")
            return GatewayResult(success=False, error=f"HTTP {response.status_code}")

        if response.is_success and result.get("success") == 1:
            return GatewayResult(success=True)

        error = None
        results = result.get("results")
        if isinstance(results, list) and results and isinstance(results[0], dict):
            error = results[0].get("error")
        return GatewayResult(success=False, error=error or "Unknown FCM error")

    async def send(
        self,
        message: Dict[str, Any],
        client: Optional[httpx.AsyncClient] = None,
    ) -> GatewayResult:
        """
        Envia uma mensagem. Erros de transporte são propagados para quem
        chama (o dispatcher contabiliza como falha do token).
        Sem client, abre uma conexão só para este envio.
        """
        if client is not None:
            response = await client.post(self.send_url, json=message, headers=self._headers())
        else:
            async with self.open_client() as client:
                response = await client.post(self.send_url, json=message, headers=self._headers())

        logger.debug(f"FCM response {response.status_code}: {response.text[:200]}")
        return self._parse_response(response)
