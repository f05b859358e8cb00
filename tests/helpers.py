"""
Utilitários de teste: gateway FCM falso e criação de dados
"""
import json
import httpx
from app.models import DeviceToken, Profile
from app.services.push_gateway import PushGatewayClient


class FakeFCM:
    """
    Gateway FCM falso baseado em httpx.MockTransport.
    Registra cada mensagem recebida, na ordem de envio.
    """

    def __init__(self, failing_tokens=(), raising_tokens=(), error="NotRegistered"):
        self.failing_tokens = set(failing_tokens)
        self.raising_tokens = set(raising_tokens)
        self.error = error
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        message = json.loads(request.content)
        self.requests.append({"headers": dict(request.headers), "message": message})
        token = message["to"]
        if token in self.raising_tokens:
            raise httpx.ConnectError("connection refused", request=request)
        if token in self.failing_tokens:
            return httpx.Response(
                200,
                json={"success": 0, "failure": 1, "results": [{"error": self.error}]},
            )
        return httpx.Response(
            200,
            json={"success": 1, "failure": 0, "results": [{"message_id": "0:1"}]},
        )

    @property
    def sent_tokens(self):
        return [r["message"]["to"] for r in self.requests]

    def gateway(self) -> PushGatewayClient:
        return PushGatewayClient("test-server-key", transport=httpx.MockTransport(self.handler))


def auth_headers(user_id: str) -> dict:
    """Token de desenvolvimento para o usuário informado."""
    return {"Authorization": f"Bearer test:{user_id}"}


def add_profiles(db, *user_ids):
    for user_id in user_ids:
        db.add(Profile(id=user_id, email=f"{user_id.strip().lower()}@example.com"))
    db.commit()


def add_token(db, user_id, token, active=True, platform="android"):
    row = DeviceToken(user_id=user_id, device_token=token, platform=platform, is_active=active)
    db.add(row)
    db.commit()
    return row
