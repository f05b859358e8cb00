from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import redis
from sqlalchemy import text
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from app.config import Settings, get_settings
from app.database import build_engine, build_session_factory
from app.routers import devices, items, notifications, push_function
from app.services.push_gateway import PushGatewayClient
from app.services.supabase_auth import SupabaseAuth

# Configurar logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Monta a aplicação com as settings recebidas. Engine, sessões, auth e o
    cliente de push ficam em app.state (sem clientes globais).
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Madadgar API",
        description="Backend de anúncios e notificações do Madadgar",
        version="1.0.0",
        debug=settings.DEBUG,
    )

    engine = build_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.auth = SupabaseAuth.from_settings(settings)
    app.state.push_gateway_factory = lambda: PushGatewayClient.from_settings(settings)

    # Rate limiting
    app.state.limiter = Limiter(
        key_func=get_remote_address,
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        default_limits=[settings.RATE_LIMIT_PER_IP],
        enabled=settings.RATE_LIMIT_ENABLED,
    )
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Configurar CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Incluir routers
    app.include_router(items.router, prefix=settings.API_V1_PREFIX, tags=["items"])
    app.include_router(notifications.router, prefix=settings.API_V1_PREFIX, tags=["notifications"])
    app.include_router(devices.router, prefix=settings.API_V1_PREFIX, tags=["devices"])
    app.include_router(push_function.router, prefix=settings.FUNCTIONS_PREFIX, tags=["functions"])

    _add_health_routes(app)
    return app


def _add_health_routes(app: FastAPI) -> None:

    @app.get("/health")
    async def health():
        """Health check básico"""
        return {"status": "healthy"}

    @app.get("/health/live")
    async def health_live():
        """Liveness check - verifica se a aplicação está viva"""
        return {"status": "alive"}

    @app.get("/health/ready")
    async def health_ready(request: Request):
        """Readiness check - verifica se o banco responde"""
        try:
            with request.app.state.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {"status": "ready"}
        except Exception as e:
            return JSONResponse(
                status_code=503,
                content={"status": "not ready", "error": str(e)}
            )

    @app.get("/health/detailed")
    async def health_detailed(request: Request):
        """Health check detalhado com status de dependências"""
        settings = request.app.state.settings
        health_status = {
            "status": "healthy",
            "checks": {}
        }

        # Verificar banco de dados
        try:
            with request.app.state.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            health_status["checks"]["database"] = "ok"
        except Exception as e:
            health_status["checks"]["database"] = f"error: {str(e)}"
            health_status["status"] = "unhealthy"

        # Verificar Redis (broker do Celery)
        try:
            r = redis.from_url(settings.REDIS_URL, socket_connect_timeout=2)
            r.ping()
            health_status["checks"]["redis"] = "ok"
        except Exception as e:
            health_status["checks"]["redis"] = f"error: {str(e)}"
            if health_status["status"] == "healthy":
                health_status["status"] = "degraded"

        # Push gateway configurado?
        health_status["checks"]["push_gateway"] = "ok" if settings.FCM_SERVER_KEY else "not_configured"
        if not settings.FCM_SERVER_KEY and health_status["status"] == "healthy":
            health_status["status"] = "degraded"

        status_code = 200 if health_status["status"] == "healthy" else 503
        return JSONResponse(content=health_status, status_code=status_code)


app = create_app()
