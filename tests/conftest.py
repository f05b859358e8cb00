"""
Fixtures compartilhadas: app com SQLite em memória e gateway FCM falso
"""
import pytest
from fastapi.testclient import TestClient
from app.config import Settings
from app.main import create_app
from app.models import Base
from tests.helpers import FakeFCM


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        DEV_MODE=True,
        RATE_LIMIT_ENABLED=False,
        FCM_SERVER_KEY="test-server-key",
        SUPABASE_JWKS_URL="",
    )


@pytest.fixture
def fake_fcm():
    return FakeFCM()


@pytest.fixture
def test_app(settings, fake_fcm):
    application = create_app(settings)
    application.state.push_gateway_factory = fake_fcm.gateway
    Base.metadata.create_all(bind=application.state.engine)
    try:
        yield application
    finally:
        Base.metadata.drop_all(bind=application.state.engine)
        application.state.engine.dispose()


@pytest.fixture
def engine(test_app):
    return test_app.state.engine


@pytest.fixture
def db_session(test_app):
    db = test_app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(test_app):
    return TestClient(test_app)
