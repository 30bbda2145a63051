"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from gatekeeper.database import Base, get_db
from gatekeeper.models.user import User  # noqa: F401
from gatekeeper.services.auth import AuthService, TokenLifetimes
from gatekeeper.services.jwt import JWTService
from gatekeeper.services.password import PasswordHasher
from gatekeeper.services.session_store import MemorySessionStore
from gatekeeper.services.users import UserRepository

TEST_SECRET = "test-secret-key"


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class RecordingNotifier:
    """Collects reset tokens instead of delivering them."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    def send_reset_token(self, user, token: str, expires_in: timedelta) -> None:
        self.sent.append((user.email, token))

    @property
    def last_token(self) -> str:
        return self.sent[-1][1]


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="clock")
def clock_fixture() -> ManualClock:
    return ManualClock()


@pytest.fixture(name="session_store")
def session_store_fixture(clock: ManualClock) -> MemorySessionStore:
    return MemorySessionStore(clock=clock)


@pytest.fixture(name="hasher")
def hasher_fixture() -> PasswordHasher:
    """Minimum bcrypt cost keeps the suite fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture(name="jwt_service")
def jwt_service_fixture(clock: ManualClock) -> JWTService:
    return JWTService(secret_key=TEST_SECRET, clock=clock)


@pytest.fixture(name="notifier")
def notifier_fixture() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture(name="auth_service")
def auth_service_fixture(
    db_session: Session,
    session_store: MemorySessionStore,
    jwt_service: JWTService,
    hasher: PasswordHasher,
    notifier: RecordingNotifier,
    clock: ManualClock,
) -> AuthService:
    return AuthService(
        users=UserRepository(db_session, clock=clock),
        sessions=session_store,
        tokens=jwt_service,
        hasher=hasher,
        notifier=notifier,
        lifetimes=TokenLifetimes(),
        clock=clock,
    )


@pytest.fixture(name="client")
def client_fixture(
    db_session: Session,
    session_store: MemorySessionStore,
    jwt_service: JWTService,
    hasher: PasswordHasher,
    notifier: RecordingNotifier,
    clock: ManualClock,
):
    """Create a test client whose services share the fixtures above."""
    from gatekeeper.clock import get_clock
    from gatekeeper.dependencies import get_token_lifetimes
    from gatekeeper.services.jwt import get_jwt_service
    from gatekeeper.services.notifier import get_reset_notifier
    from gatekeeper.services.password import get_password_hasher
    from gatekeeper.services.session_store import get_session_store
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_jwt_service] = lambda: jwt_service
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    app.dependency_overrides[get_reset_notifier] = lambda: notifier
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_token_lifetimes] = lambda: TokenLifetimes()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(name="test_user")
def test_user_fixture(auth_service: AuthService) -> dict:
    """Create a test user and return its public fields plus password."""
    result = auth_service.sign_up("test@example.com", "password123", "Test", "User")
    return {
        "id": result.user.id,
        "email": result.user.email,
        "first_name": result.user.first_name,
        "last_name": result.user.last_name,
        "password": "password123",
    }
