import os
import sys
from pathlib import Path

import pytest

# Add the parent directory to the path so we can import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

# Settings are read at import time
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-testing-only-0123456789")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

from eth_account import Account
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import SessionIssuer
from app.db.base import Base
from app.services.auth import WalletAuthService
from app.services.messages import Role
from app.services.nonce_store import NonceStore
from app.services.principals import AdminUserRepository, FarmerRepository, InvestorRepository
from app.services.rate_limiter import RateLimiter
from app.services.signature import SignatureVerifier
from scripts.sign_login import sign_login_message
from tests.factories import ADMIN_KEY, FARMER_KEY, INVESTOR_KEY
from tests.fakes import FakeRedis

TEST_SECRET = os.environ["JWT_SECRET"]


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture(scope="function")
def db_session() -> Session:
    """Create a fresh database session for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def verifier() -> SignatureVerifier:
    return SignatureVerifier(name="OwnaFarm", version="1", chain_id=5003)


@pytest.fixture
def session_issuer() -> SessionIssuer:
    return SessionIssuer(secret=TEST_SECRET, expiration_hours=24)


@pytest.fixture
def rate_limiters(fake_redis: FakeRedis) -> dict:
    return {
        role: RateLimiter(fake_redis, max_attempts=5, window_seconds=900, scope=f"{role.value}_login")
        for role in Role
    }


@pytest.fixture
def auth_service(fake_redis, db_session, verifier, session_issuer, rate_limiters) -> WalletAuthService:
    return WalletAuthService(
        nonce_store=NonceStore(fake_redis, ttl_seconds=300),
        verifier=verifier,
        rate_limiters=rate_limiters,
        session_issuer=session_issuer,
        repositories={
            Role.INVESTOR: InvestorRepository(db_session),
            Role.FARMER: FarmerRepository(db_session),
            Role.ADMIN: AdminUserRepository(db_session),
        },
        product="OwnaFarm",
    )


@pytest.fixture
def investor_account():
    return Account.from_key(INVESTOR_KEY)


@pytest.fixture
def farmer_account():
    return Account.from_key(FARMER_KEY)


@pytest.fixture
def admin_account():
    return Account.from_key(ADMIN_KEY)


@pytest.fixture
def sign():
    """sign(account, message, verifier) -> 0x-prefixed 65-byte signature (v = 27/28)."""
    def _sign(account, message: str, verifier: SignatureVerifier) -> str:
        return sign_login_message(account.key, message, verifier)
    return _sign

