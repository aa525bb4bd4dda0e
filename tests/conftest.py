# tests/conftest.py
import os

# Настройки читаются при импорте app.core.config, поэтому окружение задаем до импортов приложения
os.environ.update({
    "DATABASE_URL_OVERRIDE": "sqlite://",
    "SECRET_KEY": "test-secret-key",
    "STRIPE_SECRET_KEY": "sk_test_dummy",
    "FRONTEND_URL": "https://hwplug.test",
    "RESEND_API_KEY": "re_test_dummy",
    "EMAIL_FROM": "orders@hwplug.test",
    "OPERATOR_EMAIL": "operator@hwplug.test",
    "CREDENTIALS_ENCRYPTION_KEY": "MDEyMzQ1Njc4OWFiY2RlZjAxMjM0NTY3ODlhYmNkZWY=",
    "ADMIN_EMAIL": "admin@hwplug.test",
    "ADMIN_PASSWORD": "admin-pass",
    "RATE_LIMIT_ENABLED": "false",
    "RATE_LIMIT_STORAGE_URI": "memory://",
    "DISCOUNT_BASE": "post_credit",
})

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from app.clients.mailer import Mailer, get_mailer
from app.clients.payments import CheckoutSession, PaymentClient, get_payment_client
from app.core.redis import get_redis_client
from app.core.security import hash_password
from app.db.session import Base
from app.dependencies import get_db
from app.main import app
from app.models.discount import Discount
from app.models import referral  # Импортируем все модели для создания таблиц
from app.models.order import Order
from app.models.user import User
from app.services.auth import create_admin_token, create_user_token

# In-memory SQLite с одним общим соединением: запросы из пула потоков видят те же таблицы
SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_SESSION_ID = "cs_test_a1b2c3"
TEST_SESSION_URL = "https://checkout.stripe.com/c/pay/cs_test_a1b2c3"


@pytest.fixture(scope="function")
def db_session() -> Session:
    """
    Фикстура для создания чистой базы данных для каждого теста.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mock_payments() -> MagicMock:
    payments = MagicMock(spec=PaymentClient)
    payments.create_checkout_session = AsyncMock(
        return_value=CheckoutSession(id=TEST_SESSION_ID, url=TEST_SESSION_URL)
    )
    return payments


@pytest.fixture
def mock_mailer() -> MagicMock:
    mailer = MagicMock(spec=Mailer)
    mailer.send = AsyncMock(return_value=True)
    return mailer


@pytest.fixture
def mock_redis() -> MagicMock:
    redis = MagicMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    return redis


@pytest.fixture
async def client(db_session, mock_payments, mock_mailer, mock_redis):
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_payment_client] = lambda: mock_payments
    app.dependency_overrides[get_mailer] = lambda: mock_mailer
    app.dependency_overrides[get_redis_client] = lambda: mock_redis

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def make_user(db: Session, email: str = "student@example.com", credits: float = 0,
              referral_code: str = "HWTEST0001", password: str = "secret123") -> User:
    user = User(
        email=email,
        password_hash=hash_password(password),
        name="Test Student",
        referral_code=referral_code,
        credits=credits,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_discount(db: Session, code: str = "SAVE10", type: str = "percentage", value: float = 10,
                  min_purchase: float = 0, max_uses: int | None = None, used_count: int = 0,
                  active: bool = True, expires_at: datetime | None = None) -> Discount:
    discount = Discount(
        code=code, type=type, value=value, min_purchase=min_purchase,
        max_uses=max_uses, used_count=used_count, active=active, expires_at=expires_at,
    )
    db.add(discount)
    db.commit()
    db.refresh(discount)
    return discount


@pytest.fixture
def test_user(db_session) -> User:
    return make_user(db_session, credits=5)


@pytest.fixture
def user_auth_headers(test_user) -> dict:
    return {"Authorization": f"Bearer {create_user_token(test_user)}"}


@pytest.fixture
def admin_auth_headers() -> dict:
    return {"Authorization": f"Bearer {create_admin_token('admin@hwplug.test')}"}


@pytest.fixture
def save10(db_session) -> Discount:
    return make_discount(db_session)


@pytest.fixture
def expired_discount(db_session) -> Discount:
    return make_discount(
        db_session, code="OLD5", type="fixed", value=5,
        expires_at=datetime.now(timezone.utc) - timedelta(days=1),
    )


def make_order(db: Session, customer_email: str = "student@example.com", user_id: int | None = None,
               total: float = 20, status: str = "pending", **fields) -> Order:
    data = {
        "items": [{"name": "Essay", "price": total, "qty": 1}],
        "subtotal": total,
        "credits_used": 0,
        "discount_amount": 0,
    }
    data.update(fields)
    order = Order(customer_email=customer_email, user_id=user_id, total=total, status=status, **data)
    db.add(order)
    db.commit()
    db.refresh(order)
    return order


# --- Фабрики для тестов, которым нужно несколько объектов ---

@pytest.fixture
def user_factory(db_session):
    return lambda **kwargs: make_user(db_session, **kwargs)


@pytest.fixture
def discount_factory(db_session):
    return lambda **kwargs: make_discount(db_session, **kwargs)


@pytest.fixture
def order_factory(db_session):
    return lambda **kwargs: make_order(db_session, **kwargs)
