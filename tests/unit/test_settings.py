"""Unit tests that do not require a running API or external services."""

from decimal import Decimal

from schoolpay.config import Settings, settings
from schoolpay.database import asyncpg_url
from schoolpay.models.enums import PaymentStatus, TransactionType
from schoolpay.services.finance_service import signed_amount


def test_settings_load():
    assert settings.API_V1_PREFIX == "/api/v1"
    assert isinstance(settings.ALLOWED_ORIGINS, list)


def test_environment_flag():
    assert settings.is_development == (settings.ENVIRONMENT.lower() == "development")
    assert settings.is_production == (settings.ENVIRONMENT.lower() == "production")


def test_millisecond_settings_convert_to_seconds():
    config = Settings(RATE_LIMIT_WINDOW=60000, SESSION_TIMEOUT=3600000)
    assert config.rate_limit_window_seconds == 60.0
    assert config.session_timeout_seconds == 3600.0


def test_asyncpg_url_strips_sslmode():
    url, connect_args = asyncpg_url("postgresql://u:p@db.example.com:5432/sekolah?sslmode=require")
    assert url == "postgresql+asyncpg://u:p@db.example.com:5432/sekolah"
    assert "ssl" in connect_args


def test_asyncpg_url_keeps_other_params():
    url, connect_args = asyncpg_url("postgresql://u:p@localhost/sekolah?sslmode=require&application_name=pay")
    assert url == "postgresql+asyncpg://u:p@localhost/sekolah?application_name=pay"

    url, connect_args = asyncpg_url("postgresql://u:p@localhost/sekolah")
    assert url == "postgresql+asyncpg://u:p@localhost/sekolah"
    assert connect_args == {}


def test_payment_status_groups():
    assert set(PaymentStatus.payable()) == {PaymentStatus.PENDING, PaymentStatus.OVERDUE}
    assert set(PaymentStatus.settled()) == {PaymentStatus.PAID, PaymentStatus.CANCELLED}


def test_signed_amount():
    assert signed_amount(TransactionType.INCOME, Decimal("5000")) == Decimal("5000")
    assert signed_amount(TransactionType.EXPENSE, Decimal("5000")) == Decimal("-5000")
