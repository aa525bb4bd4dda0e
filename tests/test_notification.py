# tests/test_notification.py

import pytest
from unittest.mock import AsyncMock, MagicMock

from app.clients.mailer import Mailer
from app.core.config import settings
from app.core.security import encrypt_secret
from app.models.order import Order
from app.models.user import User
from app.services import notification


def _order(**overrides) -> Order:
    fields = dict(
        id=42,
        customer_email="buyer@example.com",
        items=[{"name": "Essay <b>", "price": 10, "qty": 2}],
        subtotal=20,
        credits_used=5,
        total=13.5,
        homework_email="buyer@uni.ac.uk",
        homework_password_encrypted=encrypt_secret("hunter2"),
        discount_code="SAVE10",
        discount_amount=1.5,
        status="pending",
    )
    fields.update(overrides)
    return Order(**fields)


def test_order_confirmation_has_totals_and_no_credentials():
    subject, html = notification.format_order_confirmation(_order())

    assert subject == "Order Confirmed! 🎉"
    assert "Order #42" in html
    assert "£13.50" in html
    assert "Essay &lt;b&gt;" in html
    assert "hunter2" not in html
    assert "buyer@uni.ac.uk" not in html


def test_operator_email_points_to_credentials_endpoint():
    subject, html = notification.format_operator_order(_order())

    assert subject == "New hwplug Order #42"
    assert "buyer@uni.ac.uk" in html
    assert "hunter2" not in html
    assert "/api/admin/order/42/credentials" in html
    assert "£20.00" in html
    assert "SAVE10" in html


def test_operator_email_can_include_password(monkeypatch):
    monkeypatch.setattr(settings, "NOTIFY_INCLUDE_CREDENTIALS", True)

    _, html = notification.format_operator_order(_order())

    assert "hunter2" in html


def test_welcome_mentions_referral_bonus():
    user = User(name="Ann", email="ann@example.com", referral_code="HWANN00001")

    _, plain = notification.format_welcome(user)
    _, with_bonus = notification.format_welcome(user, referral_bonus=1)

    assert "HWANN00001" in plain
    assert "referral code!" not in plain
    assert "£1.00 credit" in with_bonus


@pytest.mark.asyncio
async def test_order_notifications_go_to_customer_and_operator():
    mailer = MagicMock(spec=Mailer)
    mailer.send = AsyncMock(return_value=True)

    await notification.send_order_notifications(mailer, _order())

    recipients = [call.args[0] for call in mailer.send.call_args_list]
    assert recipients == ["buyer@example.com", settings.OPERATOR_EMAIL]


@pytest.mark.asyncio
async def test_mailer_failure_is_swallowed(mocker):
    send = mocker.patch("app.clients.mailer.resend.Emails.send", side_effect=RuntimeError("resend down"))
    mailer = Mailer(api_key="re_test", sender="orders@hwplug.test")

    result = await mailer.send("buyer@example.com", "Hello", "<p>Hi</p>")

    assert result is False
    send.assert_called_once()
    assert send.call_args.args[0]["to"] == ["buyer@example.com"]


@pytest.mark.asyncio
async def test_mailer_success(mocker):
    mocker.patch("app.clients.mailer.resend.Emails.send", return_value={"id": "email_123"})
    mailer = Mailer(api_key="re_test", sender="orders@hwplug.test")

    assert await mailer.send("buyer@example.com", "Hello", "<p>Hi</p>") is True
