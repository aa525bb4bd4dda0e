# app/services/notification.py

import logging
from datetime import datetime, timezone
from html import escape

from app.clients.mailer import Mailer
from app.core.config import settings
from app.core.security import decrypt_secret
from app.models.order import Order
from app.models.user import User

logger = logging.getLogger(__name__)


def _money(value: float) -> str:
    return f"£{value:.2f}"


def _items_summary(items: list) -> str:
    return ", ".join(escape(str(item.get("name", ""))) for item in items)


def _format_items_list(items: list) -> str:
    lines = []
    for item in items:
        qty = item.get("qty", 1)
        line_total = float(item.get("price", 0)) * qty
        lines.append(f"<li>{escape(str(item.get('name', '')))} (×{qty}) - {_money(line_total)}</li>")
    return "<ul>" + "".join(lines) + "</ul>"


def _credentials_block(order: Order) -> str:
    """Данные домашнего аккаунта для письма оператору."""
    parts = [f"<p><strong>Homework email:</strong> {escape(order.homework_email or '-')}</p>"]
    if settings.NOTIFY_INCLUDE_CREDENTIALS:
        password = decrypt_secret(order.homework_password_encrypted)
        parts.append(f"<p><strong>Homework password:</strong> {escape(password or '-')}</p>")
    elif order.homework_password_encrypted:
        parts.append(
            f"<p>The password is stored encrypted. Open "
            f"<code>/api/admin/order/{order.id}/credentials</code> to view it.</p>"
        )
    return "\n".join(parts)


def format_welcome(user: User, referral_bonus: float = 0) -> tuple[str, str]:
    subject = "Welcome to hwplug! 🎉"
    html = (
        f"<h2>Welcome, {escape(user.name)}!</h2>\n"
        f"<p>Your referral code: <strong>{escape(user.referral_code)}</strong></p>\n"
        f"<p>Share it to earn {_money(settings.REFERRER_REWARD)} per referral!</p>"
    )
    if referral_bonus > 0:
        html += f"\n<p>🎁 You got {_money(referral_bonus)} credit for using a referral code!</p>"
    return subject, html


def format_order_confirmation(order: Order) -> tuple[str, str]:
    """Письмо клиенту. Никаких данных домашнего аккаунта."""
    subject = "Order Confirmed! 🎉"
    parts = [
        "<h2>Thank you for your order!</h2>",
        f"<p>Order #{order.id}: {_items_summary(order.items)}</p>",
    ]
    if order.credits_used:
        parts.append(f"<p>Credits applied: {_money(order.credits_used)}</p>")
    if order.discount_amount:
        parts.append(f"<p>Discount ({escape(order.discount_code or '')}): -{_money(order.discount_amount)}</p>")
    parts.append(f"<p>Total: {_money(order.total)}</p>")
    parts.append("<p>We'll get started on your homework right away.</p>")
    return subject, "\n".join(parts)


def format_operator_order(order: Order) -> tuple[str, str]:
    subject = f"New hwplug Order #{order.id}"
    parts = [
        "<h2>New Order</h2>",
        f"<p><strong>Customer:</strong> {escape(order.customer_email)}</p>",
        _credentials_block(order),
        f"<p><strong>Items:</strong></p>{_format_items_list(order.items)}",
        f"<p><strong>Subtotal:</strong> {_money(order.subtotal)}</p>",
    ]
    if order.credits_used:
        parts.append(f"<p><strong>Credits used:</strong> {_money(order.credits_used)}</p>")
    if order.discount_code:
        parts.append(
            f"<p><strong>Discount:</strong> {escape(order.discount_code)} (-{_money(order.discount_amount)})</p>"
        )
    parts.append(f"<p><strong>Total:</strong> {_money(order.total)}</p>")
    return subject, "\n".join(parts)


def format_operator_login_details(order: Order) -> tuple[str, str]:
    subject = f"🎓 Homework login details for order #{order.id}"
    received_at = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    html = "\n".join([
        "<h2>Homework Account Details</h2>",
        f"<p><strong>Customer:</strong> {escape(order.customer_email)}</p>",
        _credentials_block(order),
        f"<p><strong>Items:</strong> {_items_summary(order.items)}</p>",
        f"<p><strong>Total paid:</strong> {_money(order.total)}</p>",
        "<p>Please complete the homework for this customer.</p>",
        f"<p>Received: {received_at}</p>",
    ])
    return subject, html


# --- Отправка. Ошибки логируются внутри Mailer и наружу не выходят ---

async def send_welcome(mailer: Mailer, user: User, referral_bonus: float = 0) -> bool:
    subject, html = format_welcome(user, referral_bonus)
    return await mailer.send(user.email, subject, html)


async def send_order_notifications(mailer: Mailer, order: Order) -> None:
    """Подтверждение клиенту и детали заказа оператору."""
    subject, html = format_order_confirmation(order)
    await mailer.send(order.customer_email, subject, html)

    subject, html = format_operator_order(order)
    await mailer.send(settings.OPERATOR_EMAIL, subject, html)


async def send_login_details(mailer: Mailer, order: Order) -> bool:
    subject, html = format_operator_login_details(order)
    return await mailer.send(settings.OPERATOR_EMAIL, subject, html)
