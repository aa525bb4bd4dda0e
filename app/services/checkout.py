# app/services/checkout.py

import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.clients.payments import CheckoutSession, PaymentClient
from app.core.config import settings
from app.core.security import encrypt_secret
from app.crud import discount as crud_discount
from app.crud import order as crud_order
from app.models.order import Order
from app.models.user import User
from app.schemas.order import CheckoutRequest, LoginDetailsRequest
from app.services import pricing

logger = logging.getLogger(__name__)


def _resolve_user(current_user: Optional[User], requested_user_id: Optional[int]) -> Optional[User]:
    """
    Пользователь берется из токена. userId в теле допускается только
    как подтверждение: он должен совпадать с владельцем токена.
    """
    if requested_user_id is None:
        return current_user
    if current_user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token required to use account credits")
    if current_user.id != requested_user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="userId does not match the authenticated user")
    return current_user


def build_line_items(order_data: CheckoutRequest, total: float) -> list[dict]:
    """
    Одна позиция на всю сумму: разбивка по товарам сворачивается в название,
    так как кредиты и скидка применяются к заказу целиком.
    """
    label = "hwplug Order - " + ", ".join(item.name for item in order_data.items)
    return [{
        "price_data": {
            "currency": settings.CURRENCY,
            "product_data": {"name": label[:250]},
            "unit_amount": int(round(total * 100)),
        },
        "quantity": 1,
    }]


def build_metadata(order_data: CheckoutRequest, user: Optional[User], price: pricing.PriceQuote) -> dict:
    # Пароль от домашнего аккаунта в Stripe не передаем
    items = ", ".join(f"{item.name} x{item.qty}" for item in order_data.items)
    return {
        "userId": str(user.id) if user else "",
        "creditsUsed": f"{price.credits_used:.2f}",
        "discountCode": price.discount_code if price.discount_applied else "",
        "items": items[:500],
    }


async def create_checkout_session(
    db: Session,
    payments: PaymentClient,
    current_user: Optional[User],
    order_data: CheckoutRequest,
    origin: Optional[str] = None,
) -> tuple[Order, CheckoutSession]:
    """
    Оформляет заказ по схеме "Сага":
    1. считает цену и резервирует кредиты и промокод (атомарно);
    2. создает сессию оплаты в Stripe, при ошибке резерв возвращается;
    3. сохраняет заказ со ссылкой на сессию.
    """
    user = _resolve_user(current_user, order_data.user_id)

    # --- Шаг 1: Расчет ---
    discount = None
    if order_data.discount_code:
        discount = crud_discount.get_active_discount_by_code(db, order_data.discount_code)

    price = pricing.quote(
        order_data.items,
        credits=user.credits if user else 0,
        discount=discount,
        discount_code=order_data.discount_code,
    )
    if price.discount_rejection:
        logger.info(f"Checkout rejected discount '{price.discount_code}': {price.discount_rejection}")
        error_status = status.HTTP_404_NOT_FOUND if discount is None else status.HTTP_400_BAD_REQUEST
        raise HTTPException(status_code=error_status, detail=price.discount_rejection)

    # --- Шаг 2: Резервирование ---
    reservation = pricing.reserve(db, price, user.id if user else None, discount)

    # --- Шаг 3: Сессия оплаты, при ошибке - компенсация ---
    base_url = (origin or settings.FRONTEND_URL).rstrip("/")
    try:
        session = await payments.create_checkout_session(
            line_items=build_line_items(order_data, price.final_total),
            customer_email=order_data.customer_email,
            success_url=f"{base_url}/success.html?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{base_url}/cancel.html",
            metadata=build_metadata(order_data, user, price),
        )
    except Exception as e:
        logger.error(f"Checkout session creation failed for {order_data.customer_email}. Releasing reservation.", exc_info=True)
        try:
            pricing.release(db, reservation)
        except Exception:
            # Клиенту отдаем ошибку платежной системы, сбой компенсации только в лог
            logger.critical(f"Reservation {reservation} was not released after payment failure.", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    # --- Шаг 4: Сохранение заказа ---
    order = crud_order.create_order(
        db,
        user_id=user.id if user else None,
        customer_email=order_data.customer_email,
        items=[item.model_dump() for item in order_data.items],
        subtotal=price.raw_total,
        credits_used=price.credits_used,
        total=price.final_total,
        homework_email=order_data.homework_email,
        homework_password_encrypted=encrypt_secret(order_data.homework_password),
        stripe_session_id=session.id,
        status="pending",
        discount_code=price.discount_code if price.discount_applied else None,
        discount_amount=price.discount_amount,
    )
    logger.info(f"Order {order.id} created: session={session.id}, total={order.total}")
    return order, session


def attach_login_details(db: Session, details: LoginDetailsRequest) -> Order:
    """Сохраняет (в зашифрованном виде) данные домашнего аккаунта к заказу по ID сессии оплаты."""
    order = crud_order.get_order_by_session_id(db, details.session_id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")

    order.homework_email = details.homework_email
    order.homework_password_encrypted = encrypt_secret(details.homework_password)
    db.commit()
    db.refresh(order)
    logger.info(f"Homework login details attached to order {order.id}")
    return order
