# app/routers/checkout.py
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from app.clients.mailer import Mailer, get_mailer
from app.clients.payments import PaymentClient, get_payment_client
from app.dependencies import get_db, get_optional_current_user
from app.models.user import User
from app.schemas.order import CheckoutRequest, CheckoutResponse, LoginDetailsRequest, SuccessResponse
from app.services import checkout as checkout_service
from app.services import notification as notification_service

router = APIRouter()


@router.post("/create-checkout-session", response_model=CheckoutResponse)
async def create_checkout_session(
    request: Request,
    order_data: CheckoutRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_current_user),
    payments: PaymentClient = Depends(get_payment_client),
    mailer: Mailer = Depends(get_mailer)
):
    """
    Создает заказ и сессию оплаты Stripe. Клиент перенаправляет
    пользователя на страницу оплаты по возвращенному ID сессии.
    """
    order, session = await checkout_service.create_checkout_session(
        db, payments, current_user, order_data, origin=request.headers.get("origin")
    )
    # Письма уходят после ответа и не влияют на него
    background_tasks.add_task(notification_service.send_order_notifications, mailer, order)
    return CheckoutResponse(id=session.id, url=session.url)


@router.post("/submit-login-details", response_model=SuccessResponse)
async def submit_login_details(
    details: LoginDetailsRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer)
):
    """Прикрепляет данные домашнего аккаунта к оплаченному заказу и уведомляет оператора."""
    order = checkout_service.attach_login_details(db, details)
    background_tasks.add_task(notification_service.send_login_details, mailer, order)
    return SuccessResponse()
