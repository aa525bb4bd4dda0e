# app/clients/payments.py

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List

import stripe

from app.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class CheckoutSession:
    id: str
    url: str | None


class PaymentClient:
    """
    Клиент для создания hosted Checkout Session в Stripe.
    SDK синхронный, поэтому вызовы уходят в отдельный поток.
    """
    def __init__(self, api_key: str):
        self.api_key = api_key
        # Повторы отключены: повторная попытка могла бы создать вторую сессию
        stripe.max_network_retries = 0

    def _create_session(self, params: Dict[str, Any]) -> stripe.checkout.Session:
        return stripe.checkout.Session.create(api_key=self.api_key, **params)

    async def create_checkout_session(
        self,
        line_items: List[Dict[str, Any]],
        customer_email: str,
        success_url: str,
        cancel_url: str,
        metadata: Dict[str, str],
    ) -> CheckoutSession:
        """
        Создает сессию оплаты. В случае ошибки Stripe логирует и пробрасывает
        исключение дальше, решение о компенсации принимает вызывающий код.
        """
        params = {
            "payment_method_types": ["card"],
            "line_items": line_items,
            "mode": "payment",
            "success_url": success_url,
            "cancel_url": cancel_url,
            "customer_email": customer_email,
            "metadata": metadata,
        }
        try:
            session = await asyncio.to_thread(self._create_session, params)
        except stripe.StripeError as e:
            logger.error(f"Stripe error while creating checkout session: {e.user_message or e}", exc_info=True)
            raise
        logger.info(f"Stripe checkout session {session.id} created for {customer_email}.")
        return CheckoutSession(id=session.id, url=session.url)


# Создаем синглтон
payment_client = PaymentClient(api_key=settings.STRIPE_SECRET_KEY)


def get_payment_client() -> PaymentClient:
    """Зависимость FastAPI для клиента платежей."""
    return payment_client
