# app/services/pricing.py

"""
Расчет итоговой суммы заказа: кредиты пользователя, промокод и минимальный платеж.

Расчет (`quote`) - чистая функция без обращений к БД. Применение результата
(`reserve`) списывает кредиты и увеличивает счетчик использований промокода
условными UPDATE в одной транзакции; `release` - компенсирующее действие на
случай, если платежную сессию создать не удалось.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.crud import discount as crud_discount
from app.crud import user as crud_user
from app.models.discount import Discount

logger = logging.getLogger(__name__)

POST_CREDIT = "post_credit"
PRE_CREDIT = "pre_credit"

DISCOUNT_NOT_FOUND = "Invalid discount code"
DISCOUNT_EXPIRED = "Discount code expired"
DISCOUNT_LIMIT_REACHED = "Discount code limit reached"


def _money(value: float) -> float:
    return round(value, 2)


@dataclass(frozen=True)
class PriceQuote:
    raw_total: float
    credits_used: float
    discount_amount: float
    final_total: float
    discount_code: Optional[str] = None
    # Причина, по которой промокод не применился (None - применился или не передавался)
    discount_rejection: Optional[str] = None

    @property
    def discount_applied(self) -> bool:
        # Купон с нулевой скидкой (всё покрыто кредитами) не расходует использование
        return self.discount_code is not None and self.discount_rejection is None and self.discount_amount > 0


@dataclass(frozen=True)
class Reservation:
    """Что именно было списано в БД; нужно для компенсации."""
    user_id: Optional[int]
    credits_used: float
    discount_id: Optional[int]


def cart_total(items: Iterable) -> float:
    """Сумма позиций корзины: Σ price × qty."""
    return _money(sum(item.price * item.qty for item in items))


def check_discount(discount: Optional[Discount], base: float, now: datetime) -> Optional[str]:
    """
    Проверяет, можно ли применить промокод к сумме `base`.
    Возвращает текст причины отказа или None, если купон подходит.
    """
    if discount is None or not discount.active:
        return DISCOUNT_NOT_FOUND
    expires_at = discount.expires_at
    if expires_at is not None:
        # SQLite возвращает naive datetime; считаем такие значения UTC
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if now > expires_at:
            return DISCOUNT_EXPIRED
    if discount.max_uses is not None and discount.used_count >= discount.max_uses:
        return DISCOUNT_LIMIT_REACHED
    if base < discount.min_purchase:
        return f"Minimum purchase of £{discount.min_purchase:.2f} required"
    return None


def discount_amount_for(discount: Discount, base: float, remaining: float) -> float:
    """
    Размер скидки: процент от `base` или фиксированная сумма,
    но не больше того, что осталось оплатить (`remaining`).
    """
    if discount.type == "percentage":
        amount = base * discount.value / 100
    else:
        amount = discount.value
    return _money(max(0.0, min(amount, remaining)))


def price_total(
    raw_total: float,
    credits: float = 0,
    discount: Optional[Discount] = None,
    discount_code: Optional[str] = None,
    now: Optional[datetime] = None,
    discount_base: Optional[str] = None,
    floor: Optional[float] = None,
) -> PriceQuote:
    """
    Считает итог для суммы `raw_total`, ничего не меняя в БД.

    `discount_code` - код, который прислал клиент; `discount` - найденная по нему
    запись (или None). Если код передан, но купон не подходит, скидка равна 0,
    а причина возвращается в `discount_rejection`.
    """
    now = now or datetime.now(timezone.utc)
    discount_base = discount_base or settings.DISCOUNT_BASE
    floor = settings.MIN_CHARGE_AMOUNT if floor is None else floor

    credits_used = 0.0
    if credits and credits > 0:
        credits_used = min(credits, raw_total)
    running_total = _money(raw_total - credits_used)

    amount = 0.0
    rejection = None
    code = discount_code.strip().upper() if discount_code else None
    if code:
        base = running_total if discount_base == POST_CREDIT else raw_total
        rejection = check_discount(discount, base, now)
        if rejection is None:
            amount = discount_amount_for(discount, base, running_total)

    final_total = _money(max(floor, running_total - amount))

    return PriceQuote(
        raw_total=raw_total,
        credits_used=credits_used,
        discount_amount=amount,
        final_total=final_total,
        discount_code=code,
        discount_rejection=rejection,
    )


def quote(items: Iterable, **kwargs) -> PriceQuote:
    """Итог заказа для позиций корзины; параметры как у `price_total`."""
    return price_total(cart_total(items), **kwargs)


def reserve(db: Session, price: PriceQuote, user_id: Optional[int], discount: Optional[Discount]) -> Reservation:
    """
    Списывает кредиты и занимает одно использование промокода в одной транзакции.
    Оба изменения - условные UPDATE, поэтому параллельные оформления не могут
    уйти в минус по кредитам или превысить max_uses. При неудаче откатывается всё.
    """
    credits_to_take = price.credits_used if user_id is not None else 0.0
    discount_id = discount.id if (discount is not None and price.discount_applied) else None

    try:
        if credits_to_take > 0 and not crud_user.consume_credits(db, user_id, credits_to_take):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Your credit balance has changed. Please review your order and try again."
            )
        if discount_id is not None and not crud_discount.increment_usage(db, discount_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DISCOUNT_LIMIT_REACHED)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Reserved pricing for user {user_id}: credits={credits_to_take}, "
        f"discount_id={discount_id}, total={price.final_total}"
    )
    return Reservation(user_id=user_id, credits_used=credits_to_take, discount_id=discount_id)


def release(db: Session, reservation: Reservation) -> None:
    """Компенсация: возвращает кредиты и использование промокода."""
    try:
        if reservation.user_id is not None and reservation.credits_used > 0:
            crud_user.add_credits(db, reservation.user_id, reservation.credits_used)
        if reservation.discount_id is not None:
            crud_discount.decrement_usage(db, reservation.discount_id)
        db.commit()
    except Exception:
        db.rollback()
        logger.critical(f"Failed to release pricing reservation {reservation}", exc_info=True)
        raise
    logger.info(f"Released pricing reservation {reservation}")
