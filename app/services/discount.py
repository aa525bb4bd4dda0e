# app/services/discount.py

import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.crud import discount as crud_discount
from app.models.discount import Discount
from app.models.user import User
from app.schemas.discount import DiscountCreate, DiscountQuote, DiscountValidateRequest
from app.services import pricing

logger = logging.getLogger(__name__)


def validate_discount(db: Session, request_data: DiscountValidateRequest, user: Optional[User] = None) -> DiscountQuote:
    """
    Проверяет промокод для суммы корзины, ничего не меняя в БД.
    Расчет идет через тот же `pricing.price_total`, что и оформление заказа,
    поэтому для авторизованного пользователя учитываются его кредиты и
    результат совпадает с тем, что будет списано на checkout.
    """
    discount = crud_discount.get_active_discount_by_code(db, request_data.code)
    if not discount:
        logger.info(f"Discount validation failed: code '{request_data.code}' not found.")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=pricing.DISCOUNT_NOT_FOUND)

    price = pricing.price_total(
        request_data.total,
        credits=user.credits if user else 0,
        discount=discount,
        discount_code=discount.code,
    )
    if price.discount_rejection:
        logger.info(f"Discount '{discount.code}' rejected for total {request_data.total}: {price.discount_rejection}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=price.discount_rejection)

    return DiscountQuote(code=discount.code, type=discount.type, value=discount.value, amount=price.discount_amount)


def create_discount(db: Session, discount_data: DiscountCreate) -> Discount:
    """Создает новый промокод; код уникален без учета регистра."""
    if crud_discount.get_discount_by_code(db, discount_data.code):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Discount code already exists")
    try:
        discount = crud_discount.create_discount(db, **discount_data.model_dump())
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Discount code already exists")
    logger.info(f"Discount '{discount.code}' created ({discount.type} {discount.value}).")
    return discount
