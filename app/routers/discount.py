# app/routers/discount.py

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.dependencies import get_db, get_optional_current_user
from app.models.user import User
from app.schemas.discount import DiscountValidateRequest, DiscountValidateResponse
from app.services import discount as discount_service

router = APIRouter()


@router.post("/discount/validate", response_model=DiscountValidateResponse)
def validate_discount_endpoint(
    request_data: DiscountValidateRequest,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_current_user)
):
    """
    Валидирует промокод для переданной суммы корзины.
    Возвращает параметры купона и точную сумму скидки, если он применим.
    """
    quote = discount_service.validate_discount(db, request_data, current_user)
    return DiscountValidateResponse(discount=quote)
