# app/routers/admin/discounts.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.crud import discount as crud_discount
from app.dependencies import get_db
from app.schemas.discount import DiscountCreate, DiscountCreateResponse, DiscountDetails, DiscountListResponse
from app.services import discount as discount_service

router = APIRouter()


@router.get("/discounts", response_model=DiscountListResponse)
def get_discounts_list(db: Session = Depends(get_db)):
    """
    [АДМИН] Список всех промокодов.
    """
    discounts = crud_discount.get_discounts(db)
    return DiscountListResponse(discounts=[DiscountDetails.model_validate(d) for d in discounts])


@router.post("/discount/create", response_model=DiscountCreateResponse)
def create_new_discount(
    discount_data: DiscountCreate,
    db: Session = Depends(get_db)
):
    """
    [АДМИН] Создает новый промокод.
    """
    discount = discount_service.create_discount(db, discount_data)
    return DiscountCreateResponse(discount=DiscountDetails.model_validate(discount))
