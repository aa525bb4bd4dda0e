# app/schemas/discount.py

from datetime import datetime
from pydantic import Field, field_validator
from typing import List, Literal, Optional

from app.schemas.base import CamelModel

DiscountType = Literal["percentage", "fixed"]


class DiscountValidateRequest(CamelModel):
    """Тело запроса на проверку промокода."""
    code: str = Field(..., min_length=1)
    total: float = Field(..., ge=0)


class DiscountQuote(CamelModel):
    """Результат проверки: параметры купона и посчитанная скидка."""
    code: str
    type: DiscountType
    value: float
    amount: float


class DiscountValidateResponse(CamelModel):
    success: bool = True
    discount: DiscountQuote


class DiscountDetails(CamelModel):
    """Полная информация о промокоде для админки."""
    id: int
    code: str
    type: DiscountType
    value: float
    min_purchase: float
    max_uses: Optional[int] = None
    used_count: int
    active: bool
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class DiscountCreate(CamelModel):
    """Схема для создания нового промокода."""
    code: str = Field(..., min_length=1, description="Код купона, например, 'SAVE10'")
    type: DiscountType = Field(..., description="'percentage' (процент) или 'fixed' (фикс. сумма)")
    value: float = Field(..., gt=0)
    min_purchase: float = Field(0, ge=0)
    max_uses: Optional[int] = Field(None, gt=0, description="Сколько всего раз можно использовать купон")
    expires_at: Optional[datetime] = None

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("value")
    @classmethod
    def check_percentage(cls, v: float, info):
        if info.data.get("type") == "percentage" and v > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return v


class DiscountCreateResponse(CamelModel):
    success: bool = True
    discount: DiscountDetails


class DiscountListResponse(CamelModel):
    success: bool = True
    discounts: List[DiscountDetails]
