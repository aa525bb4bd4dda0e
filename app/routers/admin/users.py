# app/routers/admin/users.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.crud import user as crud_user
from app.dependencies import get_db
from app.schemas.admin import AdminUserListResponse
from app.schemas.user import UserOut

router = APIRouter()


@router.get("/users", response_model=AdminUserListResponse)
def get_users_list(db: Session = Depends(get_db)):
    """
    [АДМИН] Все пользователи, новые первыми. Хеши паролей не отдаются.
    """
    users = crud_user.get_users(db)
    return AdminUserListResponse(users=[UserOut.model_validate(user) for user in users])
