# spendwise/api/v1/routes/auth.py
import logging
from fastapi import APIRouter, Depends, Request, status
from fastapi_users import InvalidPasswordException
from fastapi_users.exceptions import UserAlreadyExists

from spendwise.core.auth import UserCreate, UserManager, get_user_manager
from spendwise.core.exceptions import ValidationError
from spendwise.schemas.user import SignupResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])

@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    user_in: UserCreate,
    request: Request,
    user_manager: UserManager = Depends(get_user_manager),
):
    """
    Create an account. The new user's default categories are seeded by
    ``UserManager.on_after_register``.
    """
    try:
        user = await user_manager.create(user_in, safe=True, request=request)
    except UserAlreadyExists:
        raise ValidationError("User with this email already exists")
    except InvalidPasswordException as e:
        raise ValidationError(str(e.reason))

    return {"message": "User created successfully", "user": user}
