from fastapi import APIRouter, Depends

from app.models.user import User
from app.schemas import ApiError, ApiResponse, UserResponse
from app.services import user_service
from app.utils.api_response import ok
from app.utils.verify_token import get_current_user

router = APIRouter(
    tags=["Users"],
    responses={401: {"model": ApiError, "description": "Unauthorized"}}
)


@router.get("/me", response_model=ApiResponse[UserResponse])
async def get_me(current_user: User = Depends(get_current_user)):
    return ok(data=user_service.to_response(current_user), message="User retrieved successfully")
