from typing import List

from fastapi import APIRouter, Depends, Query

from app.models.user import User
from app.schemas import ActivityResponse, ApiError, ApiResponse
from app.services import activity_service
from app.utils.api_response import ok
from app.utils.verify_token import get_current_user

router = APIRouter(
    tags=["Activities"],
    responses={401: {"model": ApiError, "description": "Unauthorized"}}
)


@router.get("", response_model=ApiResponse[List[ActivityResponse]])
async def list_activities(current_user: User = Depends(get_current_user)):
    activities = await activity_service.list_by_user(str(current_user.id))
    return ok(data=activities, message="Activities listed successfully")


@router.get("/recent", response_model=ApiResponse[List[ActivityResponse]])
async def list_recent_activities(
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_user)
):
    activities = await activity_service.list_recent(str(current_user.id), limit=limit)
    return ok(data=activities, message="Recent activities listed successfully")


@router.get("/file/{file_id}", response_model=ApiResponse[List[ActivityResponse]])
async def list_file_activities(file_id: str, current_user: User = Depends(get_current_user)):
    activities = await activity_service.list_by_file(str(current_user.id), file_id)
    return ok(data=activities, message="File activities listed successfully")


@router.get("/folder/{folder_id}", response_model=ApiResponse[List[ActivityResponse]])
async def list_folder_activities(folder_id: str, current_user: User = Depends(get_current_user)):
    activities = await activity_service.list_by_folder(str(current_user.id), folder_id)
    return ok(data=activities, message="Folder activities listed successfully")
