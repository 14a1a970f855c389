from typing import List

from fastapi import APIRouter, Depends, Query, status

from app.models.user import User
from app.schemas import ApiError, ApiResponse, TagRequest, TagResponse
from app.services import tag_service
from app.utils.api_response import created, ok
from app.utils.verify_token import get_current_user

router = APIRouter(
    tags=["Tags"],
    responses={
        400: {"model": ApiError, "description": "Bad Request"},
        401: {"model": ApiError, "description": "Unauthorized"},
        404: {"model": ApiError, "description": "Not Found"},
        409: {"model": ApiError, "description": "Conflict"},
    }
)


@router.post("", response_model=ApiResponse[TagResponse], status_code=status.HTTP_201_CREATED)
async def create_tag(request: TagRequest, current_user: User = Depends(get_current_user)):
    tag = await tag_service.create_tag(str(current_user.id), request.name)
    return created(tag, message="Tag created successfully")


@router.get("", response_model=ApiResponse[List[TagResponse]])
async def list_tags(current_user: User = Depends(get_current_user)):
    tags = await tag_service.list_tags(str(current_user.id))
    return ok(data=tags, message="Tags listed successfully")


@router.get("/search", response_model=ApiResponse[List[TagResponse]])
async def search_tags(
    q: str = Query("", description="Tag name substring"),
    current_user: User = Depends(get_current_user)
):
    tags = await tag_service.search_tags(str(current_user.id), q)
    return ok(data=tags, message="Tags retrieved successfully")


@router.get("/{tag_id}", response_model=ApiResponse[TagResponse])
async def get_tag(tag_id: str, current_user: User = Depends(get_current_user)):
    tag = await tag_service.get_tag(str(current_user.id), tag_id)
    return ok(data=tag, message="Tag retrieved successfully")


@router.put("/{tag_id}", response_model=ApiResponse[TagResponse])
async def rename_tag(tag_id: str, request: TagRequest, current_user: User = Depends(get_current_user)):
    tag = await tag_service.rename_tag(str(current_user.id), tag_id, request.name)
    return ok(data=tag, message="Tag updated successfully")


@router.delete("/{tag_id}", response_model=ApiResponse[TagResponse])
async def delete_tag(tag_id: str, current_user: User = Depends(get_current_user)):
    tag = await tag_service.delete_tag(str(current_user.id), tag_id)
    return ok(data=tag, message="Tag deleted successfully")
