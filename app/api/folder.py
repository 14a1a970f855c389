from typing import List

from fastapi import APIRouter, Depends, status

from app.core.exceptions import ForbiddenError
from app.models.user import User
from app.schemas import (
    ApiError, ApiResponse, FolderCreateRequest, FolderDeleteResponse, FolderDetailResponse,
    FolderMoveRequest, FolderPathResponse, FolderRenameRequest, FolderResponse, FolderTreeNode
)
from app.services import folder_service
from app.utils.api_response import created, ok
from app.utils.verify_token import get_current_user

router = APIRouter(
    tags=["Folders"],
    responses={
        400: {"model": ApiError, "description": "Bad Request"},
        401: {"model": ApiError, "description": "Unauthorized"},
        404: {"model": ApiError, "description": "Not Found"},
        409: {"model": ApiError, "description": "Conflict"},
        422: {"model": ApiError, "description": "Validation Error"},
    }
)


@router.post("", response_model=ApiResponse[FolderResponse], status_code=status.HTTP_201_CREATED)
async def create_folder(request: FolderCreateRequest, current_user: User = Depends(get_current_user)):
    folder = await folder_service.create_folder(str(current_user.id), request.name, request.parent_id)
    return created(folder, message="Folder created successfully")


@router.get("/tree", response_model=ApiResponse[List[FolderTreeNode]])
async def get_folder_forest(current_user: User = Depends(get_current_user)):
    """Every root-level folder of the caller with its subtree"""
    forest = await folder_service.build_forest(str(current_user.id))
    return ok(data=forest, message="Folder tree retrieved successfully")


@router.get("/user/{owner_id}", response_model=ApiResponse[List[FolderResponse]])
async def list_root_folders(owner_id: str, current_user: User = Depends(get_current_user)):
    if owner_id != str(current_user.id):
        raise ForbiddenError("Cannot list folders of another user")
    folders = await folder_service.list_root_folders(owner_id)
    return ok(data=folders, message="Folders listed successfully")


@router.get("/{folder_id}", response_model=ApiResponse[FolderDetailResponse])
async def get_folder(folder_id: str, current_user: User = Depends(get_current_user)):
    folder = await folder_service.get_folder(str(current_user.id), folder_id)
    return ok(data=folder, message="Folder retrieved successfully")


@router.get("/{folder_id}/path", response_model=ApiResponse[FolderPathResponse])
async def get_folder_path(folder_id: str, current_user: User = Depends(get_current_user)):
    path = await folder_service.get_folder_path(str(current_user.id), folder_id)
    return ok(data=path, message="Folder path retrieved successfully")


@router.get("/{folder_id}/children", response_model=ApiResponse[List[FolderResponse]])
async def list_children(folder_id: str, current_user: User = Depends(get_current_user)):
    children = await folder_service.list_children(str(current_user.id), folder_id)
    return ok(data=children, message="Subfolders listed successfully")


@router.get("/{folder_id}/tree", response_model=ApiResponse[FolderTreeNode])
async def get_folder_tree(folder_id: str, current_user: User = Depends(get_current_user)):
    tree = await folder_service.build_tree(str(current_user.id), folder_id)
    return ok(data=tree, message="Folder tree retrieved successfully")


@router.put("/{folder_id}/rename", response_model=ApiResponse[FolderResponse])
async def rename_folder(
    folder_id: str,
    request: FolderRenameRequest,
    current_user: User = Depends(get_current_user)
):
    folder = await folder_service.rename_folder(str(current_user.id), folder_id, request.name)
    return ok(data=folder, message="Folder renamed successfully")


@router.put("/{folder_id}/move", response_model=ApiResponse[FolderResponse])
async def move_folder(
    folder_id: str,
    request: FolderMoveRequest,
    current_user: User = Depends(get_current_user)
):
    folder = await folder_service.move_folder(str(current_user.id), folder_id, request.new_parent_id)
    return ok(data=folder, message="Folder moved successfully")


@router.delete("/{folder_id}", response_model=ApiResponse[FolderDeleteResponse])
async def delete_folder(folder_id: str, current_user: User = Depends(get_current_user)):
    result = await folder_service.delete_folder(str(current_user.id), folder_id)
    return ok(data=result, message="Folder deleted successfully")
