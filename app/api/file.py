from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from app.core.exceptions import ForbiddenError
from app.models.user import User
from app.schemas.file import (
    BulkDeleteRequest, BulkDeleteResponse, BulkMoveRequest, BulkMoveResponse, FileResponse,
    FileUpdate, FileUploadMeta, FileUploadResponse, TagsRequest
)
from app.schemas.response import ApiError, ApiResponse
from app.services import BlobStore, FileService, get_blob_store
from app.utils.api_response import created, ok
from app.utils.verify_token import get_current_user

router = APIRouter(
    tags=["Files"],
    responses={
        400: {"model": ApiError, "description": "Bad Request"},
        401: {"model": ApiError, "description": "Unauthorized"},
        404: {"model": ApiError, "description": "Not Found"},
        409: {"model": ApiError, "description": "Conflict"},
        422: {"model": ApiError, "description": "Validation Error"},
        502: {"model": ApiError, "description": "Storage Error"},
    }
)


def get_file_service(blob_store: BlobStore = Depends(get_blob_store)) -> FileService:
    return FileService(blob_store=blob_store)


def _split_tags(tags: Optional[str]) -> List[str]:
    return [tag.strip() for tag in (tags or "").split(",") if tag.strip()]


@router.post(
    "/upload",
    response_model=ApiResponse[FileUploadResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Upload File",
    description="Store the file bytes and register the file in the catalog",
)
async def upload_file(
    file: UploadFile = File(...),
    name: Optional[str] = Form(None, description="Display name, defaults to the uploaded file name"),
    folder_id: Optional[str] = Form(None),
    file_type: Optional[str] = Form(None, description="image, video or document"),
    tags: Optional[str] = Form(None, description="Comma separated tag names"),
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    data = await file.read()
    meta = FileUploadMeta(
        name=name if name is not None else (file.filename or ""),
        folder_id=folder_id or None,
        file_type=file_type or None,
        tags=_split_tags(tags),
    )
    result = await file_service.upload_file(str(current_user.id), meta, data, file.content_type)
    return created(result, message="File uploaded successfully")


@router.get("/search/tag", response_model=ApiResponse[List[FileResponse]])
async def search_files_by_tag(
    tag: str = Query("", description="Tag name substring"),
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    files = await file_service.search_by_tag(str(current_user.id), tag)
    return ok(data=files, message="Files retrieved successfully")


@router.get("/search/name", response_model=ApiResponse[List[FileResponse]])
async def search_files_by_name(
    name: str = Query("", description="File name substring"),
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    files = await file_service.search_by_name(str(current_user.id), name)
    return ok(data=files, message="Files retrieved successfully")


@router.get("/filter/type/{file_type}", response_model=ApiResponse[List[FileResponse]])
async def filter_files_by_type(
    file_type: str,
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    files = await file_service.filter_by_type(str(current_user.id), file_type)
    return ok(data=files, message="Files retrieved successfully")


@router.get("/filter/size", response_model=ApiResponse[List[FileResponse]])
async def filter_files_by_size(
    min_size: Optional[str] = Query(None, description="Lower bound in bytes, inclusive"),
    max_size: Optional[str] = Query(None, description="Upper bound in bytes, inclusive"),
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    files = await file_service.filter_by_size_range(str(current_user.id), min_size, max_size)
    return ok(data=files, message="Files retrieved successfully")


@router.get("/folder/{folder_id}", response_model=ApiResponse[List[FileResponse]])
async def list_files_in_folder(
    folder_id: str,
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    files = await file_service.list_by_folder(str(current_user.id), folder_id)
    return ok(data=files, message="Files listed successfully")


@router.get("/owner/{owner_id}", response_model=ApiResponse[List[FileResponse]])
async def list_files_by_owner(
    owner_id: str,
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    if owner_id != str(current_user.id):
        raise ForbiddenError("Cannot list files of another user")
    files = await file_service.list_by_owner(owner_id)
    return ok(data=files, message="Files listed successfully")


@router.post("/bulk-delete", response_model=ApiResponse[BulkDeleteResponse])
async def bulk_delete_files(
    request: BulkDeleteRequest,
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    result = await file_service.bulk_delete(str(current_user.id), request.file_ids)
    return ok(data=result, message=f"Deleted {result.deleted} files")


@router.put("/bulk-move", response_model=ApiResponse[BulkMoveResponse])
async def bulk_move_files(
    request: BulkMoveRequest,
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    result = await file_service.bulk_move(str(current_user.id), request.file_ids, request.new_folder_id)
    return ok(data=result, message=f"Moved {result.moved} files")


@router.get("/{file_id}", response_model=ApiResponse[FileResponse])
async def get_file(
    file_id: str,
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    file = await file_service.get_file(str(current_user.id), file_id)
    return ok(data=file, message="File retrieved successfully")


@router.get("/{file_id}/download", response_model=ApiResponse[dict])
async def get_download_url(
    file_id: str,
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    url = await file_service.get_download_url(str(current_user.id), file_id)
    return ok(data={"url": url}, message="Download URL generated successfully")


@router.put("/{file_id}", response_model=ApiResponse[FileResponse])
async def update_file(
    file_id: str,
    request: FileUpdate,
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    file = await file_service.update_file(str(current_user.id), file_id, request.name, request.tags)
    return ok(data=file, message="File updated successfully")


@router.delete("/{file_id}", response_model=ApiResponse[FileResponse])
async def delete_file(
    file_id: str,
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    file = await file_service.delete_file(str(current_user.id), file_id)
    return ok(data=file, message="File deleted successfully")


@router.put("/{file_id}/tags", response_model=ApiResponse[FileResponse])
async def add_file_tags(
    file_id: str,
    request: TagsRequest,
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    file = await file_service.add_tags(str(current_user.id), file_id, request.tags)
    return ok(data=file, message="Tags added successfully")


@router.delete("/{file_id}/tags", response_model=ApiResponse[FileResponse])
async def remove_file_tags(
    file_id: str,
    request: TagsRequest,
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    file = await file_service.remove_tags(str(current_user.id), file_id, request.tags)
    return ok(data=file, message="Tags removed successfully")
