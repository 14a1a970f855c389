from app.schemas.response import ApiResponse, ApiError, ErrorDetail, HealthCheck
from app.schemas.user import UserCreate, UserResponse, UserUpdate
from app.schemas.folder import (
    FolderCreate, FolderUpdate, FolderCreateRequest, FolderRenameRequest, FolderMoveRequest,
    FolderSummary, OwnerSummary, FolderResponse, FolderDetailResponse, FolderPathResponse,
    FolderTreeNode, FolderDeleteResponse
)
from app.schemas.file import (
    FileCreate, FileUpdate, FileUploadMeta, FileUploadResponse, FileResponse, TagsRequest,
    BulkDeleteRequest, BulkDeleteResponse, BulkMoveRequest, BulkMoveResponse
)
from app.schemas.tag import TagCreate, TagUpdate, TagRequest, TagResponse
from app.schemas.activity import ActivityCreate, ActivityResponse

__all__ = [
    "HealthCheck",
    "ApiResponse",
    "ApiError",
    "ErrorDetail",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
    # Folder schemas
    "FolderCreate",
    "FolderUpdate",
    "FolderCreateRequest",
    "FolderRenameRequest",
    "FolderMoveRequest",
    "FolderSummary",
    "OwnerSummary",
    "FolderResponse",
    "FolderDetailResponse",
    "FolderPathResponse",
    "FolderTreeNode",
    "FolderDeleteResponse",
    # File schemas
    "FileCreate",
    "FileUpdate",
    "FileUploadMeta",
    "FileUploadResponse",
    "FileResponse",
    "TagsRequest",
    "BulkDeleteRequest",
    "BulkDeleteResponse",
    "BulkMoveRequest",
    "BulkMoveResponse",
    # Tag schemas
    "TagCreate",
    "TagUpdate",
    "TagRequest",
    "TagResponse",
    # Activity schemas
    "ActivityCreate",
    "ActivityResponse",
]
