from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime

from app.models.file import FileType


class FileCreate(BaseModel):
    """Schema for creating a new file (internal use with all fields)"""
    owner_id: str = Field(..., description="User who owns the file")
    folder_id: Optional[str] = Field(None, description="Containing folder")
    name: str = Field(..., description="File name")
    file_type: FileType = Field(..., description="Catalog file type")
    file_size: int = Field(..., ge=0, description="File size (bytes)")
    content_type: Optional[str] = Field(None, description="MIME type")
    object_name: str = Field(..., description="Object handle in the blob store")
    url: str = Field(..., description="Public reference to the object")
    tag_ids: List[str] = Field(default_factory=list, description="Attached tag ids")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "owner_id": "507f1f77bcf86cd799439011",
                "folder_id": "507f1f77bcf86cd799439012",
                "name": "report.pdf",
                "file_type": "document",
                "file_size": 1024000,
                "content_type": "application/pdf",
                "object_name": "507f1f77bcf86cd799439011/3f9a1c2b7d.pdf",
                "url": "https://files.example.com/cloudvault-files/507f1f77bcf86cd799439011/3f9a1c2b7d.pdf",
                "tag_ids": []
            }
        }
    )


class FileUpdate(BaseModel):
    """Schema for updating an existing file"""
    name: Optional[str] = Field(None, min_length=1, max_length=255, description="New file name")
    tags: Optional[List[str]] = Field(None, description="Replacement tag names")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "report-final.pdf",
                "tags": ["work", "q3"]
            }
        }
    )


class FileUploadMeta(BaseModel):
    """Client supplied metadata accompanying an upload"""
    name: str = Field(..., description="File name")
    folder_id: Optional[str] = Field(None, description="Target folder, omit to leave unfiled")
    file_type: Optional[str] = Field(None, description="Catalog type, derived from the content when omitted")
    tags: List[str] = Field(default_factory=list, description="Tag names")


class FileUploadResponse(BaseModel):
    """Projection returned after upload, storage handle and url withheld"""
    id: str
    name: str
    file_type: FileType
    file_size: int
    owner_id: str
    folder_id: Optional[str] = None


class FileResponse(BaseModel):
    """Schema for returning file information"""
    id: str = Field(..., description="Unique file identifier")
    owner_id: str = Field(..., description="User who owns the file")
    folder_id: Optional[str] = Field(None, description="Containing folder")
    name: str = Field(..., description="File name")
    file_type: FileType = Field(..., description="Catalog file type")
    file_size: int = Field(..., description="File size in bytes")
    content_type: Optional[str] = Field(None, description="MIME type")
    url: str = Field(..., description="Public reference to the object")
    tags: List[str] = Field(default_factory=list, description="Attached tag names")
    created_at: datetime = Field(..., description="File creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")


class TagsRequest(BaseModel):
    tags: List[str] = Field(..., description="Tag names")


class BulkDeleteRequest(BaseModel):
    file_ids: List[str] = Field(..., description="Files to delete")


class BulkDeleteResponse(BaseModel):
    requested: int
    deleted: int


class BulkMoveRequest(BaseModel):
    file_ids: List[str] = Field(..., description="Files to move")
    new_folder_id: Optional[str] = Field(None, description="Destination folder")


class BulkMoveResponse(BaseModel):
    requested: int
    moved: int
    folder_id: str
