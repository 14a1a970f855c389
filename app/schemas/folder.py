from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class FolderCreate(BaseModel):
    """Internal schema for creating folder with all required fields"""
    owner_id: str
    name: str
    parent_id: Optional[str] = None
    path: List[str] = Field(default_factory=list)


class FolderUpdate(BaseModel):
    """Schema for updating folder"""
    name: Optional[str] = None


class FolderCreateRequest(BaseModel):
    name: str = Field(..., description="Folder name")
    parent_id: Optional[str] = Field(None, description="Parent folder id, omit for a root-level folder")


class FolderRenameRequest(BaseModel):
    name: str = Field(..., description="New folder name")


class FolderMoveRequest(BaseModel):
    new_parent_id: Optional[str] = Field(None, description="Destination folder id, null moves to root level")


class FolderSummary(BaseModel):
    id: str
    name: str


class OwnerSummary(BaseModel):
    id: str
    username: Optional[str] = None


class FolderResponse(BaseModel):
    """Schema for returning folder information"""
    id: str
    owner_id: str
    name: str
    parent_id: Optional[str] = None
    path: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None


class FolderDetailResponse(BaseModel):
    """Folder with owner, parent and ancestors resolved for display"""
    id: str
    name: str
    owner: OwnerSummary
    parent: Optional[FolderSummary] = None
    path: List[FolderSummary] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None


class FolderPathResponse(BaseModel):
    id: str
    name: str
    path: List[FolderSummary] = Field(default_factory=list, description="Ancestors, root first")


class FolderTreeNode(BaseModel):
    id: str
    name: str
    children: List[FolderTreeNode] = Field(default_factory=list)


class FolderDeleteResponse(BaseModel):
    id: str
    deleted_folders: int
    orphaned_files: int
    renamed_files: int = 0
