from typing import List, Literal, Optional, Annotated
from beanie import Document, Indexed, PydanticObjectId
from pydantic import Field
from pymongo import ASCENDING, IndexModel
from app.models.time_mixin import TimeMixin

FileType = Literal["image", "video", "document"]
FILE_TYPES = ("image", "video", "document")


class File(Document, TimeMixin):
    """Catalog entry for an uploaded object"""

    owner_id: Annotated[str, Indexed(str)] = Field(..., description="User who owns the file")
    folder_id: Optional[PydanticObjectId] = Field(default=None, description="Containing folder, None when unfiled")
    name: Annotated[str, Indexed(str)] = Field(..., description="File name including extension")
    file_type: FileType = Field(..., description="Catalog type: image, video or document")
    file_size: Annotated[int, Indexed(int)] = Field(..., ge=0, description="File size (bytes)")
    content_type: Optional[str] = Field(None, description="MIME type reported at upload")
    object_name: str = Field(..., description="Object handle in the blob store")
    url: str = Field(..., description="Public reference to the stored object")
    tag_ids: List[PydanticObjectId] = Field(default_factory=list, description="Attached tag ids")

    class Settings:
        name = "files"
        indexes = [
            IndexModel([("owner_id", ASCENDING), ("folder_id", ASCENDING), ("name", ASCENDING)], unique=True),
            IndexModel([("tag_ids", ASCENDING)]),
        ]
