from typing import List, Optional, Annotated
from beanie import Document, Indexed, PydanticObjectId
from pydantic import Field
from pymongo import ASCENDING, IndexModel
from app.models.time_mixin import TimeMixin

class Folder(Document, TimeMixin):
    """Folder node in the owner's folder forest"""

    owner_id: Annotated[str, Indexed(str)] = Field(..., description="User who owns the folder")
    name: Annotated[str, Indexed(str)] = Field(..., description="Folder name, unique among siblings")
    parent_id: Optional[PydanticObjectId] = Field(default=None, description="Parent folder id, None for root level")
    path: List[PydanticObjectId] = Field(default_factory=list, description="Ancestor ids, root first, immediate parent last")

    class Settings:
        name = "folders"
        indexes = [
            IndexModel([("owner_id", ASCENDING), ("parent_id", ASCENDING), ("name", ASCENDING)], unique=True),
            IndexModel([("path", ASCENDING)]),
        ]
