from typing import Literal, Optional, Annotated
from beanie import Document, Indexed, PydanticObjectId
from pydantic import Field, model_validator
from app.models.time_mixin import TimeMixin

ActivityAction = Literal["upload", "download", "delete", "move", "rename"]


class Activity(Document, TimeMixin):
    """Append-only audit record, targets exactly one file or folder"""

    user_id: Annotated[str, Indexed(str)] = Field(..., description="User who performed the action")
    action: ActivityAction = Field(..., description="Action performed")
    file_id: Optional[PydanticObjectId] = Field(None, description="Target file")
    folder_id: Optional[PydanticObjectId] = Field(None, description="Target folder")

    @model_validator(mode="after")
    def _single_target(self):
        if (self.file_id is None) == (self.folder_id is None):
            raise ValueError("Exactly one of file_id or folder_id is required")
        return self

    class Settings:
        name = "activities"
