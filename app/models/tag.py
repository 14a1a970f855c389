from typing import Annotated
from beanie import Document, Indexed
from pydantic import Field
from pymongo import ASCENDING, IndexModel
from app.models.time_mixin import TimeMixin


class Tag(Document, TimeMixin):
    name: Annotated[str, Indexed(str)] = Field(..., description="Tag label")
    used_by: Annotated[str, Indexed(str)] = Field(..., description="User who owns the tag")

    class Settings:
        name = "tags"
        indexes = [
            IndexModel([("used_by", ASCENDING), ("name", ASCENDING)], unique=True),
        ]
