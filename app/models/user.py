from typing import Annotated, Optional
from beanie import Document, Indexed
from pydantic import Field

from app.models.time_mixin import TimeMixin


class User(TimeMixin, Document):
    subject: Annotated[str, Indexed(unique=True)] = Field(..., description="Subject id from the identity provider")
    username: Annotated[str, Indexed(str)] = Field(..., description="Display username")
    email: Optional[str] = Field(None, description="Primary email address")
    full_name: Optional[str] = Field(None, description="Full name")
    storage_used: int = Field(default=0, description="Bytes currently stored by the user")

    class Settings:
        name = "users"
