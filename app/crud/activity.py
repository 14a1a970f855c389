from beanie import PydanticObjectId
from app.crud.base import BaseCRUD
from app.models.activity import Activity
from app.schemas.activity import ActivityCreate
from pydantic import BaseModel
from typing import List


class ActivityCRUD(BaseCRUD[Activity, ActivityCreate, BaseModel]):
    def __init__(self):
        super().__init__(Activity)

    async def list_by_user(self, user_id: str, limit: int = 0) -> List[Activity]:
        return await self.list({"user_id": user_id}, limit=limit)

    async def list_by_file(self, user_id: str, file_id: PydanticObjectId) -> List[Activity]:
        return await self.list({"user_id": user_id, "file_id": file_id})

    async def list_by_folder(self, user_id: str, folder_id: PydanticObjectId) -> List[Activity]:
        return await self.list({"user_id": user_id, "folder_id": folder_id})


activity_crud = ActivityCRUD()
