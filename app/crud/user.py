from typing import Optional

from app.crud.base import BaseCRUD
from app.models.user import User
from app.schemas.user import UserCreate, UserUpdate
from app.utils.base import parse_object_id


class UserCRUD(BaseCRUD[User, UserCreate, UserUpdate]):
    def __init__(self):
        super().__init__(User)

    async def get_by_subject(self, subject: str) -> Optional[User]:
        return await self.model.find_one({"subject": subject})

    async def exists(self, user_id: str) -> bool:
        oid = parse_object_id(user_id)
        if oid is None:
            return False
        return await self.model.find({"_id": oid}).count() > 0

    async def adjust_storage(self, user_id: str, delta: int) -> int:
        oid = parse_object_id(user_id)
        if oid is None or not delta:
            return 0
        return await self.update_many({"_id": oid}, {"$inc": {"storage_used": delta}})


user_crud = UserCRUD()
