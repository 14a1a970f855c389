from beanie import PydanticObjectId
from app.crud.base import BaseCRUD
from app.models.tag import Tag
from app.schemas.tag import TagCreate, TagUpdate
from app.utils.base import contains_pattern
from typing import Dict, Iterable, List, Optional


class TagCRUD(BaseCRUD[Tag, TagCreate, TagUpdate]):
    def __init__(self):
        super().__init__(Tag)

    async def get_owned(self, user_id: str, tag_id) -> Optional[Tag]:
        tag = await self.get_by_id(tag_id)
        if not tag or tag.used_by != user_id:
            return None
        return tag

    async def get_by_name(self, user_id: str, name: str, exclude_id: Optional[PydanticObjectId] = None) -> Optional[Tag]:
        query = {"used_by": user_id, "name": name}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        return await self.model.find_one(query)

    async def get_by_names(self, user_id: str, names: List[str]) -> List[Tag]:
        if not names:
            return []
        return await self.model.find({"used_by": user_id, "name": {"$in": names}}).to_list()

    async def list_by_user(self, user_id: str) -> List[Tag]:
        return await self.list({"used_by": user_id})

    async def search_tags_by_name(self, user_id: str, search_term: str) -> List[Tag]:
        return await self.list({"used_by": user_id, "name": contains_pattern(search_term)})

    async def get_many(self, tag_ids: Iterable[PydanticObjectId]) -> Dict[PydanticObjectId, Tag]:
        ids = list(tag_ids)
        if not ids:
            return {}
        tags = await self.model.find({"_id": {"$in": ids}}).to_list()
        return {tag.id: tag for tag in tags}


tag_crud = TagCRUD()
