from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar
from beanie import Document
from pydantic import BaseModel

from app.models.time_mixin import utc_now
from app.utils.base import parse_object_id

ModelT = TypeVar("ModelT", bound=Document)
CreateSchemaT = TypeVar("CreateSchemaT", bound=BaseModel)
UpdateSchemaT = TypeVar("UpdateSchemaT", bound=BaseModel)

NEWEST_FIRST = ("-created_at", "-_id")
OLDEST_FIRST = ("created_at", "_id")


class BaseCRUD(Generic[ModelT, CreateSchemaT, UpdateSchemaT]):
    def __init__(self, model: Type[ModelT]):
        self.model = model

    async def get_by_id(self, id: Any) -> Optional[ModelT]:
        oid = parse_object_id(id)
        if oid is None:
            return None
        return await self.model.find_one({"_id": oid})

    async def list(
        self,
        filter_: Optional[Dict[str, Any]] = None,
        limit: int = 0,
        skip: int = 0,
        sort: Sequence[str] = NEWEST_FIRST,
    ) -> List[ModelT]:
        query = dict(filter_ or {})
        cursor = self.model.find(query).sort(*sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return await cursor.to_list()

    async def create(self, obj_in: CreateSchemaT) -> ModelT:
        data = obj_in.model_dump()
        db_obj = self.model(**data)
        await db_obj.insert()
        return db_obj

    async def update(
        self,
        db_obj: ModelT,
        obj_in: UpdateSchemaT | Dict[str, Any],
    ) -> ModelT:
        if isinstance(obj_in, BaseModel):
            update_data = obj_in.model_dump(exclude_unset=True)
        else:
            update_data = {k: v for k, v in obj_in.items() if v is not None}

        if "updated_at" in type(db_obj).model_fields:
            update_data["updated_at"] = utc_now()

        await db_obj.set(update_data)
        return db_obj

    async def update_many(self, filter_: Dict[str, Any], update: Dict[str, Any]) -> int:
        """Apply a raw update document to every match, returns the modified count"""
        result = await self.model.find(dict(filter_)).update(update)
        return result.modified_count if result else 0

    async def delete(self, db_obj: ModelT) -> None:
        await db_obj.delete()

    async def delete_many(self, filter_: Dict[str, Any]) -> int:
        result = await self.model.find(dict(filter_)).delete()
        return result.deleted_count if result else 0
