from beanie import PydanticObjectId
from app.crud.base import BaseCRUD, NEWEST_FIRST, OLDEST_FIRST
from app.models.file import File
from app.models.time_mixin import utc_now
from app.schemas.file import FileCreate, FileUpdate
from app.utils.base import contains_pattern
from typing import List, Optional, Set


class FileCRUD(BaseCRUD[File, FileCreate, FileUpdate]):
    def __init__(self):
        super().__init__(File)

    async def get_owned(self, owner_id: str, file_id) -> Optional[File]:
        """Get file by id, None if it is missing or belongs to someone else"""
        file = await self.get_by_id(file_id)
        if not file or file.owner_id != owner_id:
            return None
        return file

    async def get_by_identity(
        self,
        owner_id: str,
        folder_id: Optional[PydanticObjectId],
        name: str,
        exclude_id: Optional[PydanticObjectId] = None,
    ) -> Optional[File]:
        """Get the file holding the (name, owner, folder) identity"""
        query = {"owner_id": owner_id, "folder_id": folder_id, "name": name}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        return await self.model.find_one(query)

    async def get_in_folder_by_names(
        self, owner_id: str, folder_id: PydanticObjectId, names: List[str]
    ) -> List[File]:
        return await self.model.find({
            "owner_id": owner_id,
            "folder_id": folder_id,
            "name": {"$in": names}
        }).to_list()

    async def list_by_ids(self, owner_id: str, file_ids: List[PydanticObjectId]) -> List[File]:
        if not file_ids:
            return []
        return await self.list({"owner_id": owner_id, "_id": {"$in": file_ids}})

    async def list_by_folder(self, owner_id: str, folder_id: PydanticObjectId) -> List[File]:
        return await self.list({"owner_id": owner_id, "folder_id": folder_id})

    async def list_by_owner(self, owner_id: str) -> List[File]:
        return await self.list({"owner_id": owner_id})

    async def search_files_by_name(self, owner_id: str, search_term: str) -> List[File]:
        """Search files by case-insensitive name substring"""
        return await self.list({
            "owner_id": owner_id,
            "name": contains_pattern(search_term)
        })

    async def list_by_tag_ids(self, owner_id: str, tag_ids: List[PydanticObjectId]) -> List[File]:
        if not tag_ids:
            return []
        return await self.list({"owner_id": owner_id, "tag_ids": {"$in": tag_ids}})

    async def get_files_by_type(self, owner_id: str, file_type: str) -> List[File]:
        return await self.list({"owner_id": owner_id, "file_type": file_type}, sort=NEWEST_FIRST)

    async def get_files_by_size_range(self, owner_id: str, min_size: float, max_size: float) -> List[File]:
        return await self.list(
            {"owner_id": owner_id, "file_size": {"$gte": min_size, "$lte": max_size}},
            sort=("-file_size", "-_id"),
        )

    async def delete_by_ids(self, owner_id: str, file_ids: List[PydanticObjectId]) -> int:
        if not file_ids:
            return 0
        return await self.delete_many({"owner_id": owner_id, "_id": {"$in": file_ids}})

    async def move_to_folder(self, owner_id: str, file_ids: List[PydanticObjectId], folder_id: PydanticObjectId) -> int:
        """Point files at folder_id, returns how many actually changed"""
        if not file_ids:
            return 0
        return await self.update_many(
            {"owner_id": owner_id, "_id": {"$in": file_ids}},
            {"$set": {"folder_id": folder_id}}
        )

    async def add_tags(self, file: File, tag_ids: List[PydanticObjectId]) -> int:
        return await self.update_many(
            {"_id": file.id},
            {"$addToSet": {"tag_ids": {"$each": tag_ids}}}
        )

    async def remove_tags(self, file: File, tag_ids: List[PydanticObjectId]) -> int:
        return await self.update_many(
            {"_id": file.id},
            {"$pullAll": {"tag_ids": tag_ids}}
        )

    async def list_in_folders(self, owner_id: str, folder_ids: List[PydanticObjectId]) -> List[File]:
        """Files living in any of folder_ids, oldest first"""
        if not folder_ids:
            return []
        return await self.list({"owner_id": owner_id, "folder_id": {"$in": folder_ids}}, sort=OLDEST_FIRST)

    async def names_in_folder(self, owner_id: str, folder_id: Optional[PydanticObjectId]) -> Set[str]:
        files = await self.model.find({"owner_id": owner_id, "folder_id": folder_id}).to_list()
        return {file.name for file in files}

    async def unfile(self, file: File, name: str) -> File:
        """Detach a file from its folder, storing it under `name`"""
        await file.set({"folder_id": None, "name": name, "updated_at": utc_now()})
        return file

    async def detach_tag(self, owner_id: str, tag_id: PydanticObjectId) -> int:
        return await self.update_many(
            {"owner_id": owner_id, "tag_ids": tag_id},
            {"$pull": {"tag_ids": tag_id}}
        )


file_crud = FileCRUD()
