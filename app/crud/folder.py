from app.models.time_mixin import utc_now
from beanie import PydanticObjectId
from app.crud.base import BaseCRUD, NEWEST_FIRST, OLDEST_FIRST
from app.models.folder import Folder
from app.schemas import FolderCreate, FolderUpdate
from typing import Dict, Iterable, List, Optional

class FolderCRUD(BaseCRUD[Folder, FolderCreate, FolderUpdate]):
    def __init__(self):
        super().__init__(Folder)

    async def get_owned(self, owner_id: str, folder_id) -> Optional[Folder]:
        """Get folder by id, None if it is missing or belongs to someone else"""
        folder = await self.get_by_id(folder_id)
        if not folder or folder.owner_id != owner_id:
            return None
        return folder

    async def get_sibling(
        self,
        owner_id: str,
        parent_id: Optional[PydanticObjectId],
        name: str,
        exclude_id: Optional[PydanticObjectId] = None,
    ) -> Optional[Folder]:
        """Get the folder named `name` directly under parent_id"""
        query = {"owner_id": owner_id, "parent_id": parent_id, "name": name}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        return await self.model.find_one(query)

    async def get_children(
        self,
        owner_id: str,
        parent_id: Optional[PydanticObjectId],
        newest_first: bool = True,
    ) -> List[Folder]:
        """Get direct children of parent_id (root-level folders when None)"""
        return await self.list(
            {"owner_id": owner_id, "parent_id": parent_id},
            sort=NEWEST_FIRST if newest_first else OLDEST_FIRST,
        )

    async def get_descendants(self, owner_id: str, folder_id: PydanticObjectId) -> List[Folder]:
        """Get every folder below folder_id, oldest first"""
        return await self.list({"owner_id": owner_id, "path": folder_id}, sort=OLDEST_FIRST)

    async def get_all(self, owner_id: str) -> List[Folder]:
        return await self.list({"owner_id": owner_id}, sort=OLDEST_FIRST)

    async def get_many(self, folder_ids: Iterable[PydanticObjectId]) -> Dict[PydanticObjectId, Folder]:
        """Fetch folders by id, keyed by id"""
        ids = list(folder_ids)
        if not ids:
            return {}
        folders = await self.model.find({"_id": {"$in": ids}}).to_list()
        return {folder.id: folder for folder in folders}

    async def relocate(
        self,
        folder: Folder,
        parent_id: Optional[PydanticObjectId],
        path: List[PydanticObjectId],
    ) -> Folder:
        """Re-parent a folder, parent_id may be None for root level"""
        await folder.set({"parent_id": parent_id, "path": path, "updated_at": utc_now()})
        return folder

    async def delete_by_ids(self, folder_ids: List[PydanticObjectId]) -> int:
        if not folder_ids:
            return 0
        return await self.delete_many({"_id": {"$in": folder_ids}})


folder_crud = FolderCRUD()
