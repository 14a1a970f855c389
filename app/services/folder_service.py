import os
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from beanie import PydanticObjectId
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from app.core.locks import KeyedLock, folder_structure_lock
from app.crud.file import FileCRUD, file_crud as default_file_crud
from app.crud.folder import FolderCRUD, folder_crud
from app.crud.user import UserCRUD, user_crud as default_user_crud
from app.models.folder import Folder
from app.schemas import (
    FolderCreate, FolderDeleteResponse, FolderDetailResponse, FolderPathResponse,
    FolderResponse, FolderSummary, FolderTreeNode, OwnerSummary
)
from app.services.activity_service import ActivityService, activity_service as default_activity_service
from app.utils import get_logger, parse_object_id

logger = get_logger(__name__)


class FolderService:
    """
    Folder hierarchy engine.

    Every folder stores its ancestor ids in `path` (root first, parent last),
    so a subtree is one `{"path": folder_id}` query. Create, move and delete
    run under a per-owner lock so path cascades never interleave.
    """

    def __init__(
        self,
        crud: Optional[FolderCRUD] = None,
        file_crud: Optional[FileCRUD] = None,
        user_crud: Optional[UserCRUD] = None,
        activity: Optional[ActivityService] = None,
        lock: Optional[KeyedLock] = None,
    ):
        self.crud = crud or folder_crud
        self.file_crud = file_crud or default_file_crud
        self.user_crud = user_crud or default_user_crud
        self.activity = activity or default_activity_service
        self.lock = lock or folder_structure_lock

    @staticmethod
    def _clean_name(name) -> str:
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError("Folder name is required", field="name")
        return name.strip()

    @staticmethod
    def to_response(folder: Folder) -> FolderResponse:
        return FolderResponse(
            id=str(folder.id),
            owner_id=folder.owner_id,
            name=folder.name,
            parent_id=str(folder.parent_id) if folder.parent_id else None,
            path=[str(ancestor_id) for ancestor_id in folder.path],
            created_at=folder.created_at,
            updated_at=folder.updated_at,
        )

    async def _get_owned_or_404(self, user_id: str, folder_id) -> Folder:
        folder = await self.crud.get_owned(user_id, folder_id)
        if not folder:
            raise NotFoundError("Folder not found")
        return folder

    async def _ancestor_summaries(self, folder: Folder) -> List[FolderSummary]:
        ancestors = await self.crud.get_many(folder.path)
        return [
            FolderSummary(id=str(ancestor_id), name=ancestors[ancestor_id].name)
            for ancestor_id in folder.path
            if ancestor_id in ancestors
        ]

    async def create_folder(self, user_id: str, name: str, parent_id: Optional[str] = None) -> FolderResponse:
        name = self._clean_name(name)
        if not await self.user_crud.exists(user_id):
            raise NotFoundError("Owner not found", field="owner_id")

        async with self.lock.hold(user_id):
            path: List[PydanticObjectId] = []
            parent_oid = None
            if parent_id is not None:
                parent = await self.crud.get_owned(user_id, parent_id)
                if not parent:
                    raise NotFoundError("Parent folder not found", field="parent_id")
                parent_oid = parent.id
                path = [*parent.path, parent.id]

            if await self.crud.get_sibling(user_id, parent_oid, name):
                raise ConflictError("Folder with the same name already exists here", field="name")

            try:
                folder = await self.crud.create(FolderCreate(
                    owner_id=user_id,
                    name=name,
                    parent_id=str(parent_oid) if parent_oid else None,
                    path=[str(ancestor_id) for ancestor_id in path],
                ))
            except DuplicateKeyError:
                raise ConflictError("Folder with the same name already exists here", field="name")

        logger.info(f"[FOLDER_CREATE] Folder {folder.id} created - user_id: {user_id}, depth: {len(folder.path)}")
        return self.to_response(folder)

    async def get_folder(self, user_id: str, folder_id: str) -> FolderDetailResponse:
        folder = await self._get_owned_or_404(user_id, folder_id)
        owner = await self.user_crud.get_by_id(folder.owner_id)
        path = await self._ancestor_summaries(folder)

        return FolderDetailResponse(
            id=str(folder.id),
            name=folder.name,
            owner=OwnerSummary(id=folder.owner_id, username=owner.username if owner else None),
            parent=path[-1] if folder.parent_id and path else None,
            path=path,
            created_at=folder.created_at,
            updated_at=folder.updated_at,
        )

    async def list_root_folders(self, owner_id: str) -> List[FolderResponse]:
        folders = await self.crud.get_children(owner_id, None)
        return [self.to_response(folder) for folder in folders]

    async def get_folder_path(self, user_id: str, folder_id: str) -> FolderPathResponse:
        folder = await self._get_owned_or_404(user_id, folder_id)
        return FolderPathResponse(
            id=str(folder.id),
            name=folder.name,
            path=await self._ancestor_summaries(folder),
        )

    async def list_children(self, user_id: str, folder_id: str) -> List[FolderResponse]:
        folder = await self._get_owned_or_404(user_id, folder_id)
        children = await self.crud.get_children(user_id, folder.id)
        return [self.to_response(child) for child in children]

    @staticmethod
    def _assemble(folders: List[Folder]) -> List[FolderTreeNode]:
        """Link nodes to their parents; folders whose parent is not in the set become roots"""
        nodes: Dict[PydanticObjectId, FolderTreeNode] = {
            folder.id: FolderTreeNode(id=str(folder.id), name=folder.name) for folder in folders
        }
        roots: List[FolderTreeNode] = []
        for folder in folders:
            parent = nodes.get(folder.parent_id) if folder.parent_id else None
            if parent is None:
                roots.append(nodes[folder.id])
            else:
                parent.children.append(nodes[folder.id])
        return roots

    async def build_tree(self, user_id: str, root_id: str) -> FolderTreeNode:
        root = await self._get_owned_or_404(user_id, root_id)
        descendants = await self.crud.get_descendants(user_id, root.id)
        return self._assemble([root, *descendants])[0]

    async def build_forest(self, user_id: str) -> List[FolderTreeNode]:
        """Trees for every root-level folder of the user"""
        return self._assemble(await self.crud.get_all(user_id))

    async def rename_folder(self, user_id: str, folder_id: str, new_name: str) -> FolderResponse:
        folder = await self._get_owned_or_404(user_id, folder_id)
        new_name = self._clean_name(new_name)
        if new_name == folder.name:
            return self.to_response(folder)

        if await self.crud.get_sibling(user_id, folder.parent_id, new_name, exclude_id=folder.id):
            raise ConflictError("Folder with the same name already exists here", field="name")

        try:
            folder = await self.crud.update(folder, {"name": new_name})
        except DuplicateKeyError:
            raise ConflictError("Folder with the same name already exists here", field="name")
        await self.activity.record(user_id, "rename", folder_id=folder.id)
        logger.info(f"[FOLDER_RENAME] Folder {folder.id} renamed - user_id: {user_id}")
        return self.to_response(folder)

    async def move_folder(self, user_id: str, folder_id: str, new_parent_id: Optional[str]) -> FolderResponse:
        async with self.lock.hold(user_id):
            folder = await self._get_owned_or_404(user_id, folder_id)

            new_path: List[PydanticObjectId] = []
            destination_id = None
            if new_parent_id is not None:
                if parse_object_id(new_parent_id) == folder.id:
                    raise InvalidArgumentError("A folder cannot be moved into itself", field="new_parent_id")
                destination = await self.crud.get_owned(user_id, new_parent_id)
                if not destination:
                    raise NotFoundError("Destination folder not found", field="new_parent_id")
                if folder.id in destination.path:
                    raise InvalidArgumentError(
                        "A folder cannot be moved into one of its descendants", field="new_parent_id"
                    )
                destination_id = destination.id
                new_path = [*destination.path, destination.id]

            if destination_id == folder.parent_id:
                return self.to_response(folder)

            if await self.crud.get_sibling(user_id, destination_id, folder.name, exclude_id=folder.id):
                raise ConflictError("Destination already holds a folder with the same name", field="name")

            descendants = await self.crud.get_descendants(user_id, folder.id)
            try:
                folder = await self.crud.relocate(folder, destination_id, new_path)
            except DuplicateKeyError:
                raise ConflictError("Destination already holds a folder with the same name", field="name")

            prefix = [*new_path, folder.id]
            for descendant in descendants:
                tail = descendant.path[descendant.path.index(folder.id) + 1:]
                await self.crud.relocate(descendant, descendant.parent_id, prefix + tail)

        await self.activity.record(user_id, "move", folder_id=folder.id)
        logger.info(
            f"[FOLDER_MOVE] Folder {folder.id} moved under {destination_id or 'root'} - "
            f"user_id: {user_id}, descendants: {len(descendants)}"
        )
        return self.to_response(folder)

    @staticmethod
    def _numbered(name: str, n: int) -> str:
        """report.pdf -> report (n).pdf"""
        stem, ext = os.path.splitext(name)
        return f"{stem} ({n}){ext}"

    async def _unfile_files(self, user_id: str, folder_ids: List[PydanticObjectId]) -> Tuple[int, int]:
        """
        Move every file in folder_ids to the unfiled bucket, oldest first.

        A name already taken there gets the smallest free ` (n)` suffix.
        Returns (orphaned, renamed).
        """
        files = await self.file_crud.list_in_folders(user_id, folder_ids)
        taken = await self.file_crud.names_in_folder(user_id, None)

        renamed = 0
        for file in files:
            original = file.name
            candidate, n = original, 0
            while True:
                if candidate not in taken:
                    try:
                        await self.file_crud.unfile(file, candidate)
                        break
                    except DuplicateKeyError:
                        # Taken by a concurrent upload
                        pass
                taken.add(candidate)
                n += 1
                candidate = self._numbered(original, n)
            taken.add(candidate)

            if candidate != original:
                renamed += 1
                await self.activity.record(user_id, "rename", file_id=file.id)
                logger.info(f"[FOLDER_DELETE] File {file.id} unfiled as '{candidate}' - user_id: {user_id}")

        return len(files), renamed

    async def delete_folder(self, user_id: str, folder_id: str) -> FolderDeleteResponse:
        """Delete a folder and its whole subtree; files inside become unfiled"""
        async with self.lock.hold(user_id):
            folder = await self._get_owned_or_404(user_id, folder_id)
            descendants = await self.crud.get_descendants(user_id, folder.id)

            subtree_ids = [folder.id, *(d.id for d in descendants)]
            orphaned, renamed = await self._unfile_files(user_id, subtree_ids)

            by_depth: Dict[int, List[PydanticObjectId]] = defaultdict(list)
            for descendant in descendants:
                by_depth[len(descendant.path)].append(descendant.id)

            deleted = 0
            for depth in sorted(by_depth, reverse=True):
                deleted += await self.crud.delete_by_ids(by_depth[depth])
            deleted += await self.crud.delete_by_ids([folder.id])

        await self.activity.record(user_id, "delete", folder_id=folder.id)
        logger.info(
            f"[FOLDER_DELETE] Folder {folder.id} deleted - user_id: {user_id}, "
            f"folders: {deleted}, orphaned files: {orphaned}, renamed files: {renamed}"
        )
        return FolderDeleteResponse(
            id=str(folder.id), deleted_folders=deleted, orphaned_files=orphaned, renamed_files=renamed
        )


folder_service = FolderService()
