import math
from typing import Any, Dict, List, Optional

from pymongo.errors import DuplicateKeyError

from app.core.exceptions import (
    ConflictError, InvalidArgumentError, NoOpError, NotFoundError, UploadError
)
from app.crud.file import FileCRUD, file_crud
from app.crud.folder import FolderCRUD, folder_crud as default_folder_crud
from app.crud.user import UserCRUD, user_crud as default_user_crud
from app.models.file import FILE_TYPES, File
from app.schemas.file import (
    BulkDeleteResponse, BulkMoveResponse, FileCreate, FileResponse, FileUploadMeta, FileUploadResponse
)
from app.services.activity_service import ActivityService, activity_service as default_activity_service
from app.services.blob_store import BlobStore
from app.services.tag_service import TagService, tag_service as default_tag_service
from app.utils import FileClassifier, get_logger, parse_object_ids

logger = get_logger(__name__)


class FileService:
    def __init__(
        self,
        blob_store: BlobStore,
        crud: Optional[FileCRUD] = None,
        folder_crud: Optional[FolderCRUD] = None,
        user_crud: Optional[UserCRUD] = None,
        tags: Optional[TagService] = None,
        activity: Optional[ActivityService] = None,
    ):
        self.blob_store = blob_store
        self.crud = crud or file_crud
        self.folder_crud = folder_crud or default_folder_crud
        self.user_crud = user_crud or default_user_crud
        self.tags = tags or default_tag_service
        self.activity = activity or default_activity_service

    @staticmethod
    def _clean_name(name) -> str:
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError("File name is required", field="name")
        return name.strip()

    @staticmethod
    def _check_type(file_type) -> str:
        if file_type not in FILE_TYPES:
            raise InvalidArgumentError(
                f"File type must be one of: {', '.join(FILE_TYPES)}", field="file_type"
            )
        return file_type

    @staticmethod
    def _parse_size(value: Any, field: str) -> float:
        if value is None or isinstance(value, bool):
            raise InvalidArgumentError(f"{field} is required and must be a number", field=field)
        try:
            size = float(value)
        except (TypeError, ValueError):
            raise InvalidArgumentError(f"{field} must be a number", field=field)
        if math.isnan(size) or size < 0:
            raise InvalidArgumentError(f"{field} must be a non-negative number", field=field)
        return size

    async def _responses(self, files: List[File]) -> List[FileResponse]:
        """Project files, resolving every tag id with one lookup"""
        tag_names = await self.tags.names_by_id(
            tag_id for file in files for tag_id in file.tag_ids
        )
        return [
            FileResponse(
                id=str(file.id),
                owner_id=file.owner_id,
                folder_id=str(file.folder_id) if file.folder_id else None,
                name=file.name,
                file_type=file.file_type,
                file_size=file.file_size,
                content_type=file.content_type,
                url=file.url,
                tags=[tag_names[tag_id] for tag_id in file.tag_ids if tag_id in tag_names],
                created_at=file.created_at,
                updated_at=file.updated_at,
            )
            for file in files
        ]

    async def _response(self, file: File) -> FileResponse:
        return (await self._responses([file]))[0]

    async def _get_owned_or_404(self, user_id: str, file_id: str) -> File:
        file = await self.crud.get_owned(user_id, file_id)
        if not file:
            raise NotFoundError("File not found")
        return file

    async def _cleanup_blob(self, file: File) -> None:
        """Best-effort object removal, failures are only logged"""
        try:
            removed = await self.blob_store.delete(file.object_name)
            if not removed:
                logger.warning(f"[FILE_DELETE] Blob cleanup reported failure - file_id: {file.id}, object: {file.object_name}")
        except Exception as e:
            logger.warning(f"[FILE_DELETE] Blob cleanup failed - file_id: {file.id}, object: {file.object_name}, error: {e}")

    async def _discard_object(self, handle: str) -> None:
        try:
            await self.blob_store.delete(handle)
        except Exception as e:
            logger.error(f"[FILE_UPLOAD] Failed to remove orphaned object {handle}: {e}")

    async def upload_file(
        self,
        user_id: str,
        meta: FileUploadMeta,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> FileUploadResponse:
        name = self._clean_name(meta.name)
        file_type = self._check_type(meta.file_type) if meta.file_type else FileClassifier.get_file_category(name, content_type)

        if not await self.user_crud.exists(user_id):
            raise NotFoundError("Owner not found", field="owner_id")

        folder_id = None
        if meta.folder_id is not None:
            folder = await self.folder_crud.get_owned(user_id, meta.folder_id)
            if not folder:
                raise NotFoundError("Folder not found", field="folder_id")
            folder_id = folder.id

        if await self.crud.get_by_identity(user_id, folder_id, name):
            raise ConflictError("File with the same name already exists in this folder", field="name")

        logger.info(f"[FILE_UPLOAD] Starting upload - user_id: {user_id}, name: {name}, size: {len(data)}")
        try:
            stored = await self.blob_store.put(data, owner_id=user_id, file_name=name, content_type=content_type)
        except UploadError:
            raise
        except Exception as e:
            logger.error(f"[FILE_UPLOAD] Blob store write failed - user_id: {user_id}, name: {name}, error: {e}")
            raise UploadError("Error while uploading the file to storage") from e

        if not stored or not stored.handle or not stored.url:
            raise UploadError("Storage did not return a reference for the uploaded file")

        try:
            tags = await self.tags.resolve_names(user_id, meta.tags)
            file = await self.crud.create(FileCreate(
                owner_id=user_id,
                folder_id=str(folder_id) if folder_id else None,
                name=name,
                file_type=file_type,
                file_size=len(data),
                content_type=content_type,
                object_name=stored.handle,
                url=stored.url,
                tag_ids=[str(tag.id) for tag in tags],
            ))
        except DuplicateKeyError:
            logger.warning(f"[FILE_UPLOAD] Name taken by a concurrent upload, removing object {stored.handle}")
            await self._discard_object(stored.handle)
            raise ConflictError("File with the same name already exists in this folder", field="name")
        except Exception:
            logger.error(f"[FILE_UPLOAD] Record insert failed, removing object {stored.handle}")
            await self._discard_object(stored.handle)
            raise

        await self.user_crud.adjust_storage(user_id, file.file_size)
        await self.activity.record(user_id, "upload", file_id=file.id)
        logger.info(f"[FILE_UPLOAD] Upload completed - file_id: {file.id}, user_id: {user_id}")

        return FileUploadResponse(
            id=str(file.id),
            name=file.name,
            file_type=file.file_type,
            file_size=file.file_size,
            owner_id=file.owner_id,
            folder_id=str(file.folder_id) if file.folder_id else None,
        )

    async def get_file(self, user_id: str, file_id: str) -> FileResponse:
        return await self._response(await self._get_owned_or_404(user_id, file_id))

    async def update_file(
        self,
        user_id: str,
        file_id: str,
        name: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> FileResponse:
        """Rename and/or replace the tag set"""
        if name is None and tags is None:
            raise InvalidArgumentError("Nothing to update, provide a name or tags")

        file = await self._get_owned_or_404(user_id, file_id)
        update_data: Dict[str, Any] = {}
        renamed = False

        if name is not None:
            name = self._clean_name(name)
            if name != file.name:
                if await self.crud.get_by_identity(user_id, file.folder_id, name, exclude_id=file.id):
                    raise ConflictError("File with the same name already exists in this folder", field="name")
                update_data["name"] = name
                renamed = True

        if tags is not None:
            resolved = await self.tags.resolve_names(user_id, tags)
            update_data["tag_ids"] = [tag.id for tag in resolved]

        if update_data:
            try:
                file = await self.crud.update(file, update_data)
            except DuplicateKeyError:
                raise ConflictError("File with the same name already exists in this folder", field="name")
        if renamed:
            await self.activity.record(user_id, "rename", file_id=file.id)
        return await self._response(file)

    async def delete_file(self, user_id: str, file_id: str) -> FileResponse:
        file = await self._get_owned_or_404(user_id, file_id)
        response = await self._response(file)

        await self.crud.delete(file)
        await self._cleanup_blob(file)
        await self.user_crud.adjust_storage(user_id, -file.file_size)
        await self.activity.record(user_id, "delete", file_id=file.id)

        logger.info(f"[FILE_DELETE] File {file.id} deleted - user_id: {user_id}")
        return response

    async def get_download_url(self, user_id: str, file_id: str) -> str:
        file = await self._get_owned_or_404(user_id, file_id)
        url = await self.blob_store.presigned_url(file.object_name, download_name=file.name)
        if not url:
            raise UploadError("Could not generate a download URL", code="storage_error")
        await self.activity.record(user_id, "download", file_id=file.id)
        return url

    async def list_by_folder(self, user_id: str, folder_id: str) -> List[FileResponse]:
        folder = await self.folder_crud.get_owned(user_id, folder_id)
        if not folder:
            raise NotFoundError("Folder not found")
        files = await self.crud.list_by_folder(user_id, folder.id)
        if not files:
            raise NotFoundError("No files found in this folder")
        return await self._responses(files)

    async def list_by_owner(self, owner_id: str) -> List[FileResponse]:
        return await self._responses(await self.crud.list_by_owner(owner_id))

    async def search_by_name(self, user_id: str, search_term: str) -> List[FileResponse]:
        if not isinstance(search_term, str) or not search_term.strip():
            raise InvalidArgumentError("Search term is required", field="name")
        files = await self.crud.search_files_by_name(user_id, search_term.strip())
        if not files:
            raise NotFoundError("No files match the given name")
        return await self._responses(files)

    async def search_by_tag(self, user_id: str, search_term: str) -> List[FileResponse]:
        """Files carrying any of the user's tags whose name contains search_term"""
        if not isinstance(search_term, str) or not search_term.strip():
            raise InvalidArgumentError("Search term is required", field="tag")
        matching_tags = await self.tags.crud.search_tags_by_name(user_id, search_term.strip())
        files = await self.crud.list_by_tag_ids(user_id, [tag.id for tag in matching_tags])
        if not files:
            raise NotFoundError("No files match the given tag")
        return await self._responses(files)

    async def filter_by_type(self, user_id: str, file_type: str) -> List[FileResponse]:
        file_type = self._check_type(file_type)
        return await self._responses(await self.crud.get_files_by_type(user_id, file_type))

    async def filter_by_size_range(self, user_id: str, min_size: Any, max_size: Any) -> List[FileResponse]:
        """Files with min_size <= file_size <= max_size, largest first"""
        low = self._parse_size(min_size, "min_size")
        high = self._parse_size(max_size, "max_size")
        if high < low:
            raise InvalidArgumentError("max_size must be greater than or equal to min_size", field="max_size")
        return await self._responses(await self.crud.get_files_by_size_range(user_id, low, high))

    async def bulk_delete(self, user_id: str, file_ids: List[str]) -> BulkDeleteResponse:
        if not file_ids:
            raise InvalidArgumentError("At least one file id is required", field="file_ids")

        files = await self.crud.list_by_ids(user_id, parse_object_ids(file_ids))
        if not files:
            raise NotFoundError("None of the given files were found")

        deleted = await self.crud.delete_by_ids(user_id, [file.id for file in files])
        for file in files:
            await self._cleanup_blob(file)
            await self.activity.record(user_id, "delete", file_id=file.id)
        await self.user_crud.adjust_storage(user_id, -sum(file.file_size for file in files))

        logger.info(f"[FILE_BULK_DELETE] Deleted {deleted}/{len(file_ids)} files - user_id: {user_id}")
        return BulkDeleteResponse(requested=len(file_ids), deleted=deleted)

    async def bulk_move(self, user_id: str, file_ids: List[str], new_folder_id: Optional[str]) -> BulkMoveResponse:
        if not file_ids:
            raise InvalidArgumentError("At least one file id is required", field="file_ids")
        if not new_folder_id:
            raise InvalidArgumentError("Destination folder id is required", field="new_folder_id")

        folder = await self.folder_crud.get_owned(user_id, new_folder_id)
        if not folder:
            raise NotFoundError("Destination folder not found", field="new_folder_id")

        files = await self.crud.list_by_ids(user_id, parse_object_ids(file_ids))
        movers = [file for file in files if file.folder_id != folder.id]

        names = [file.name for file in movers]
        if len(set(names)) != len(names):
            raise ConflictError("Files with the same name cannot be moved into one folder", field="file_ids")
        clashes = await self.crud.get_in_folder_by_names(user_id, folder.id, names) if names else []
        if clashes:
            raise ConflictError(
                f"Destination already holds: {', '.join(sorted(f.name for f in clashes))}", field="file_ids"
            )

        try:
            moved = await self.crud.move_to_folder(user_id, [file.id for file in movers], folder.id)
        except DuplicateKeyError:
            raise ConflictError("Destination already holds a file with the same name", field="file_ids")
        if not moved:
            raise NoOpError("No files were moved")

        for file in movers:
            await self.activity.record(user_id, "move", file_id=file.id)
        logger.info(f"[FILE_BULK_MOVE] Moved {moved} files to {folder.id} - user_id: {user_id}")
        return BulkMoveResponse(requested=len(file_ids), moved=moved, folder_id=str(folder.id))

    async def add_tags(self, user_id: str, file_id: str, tags: List[str]) -> FileResponse:
        if not tags:
            raise InvalidArgumentError("At least one tag is required", field="tags")
        file = await self._get_owned_or_404(user_id, file_id)
        resolved = await self.tags.resolve_names(user_id, tags)
        if resolved:
            await self.crud.add_tags(file, [tag.id for tag in resolved])
        return await self._response(await self.crud.get_by_id(file.id))

    async def remove_tags(self, user_id: str, file_id: str, tags: List[str]) -> FileResponse:
        if not tags:
            raise InvalidArgumentError("At least one tag is required", field="tags")
        file = await self._get_owned_or_404(user_id, file_id)
        resolved = await self.tags.resolve_names(user_id, tags, create_missing=False)
        if resolved:
            await self.crud.remove_tags(file, [tag.id for tag in resolved])
        return await self._response(await self.crud.get_by_id(file.id))
