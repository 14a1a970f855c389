from typing import Dict, Iterable, List, Optional

from beanie import PydanticObjectId
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from app.crud.file import FileCRUD, file_crud as default_file_crud
from app.crud.tag import TagCRUD, tag_crud
from app.models.tag import Tag
from app.schemas.tag import TagCreate, TagResponse
from app.utils import get_logger

logger = get_logger(__name__)


class TagService:
    def __init__(self, crud: Optional[TagCRUD] = None, file_crud: Optional[FileCRUD] = None):
        self.crud = crud or tag_crud
        self.file_crud = file_crud or default_file_crud

    @staticmethod
    def _clean_name(name) -> str:
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError("Tag name is required", field="name")
        return name.strip()

    @staticmethod
    def _to_response(tag: Tag) -> TagResponse:
        return TagResponse(
            id=str(tag.id),
            name=tag.name,
            used_by=tag.used_by,
            created_at=tag.created_at,
            updated_at=tag.updated_at,
        )

    async def _get_owned_or_404(self, user_id: str, tag_id: str) -> Tag:
        tag = await self.crud.get_owned(user_id, tag_id)
        if not tag:
            raise NotFoundError("Tag not found")
        return tag

    async def create_tag(self, user_id: str, name: str) -> TagResponse:
        name = self._clean_name(name)
        if await self.crud.get_by_name(user_id, name):
            raise ConflictError("Tag with the same name already exists", field="name")
        try:
            tag = await self.crud.create(TagCreate(name=name, used_by=user_id))
        except DuplicateKeyError:
            raise ConflictError("Tag with the same name already exists", field="name")
        return self._to_response(tag)

    async def get_tag(self, user_id: str, tag_id: str) -> TagResponse:
        return self._to_response(await self._get_owned_or_404(user_id, tag_id))

    async def list_tags(self, user_id: str) -> List[TagResponse]:
        tags = await self.crud.list_by_user(user_id)
        return [self._to_response(tag) for tag in tags]

    async def search_tags(self, user_id: str, search_term: str) -> List[TagResponse]:
        """Case-insensitive substring search over the user's tag names, empty result is fine"""
        if not isinstance(search_term, str) or not search_term.strip():
            raise InvalidArgumentError("Search term is required", field="q")
        tags = await self.crud.search_tags_by_name(user_id, search_term.strip())
        return [self._to_response(tag) for tag in tags]

    async def rename_tag(self, user_id: str, tag_id: str, name: str) -> TagResponse:
        tag = await self._get_owned_or_404(user_id, tag_id)
        name = self._clean_name(name)
        if name == tag.name:
            return self._to_response(tag)
        if await self.crud.get_by_name(user_id, name, exclude_id=tag.id):
            raise ConflictError("Tag with the same name already exists", field="name")
        tag = await self.crud.update(tag, {"name": name})
        return self._to_response(tag)

    async def delete_tag(self, user_id: str, tag_id: str) -> TagResponse:
        """Delete a tag and detach it from every file that carries it"""
        tag = await self._get_owned_or_404(user_id, tag_id)
        detached = await self.file_crud.detach_tag(user_id, tag.id)
        await self.crud.delete(tag)
        logger.info(f"Tag {tag.id} deleted, detached from {detached} files")
        return self._to_response(tag)

    async def resolve_names(self, user_id: str, names: Iterable[str], create_missing: bool = True) -> List[Tag]:
        """
        Map literal tag names to the user's Tag documents.

        Blank names are skipped and duplicates collapse. With create_missing the
        unknown names are registered, otherwise they are dropped.
        """
        cleaned: List[str] = []
        for name in names or []:
            if isinstance(name, str) and name.strip() and name.strip() not in cleaned:
                cleaned.append(name.strip())
        if not cleaned:
            return []

        by_name = {tag.name: tag for tag in await self.crud.get_by_names(user_id, cleaned)}

        if create_missing:
            for name in cleaned:
                if name in by_name:
                    continue
                try:
                    by_name[name] = await self.crud.create(TagCreate(name=name, used_by=user_id))
                except DuplicateKeyError:
                    by_name[name] = await self.crud.get_by_name(user_id, name)

        return [by_name[name] for name in cleaned if by_name.get(name)]

    async def names_by_id(self, tag_ids: Iterable[PydanticObjectId]) -> Dict[PydanticObjectId, str]:
        tags = await self.crud.get_many(set(tag_ids))
        return {tag_id: tag.name for tag_id, tag in tags.items()}


tag_service = TagService()
