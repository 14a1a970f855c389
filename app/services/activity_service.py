from typing import List, Optional

from app.crud.activity import ActivityCRUD, activity_crud
from app.models.activity import Activity, ActivityAction
from app.schemas.activity import ActivityCreate, ActivityResponse
from app.utils import get_logger, parse_object_id

logger = get_logger(__name__)


class ActivityService:
    """Append-only audit trail. Recording is best-effort and never raises."""

    def __init__(self, crud: Optional[ActivityCRUD] = None):
        self.crud = crud or activity_crud

    async def record(
        self,
        user_id: str,
        action: ActivityAction,
        file_id=None,
        folder_id=None,
    ) -> Optional[Activity]:
        try:
            payload = ActivityCreate(
                user_id=user_id,
                action=action,
                file_id=str(file_id) if file_id else None,
                folder_id=str(folder_id) if folder_id else None,
            )
            return await self.crud.create(payload)
        except Exception as e:
            logger.warning(
                f"[ACTIVITY] Failed to record {action} - user_id: {user_id}, file_id: {file_id}, folder_id: {folder_id}, error: {e}"
            )
            return None

    @staticmethod
    def _to_response(activity: Activity) -> ActivityResponse:
        return ActivityResponse(
            id=str(activity.id),
            user_id=activity.user_id,
            action=activity.action,
            file_id=str(activity.file_id) if activity.file_id else None,
            folder_id=str(activity.folder_id) if activity.folder_id else None,
            created_at=activity.created_at,
        )

    async def list_by_user(self, user_id: str) -> List[ActivityResponse]:
        activities = await self.crud.list_by_user(user_id)
        return [self._to_response(a) for a in activities]

    async def list_recent(self, user_id: str, limit: int = 10) -> List[ActivityResponse]:
        activities = await self.crud.list_by_user(user_id, limit=limit)
        return [self._to_response(a) for a in activities]

    async def list_by_file(self, user_id: str, file_id: str) -> List[ActivityResponse]:
        oid = parse_object_id(file_id)
        if oid is None:
            return []
        activities = await self.crud.list_by_file(user_id, oid)
        return [self._to_response(a) for a in activities]

    async def list_by_folder(self, user_id: str, folder_id: str) -> List[ActivityResponse]:
        oid = parse_object_id(folder_id)
        if oid is None:
            return []
        activities = await self.crud.list_by_folder(user_id, oid)
        return [self._to_response(a) for a in activities]


activity_service = ActivityService()
