from unittest.mock import AsyncMock

from app.crud.activity import ActivityCRUD
from app.services import ActivityService


async def test_record_and_query(user_id):
    service = ActivityService()
    file_id = "665f1c2b9a1e4b7d2c3f4a51"
    folder_id = "665f1c2b9a1e4b7d2c3f4a52"

    await service.record(user_id, "upload", file_id=file_id)
    await service.record(user_id, "download", file_id=file_id)
    await service.record(user_id, "rename", folder_id=folder_id)

    assert [a.action for a in await service.list_by_user(user_id)] == ["rename", "download", "upload"]
    assert [a.action for a in await service.list_by_file(user_id, file_id)] == ["download", "upload"]
    assert [a.action for a in await service.list_by_folder(user_id, folder_id)] == ["rename"]
    assert len(await service.list_recent(user_id, limit=2)) == 2
    assert await service.list_by_file(user_id, "bad-id") == []


async def test_record_never_raises_on_invalid_event(user_id):
    service = ActivityService()
    assert await service.record(user_id, "upload") is None
    assert await service.record(user_id, "upload", file_id="665f1c2b9a1e4b7d2c3f4a51",
                                folder_id="665f1c2b9a1e4b7d2c3f4a52") is None
    assert await service.record(user_id, "explode", file_id="665f1c2b9a1e4b7d2c3f4a51") is None
    assert await service.list_by_user(user_id) == []


async def test_record_never_raises_on_store_failure(user_id):
    crud = ActivityCRUD()
    crud.create = AsyncMock(side_effect=RuntimeError("db down"))
    service = ActivityService(crud=crud)

    assert await service.record(user_id, "delete", file_id="665f1c2b9a1e4b7d2c3f4a51") is None
    crud.create.assert_awaited_once()


async def test_activity_is_scoped_to_user(user_id, other_user):
    service = ActivityService()
    await service.record(str(other_user.id), "upload", file_id="665f1c2b9a1e4b7d2c3f4a51")
    assert await service.list_by_user(user_id) == []
