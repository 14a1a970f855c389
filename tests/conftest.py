import uuid
from typing import Dict, List, Optional

import pytest
from beanie import init_beanie
from mongomock_motor import AsyncMongoMockClient

from app.core.exceptions import UploadError
from app.core.locks import KeyedLock
from app.models import DOCUMENT_MODELS, User
from app.schemas import FileUploadMeta
from app.services import FileService, FolderService, StoredObject, TagService


class FakeBlobStore:
    """In-memory blob store that records every call"""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.put_calls: List[str] = []
        self.delete_calls: List[str] = []
        self.fail_put = False
        self.fail_delete = False
        self.return_empty_url = False

    async def put(self, data, *, owner_id, file_name, content_type=None):
        self.put_calls.append(file_name)
        if self.fail_put:
            raise UploadError("storage is down")
        handle = f"{owner_id}/{uuid.uuid4().hex}"
        self.objects[handle] = data
        url = "" if self.return_empty_url else f"https://blobs.test/{handle}"
        return StoredObject(handle=handle, url=url)

    async def delete(self, handle):
        self.delete_calls.append(handle)
        if self.fail_delete:
            raise RuntimeError("storage is down")
        self.objects.pop(handle, None)
        return True

    async def presigned_url(self, handle, download_name: Optional[str] = None):
        if handle not in self.objects:
            return ""
        return f"https://blobs.test/{handle}?download={download_name}"


@pytest.fixture(autouse=True)
async def database():
    client = AsyncMongoMockClient()
    db = client.get_database(f"test_{uuid.uuid4().hex}")
    await init_beanie(database=db, document_models=DOCUMENT_MODELS)
    yield db


async def make_user(subject: str, username: str) -> User:
    user = User(subject=subject, username=username, email=f"{username}@example.com")
    await user.insert()
    return user


@pytest.fixture
async def user() -> User:
    return await make_user("auth|alice", "alice")


@pytest.fixture
async def other_user() -> User:
    return await make_user("auth|bob", "bob")


@pytest.fixture
def user_id(user) -> str:
    return str(user.id)


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def folders() -> FolderService:
    return FolderService(lock=KeyedLock())


@pytest.fixture
def tags() -> TagService:
    return TagService()


@pytest.fixture
def files(blob_store, tags) -> FileService:
    return FileService(blob_store=blob_store, tags=tags)


@pytest.fixture
def upload(files, user_id):
    """Upload helper: await upload("a.pdf", b"...", folder_id=..., tags=[...])"""

    async def _upload(name, data=b"data", folder_id=None, tags=None, file_type=None, content_type=None, owner=None):
        meta = FileUploadMeta(name=name, folder_id=folder_id, tags=tags or [], file_type=file_type)
        return await files.upload_file(owner or user_id, meta, data, content_type)

    return _upload
