from .blob_store import BlobStore, MinIOBlobStore, StoredObject, get_blob_store
from .user import UserService, user_service
from .activity_service import ActivityService, activity_service
from .tag_service import TagService, tag_service
from .folder_service import FolderService, folder_service
from .file_service import FileService
__all__ = [
    "BlobStore", "MinIOBlobStore", "StoredObject", "get_blob_store",
    "UserService", "user_service", "ActivityService", "activity_service",
    "TagService", "tag_service", "FolderService", "folder_service", "FileService",
]
