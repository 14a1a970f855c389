from app.models.time_mixin import TimeMixin
from app.models.user import User
from app.models.folder import Folder
from app.models.file import File, FileType, FILE_TYPES
from app.models.tag import Tag
from app.models.activity import Activity, ActivityAction

# Export all models for easy import
__all__ = [
    "TimeMixin",
    "User",
    "Folder",
    "File",
    "FileType",
    "FILE_TYPES",
    "Tag",
    "Activity",
    "ActivityAction",
]

# List of all document models for Beanie initialization
DOCUMENT_MODELS = [
    User,
    Folder,
    File,
    Tag,
    Activity,
]
