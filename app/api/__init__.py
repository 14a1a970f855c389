from app.api.folder import router as folder_router
from app.api.file import router as file_router
from app.api.tag import router as tag_router
from app.api.activity import router as activity_router
from app.api.user import router as user_router

__all__ = ["folder_router", "file_router", "tag_router", "activity_router", "user_router"]
