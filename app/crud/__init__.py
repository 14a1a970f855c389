from app.crud.user import user_crud
from app.crud.folder import folder_crud
from app.crud.file import file_crud
from app.crud.tag import tag_crud
from app.crud.activity import activity_crud

__all__ = ["user_crud", "folder_crud", "file_crud", "tag_crud", "activity_crud"]
