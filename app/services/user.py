from typing import Any, Dict, Optional

from pymongo.errors import DuplicateKeyError

from app.core.exceptions import AuthError
from app.crud.user import UserCRUD, user_crud
from app.models.user import User
from app.schemas.user import UserCreate, UserResponse
from app.utils import get_logger

logger = get_logger(__name__)

class UserService:
    def __init__(self, crud: Optional[UserCRUD] = None):
        self.crud = crud or user_crud

    async def get_or_provision(self, claims: Dict[str, Any]) -> User:
        """Return the user behind verified token claims, creating the record on first login"""
        subject = claims.get("sub")
        if not subject:
            raise AuthError("Token has no subject")

        user = await self.crud.get_by_subject(subject)
        if user:
            return user

        email = claims.get("email")
        username = (
            claims.get("username")
            or claims.get("preferred_username")
            or (email.split("@")[0] if email else None)
            or subject
        )
        payload = UserCreate(
            subject=subject,
            username=username,
            email=email,
            full_name=claims.get("name"),
        )
        try:
            user = await self.crud.create(payload)
            logger.info(f"Provisioned user {user.id} for subject {subject}")
            return user
        except DuplicateKeyError:
            # Concurrent first request already created it
            return await self.crud.get_by_subject(subject)

    def to_response(self, user: User) -> UserResponse:
        return UserResponse(
            id=str(user.id),
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            storage_used=user.storage_used,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


user_service = UserService()
