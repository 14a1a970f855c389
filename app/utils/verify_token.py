from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.models.user import User
from app.services.user import user_service
from app.utils.jwt_verification import decode_token

security = HTTPBearer()

async def verify_token(authorization_credentials: HTTPAuthorizationCredentials = Security(security)):
    """Verify the bearer JWT and return its claims"""
    token = authorization_credentials.credentials
    return decode_token(token)

async def get_current_user(current_user: dict = Depends(verify_token)) -> User:
    """Resolve the caller's user record, provisioning it on first sight"""
    return await user_service.get_or_provision(current_user)
