import jwt
from typing import Dict, Any
from app.configs.settings import settings
from app.core.exceptions import AuthError


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and verify an access token issued by the identity provider"""
    options = {"verify_aud": bool(settings.JWT_AUDIENCE), "require": ["sub", "exp"]}
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=settings.JWT_ALGORITHMS,
            issuer=settings.JWT_ISSUER or None,
            audience=settings.JWT_AUDIENCE or None,
            options=options,
        )
        return payload

    except jwt.ExpiredSignatureError:
        raise AuthError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise AuthError(f"Invalid token: {str(e)}")
