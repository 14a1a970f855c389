from typing import Any, Dict, Optional

from starlette.responses import JSONResponse
from starlette import status

from app.schemas.response import ApiError, ApiResponse


def _envelope(data: Any, message: Optional[str]) -> Dict[str, Any]:
    return ApiResponse[Any](success=True, message=message, data=data).model_dump(mode="json", exclude_none=True)


def ok(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = status.HTTP_200_OK,
    headers: Optional[Dict[str, str]] = None,
):
    return JSONResponse(content=_envelope(data, message), status_code=status_code, headers=headers)


def created(data: Any = None, message: str = "Created", headers: Optional[Dict[str, str]] = None):
    return JSONResponse(content=_envelope(data, message), status_code=status.HTTP_201_CREATED, headers=headers)


def error(
    message: str,
    status_code: int,
    code: Optional[str] = None,
    details=None,
    headers: Optional[Dict[str, str]] = None,
):
    return JSONResponse(content=ApiError.build(message, code, details), status_code=status_code, headers=headers)
