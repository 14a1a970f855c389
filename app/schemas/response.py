from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar
from datetime import datetime

from pydantic import BaseModel, Field, ConfigDict

from app.models.time_mixin import utc_now


T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope returned by every successful endpoint"""
    success: bool = Field(True, description="Always true for successful responses")
    message: Optional[str] = Field(None, description="Human-readable outcome")
    data: Optional[T] = Field(None, description="Payload")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "message": "Folder created successfully",
                "data": {"id": "665f1c2b9a1e4b7d2c3f4a51", "name": "Invoices", "path": []}
            }
        }
    )


class ErrorDetail(BaseModel):
    code: str = Field(..., description="Error kind or validator type")
    message: str = Field(..., description="Human-readable error message")
    field: Optional[str] = Field(None, description="Offending input field, when known")


class ApiError(BaseModel):
    """Envelope returned by every failed request"""
    success: bool = Field(False, description="Always false for error responses")
    message: str = Field(..., description="Main error message")
    code: Optional[str] = Field(None, description="Error kind: invalid_argument, not_found, conflict, upload_failed, no_op, ...")
    errors: Optional[List[ErrorDetail]] = Field(None, description="Per-field details")
    timestamp: datetime = Field(default_factory=utc_now)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "message": "Folder with the same name already exists here",
                "code": "conflict",
                "errors": [{"code": "conflict", "message": "Folder with the same name already exists here", "field": "name"}],
                "timestamp": "2024-01-15T10:30:00Z"
            }
        }
    )

    @classmethod
    def build(
        cls,
        message: str,
        code: Optional[str] = None,
        details: Optional[Iterable[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """JSON-ready error body"""
        errors = [ErrorDetail(**d) for d in details or []]
        return cls(message=message, code=code, errors=errors or None).model_dump(mode="json", exclude_none=True)


class HealthCheck(BaseModel):
    status: str = Field(..., description="ok, or degraded when MongoDB does not answer")
    timestamp: datetime = Field(default_factory=utc_now)
    version: Optional[str] = None
