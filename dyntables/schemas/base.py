from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BaseSchema(BaseModel):
    """Request bodies accept both snake_case and the camelCase used by the web client."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Body returned for every AppException."""
    success: bool = False
    error: ErrorDetail


class BulkOperationResponse(BaseModel):
    """Outcome of a bulk update or delete."""
    successful: int = 0
    deleted: int = 0
    failed: int = 0
    errors: List[Dict[str, Any]] = Field(default_factory=list)


class HealthCheckSchema(BaseModel):
    status: str = Field(description="Health status: healthy, unhealthy")
    version: str
    environment: Optional[str] = None
