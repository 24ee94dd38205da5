from urllib.parse import quote

from pydantic import BaseModel, Field, ConfigDict
from fastapi import Response
from typing import Generic, Optional, TypeVar

DataType = TypeVar("DataType")


class APIResponse(BaseModel, Generic[DataType]):
    """Standard API response wrapper"""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    message: str = Field(..., description="Response message")
    data: Optional[DataType] = Field(default=None, description="Response data")
    success: bool = Field(default=True, description="Success status")

    @classmethod
    def ok(cls, message: str = "Success", data: Optional[DataType] = None) -> "APIResponse[DataType]":
        """Create a success response"""
        return cls(message=message, data=data, success=True)


def attachment(content: bytes, file_name: str, media_type: str) -> Response:
    """File download response. The name is RFC 5987 encoded so accented table names survive."""
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(file_name)}"},
    )
