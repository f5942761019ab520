"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable and provide validation for
controller handlers and tests. Every endpoint answers with an
`ApiResponse` envelope.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Generic, List, Literal, Optional, TypeVar

T = TypeVar("T")


class LoginIn(BaseModel):
    """Payload for the admin login endpoint."""
    username: str
    password: str


class TokenOut(BaseModel):
    """Authentication response containing an access token."""
    access_token: str
    token_type: str = "bearer"


class PathwayIn(BaseModel):
    """Request body for creating or replacing a pathway."""
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)


class PathwayOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AdminIn(BaseModel):
    """Request body for creating or replacing an admin account."""
    username: str = Field(min_length=3, max_length=64)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=8, max_length=128)


class AdminOut(BaseModel):
    """Public view of an admin; the password hash is never exposed."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    created_at: datetime


class Page(BaseModel, Generic[T]):
    """One window of an ordered-by-id listing."""
    items: List[T]
    limit: int
    offset: int
    total: int


class ApiResponse(BaseModel, Generic[T]):
    """Uniform response envelope: {status, httpStatus, message, data, error}."""
    model_config = ConfigDict(populate_by_name=True)

    status: Literal["success", "error"]
    http_status: int = Field(alias="httpStatus")
    message: str
    data: Optional[T] = None
    error: Optional[str] = None


AnyResponse = ApiResponse[Any]
