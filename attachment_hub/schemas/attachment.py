"""Pydantic schemas for attachment operations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AttachmentQuery(BaseModel):
    """Filter and paging parameters for listing attachments."""

    module: str | None = None
    group: str | None = None
    file_name: str | None = Field(None, description="Case-insensitive substring match")
    page: int = Field(1, ge=1)
    page_size: int = Field(15, ge=1, le=100)


class AttachmentUpload(BaseModel):
    """Upload metadata supplied alongside an already stored file."""

    module: str = Field(..., min_length=1, max_length=100)
    group: str = Field(..., min_length=1, max_length=100)
    auth: bool = False
    account_id: UUID


class AttachmentResponse(BaseModel):
    """Attachment metadata as returned by the query endpoint."""

    id: UUID
    module: str
    group: str
    file_name: str
    save_name: str
    ext: str
    md5: str
    path: str
    full_path: str
    size: int
    size_text: str
    media_type: str | None = None
    auth: bool
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class AttachmentQueryResult(BaseModel):
    """One page of attachments plus the total match count."""

    rows: list[AttachmentResponse]
    total: int


class AttachmentUploadResult(BaseModel):
    """Caller-facing view of a newly created attachment."""

    id: UUID
    file_name: str
    ext: str
    full_path: str
    size: int
    size_text: str
    media_type: str | None = None

    model_config = ConfigDict(from_attributes=True)
