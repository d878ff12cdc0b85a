"""Error response schema shared by all endpoints."""
from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Standard error body for 4xx/5xx responses."""

    error: str = Field(
        ...,
        description="Error type identifier",
        examples=["attachment_not_found", "permission_denied", "file_missing"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Attachment not found", "File not found in storage"],
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"error": "attachment_not_found", "message": "Attachment not found"},
                {
                    "error": "permission_denied",
                    "message": "You are not authorized to access this attachment",
                },
                {"error": "upload_failed", "message": "Upload failed"},
            ]
        }
    )
