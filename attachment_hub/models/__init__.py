"""SQLAlchemy models."""

from attachment_hub.models.attachment import Attachment
from attachment_hub.models.attachment_owner import AttachmentOwner
from attachment_hub.models.base import Base, BaseModel
from attachment_hub.models.media_type import MediaType

__all__ = [
    "Base",
    "BaseModel",
    "Attachment",
    "AttachmentOwner",
    "MediaType",
]
