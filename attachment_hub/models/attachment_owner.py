"""Attachment ownership grant model."""

from sqlalchemy import Column, ForeignKey, Uuid

from attachment_hub.models.base import Base


class AttachmentOwner(Base):
    """Grants one account access to one auth-gated attachment."""

    __tablename__ = "attachment_owners"

    attachment_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("attachments.id", ondelete="CASCADE"),
        primary_key=True,
    )
    account_id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<AttachmentOwner(attachment_id={self.attachment_id}, "
            f"account_id={self.account_id})>"
        )
