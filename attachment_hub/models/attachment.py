"""Attachment metadata model."""

from sqlalchemy import BigInteger, Boolean, Column, Index, String, false

from attachment_hub.models.base import BaseModel


class Attachment(BaseModel):
    """Metadata for one uploaded file.

    The bytes live on disk under the upload root; ``full_path`` is the
    location relative to that root and is fixed at creation as
    ``path/save_name``.
    """

    __tablename__ = "attachments"

    module = Column(String(100), nullable=False)
    group = Column(String(100), nullable=False)
    file_name = Column(String(255), nullable=False)
    save_name = Column(String(255), nullable=False)
    ext = Column(String(20), nullable=False, default="")
    md5 = Column(String(32), nullable=False)
    path = Column(String(500), nullable=False)
    full_path = Column(String(800), nullable=False)
    size = Column(BigInteger, nullable=False)
    size_text = Column(String(50), nullable=False)
    media_type = Column(String(100), nullable=True)
    auth = Column(Boolean, nullable=False, default=False, server_default=false())

    __table_args__ = (Index("idx_attachments_module_group", "module", "group"),)

    def __repr__(self) -> str:
        return f"<Attachment(id={self.id}, file_name={self.file_name})>"
