"""Persistence for attachment metadata records."""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from attachment_hub.core.structured_logging import log_json
from attachment_hub.models.attachment import Attachment
from attachment_hub.schemas.attachment import AttachmentQuery

logger = logging.getLogger(__name__)


class AttachmentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, attachment: Attachment) -> bool:
        """Stage and flush a new attachment.

        Returns:
            True if the row was written, False on an integrity violation
        """
        self.session.add(attachment)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            log_json(
                logger,
                logging.WARNING,
                "attachment_insert_rejected",
                file_name=attachment.file_name,
                error=str(exc.orig),
            )
            return False
        return True

    async def get(self, attachment_id: UUID) -> Attachment | None:
        result = await self.session.execute(
            select(Attachment).where(Attachment.id == attachment_id)
        )
        return result.scalar_one_or_none()

    async def query(self, model: AttachmentQuery) -> tuple[list[Attachment], int]:
        """Page through attachments matching the filter.

        Returns:
            Tuple of (rows for the requested page, total matching rows)
        """
        conditions = []
        if model.module:
            conditions.append(Attachment.module == model.module)
        if model.group:
            conditions.append(Attachment.group == model.group)
        if model.file_name:
            conditions.append(
                func.lower(Attachment.file_name).contains(model.file_name.lower(), autoescape=True)
            )

        count_query = select(func.count()).select_from(Attachment).where(*conditions)
        total = (await self.session.execute(count_query)).scalar_one()

        query = (
            select(Attachment)
            .where(*conditions)
            .order_by(Attachment.created_at.desc(), Attachment.id)
            .offset((model.page - 1) * model.page_size)
            .limit(model.page_size)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all()), total
