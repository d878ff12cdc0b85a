"""Persistence for attachment ownership grants."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from attachment_hub.core.structured_logging import log_json
from attachment_hub.models.attachment_owner import AttachmentOwner

logger = logging.getLogger(__name__)


class AttachmentOwnerRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, attachment_id: UUID, account_id: UUID) -> bool:
        """Grant ``account_id`` access to ``attachment_id``.

        Returns:
            True if the grant was written, False on an integrity violation
            (duplicate grant or dangling attachment reference)
        """
        self.session.add(AttachmentOwner(attachment_id=attachment_id, account_id=account_id))
        try:
            await self.session.flush()
        except IntegrityError as exc:
            log_json(
                logger,
                logging.WARNING,
                "attachment_owner_insert_rejected",
                attachment_id=attachment_id,
                account_id=account_id,
                error=str(exc.orig),
            )
            return False
        return True

    async def exists(self, attachment_id: UUID, account_id: UUID) -> bool:
        query = (
            select(AttachmentOwner.attachment_id)
            .where(AttachmentOwner.attachment_id == attachment_id)
            .where(AttachmentOwner.account_id == account_id)
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.first() is not None
