"""Lookup of media types by file extension."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from attachment_hub.models.media_type import MediaType


class MediaTypeRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_ext(self, ext: str | None) -> MediaType | None:
        """Resolve an extension such as ``pdf``, ``.PDF`` or ``Pdf``.

        Returns None for unknown or empty extensions.
        """
        normalized = (ext or "").strip().lstrip(".").lower()
        if not normalized:
            return None

        result = await self.session.execute(
            select(MediaType).where(MediaType.ext == normalized)
        )
        return result.scalar_one_or_none()
