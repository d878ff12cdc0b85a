"""FastAPI dependencies for account identity and service wiring."""
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from attachment_hub.core.database import get_db
from attachment_hub.core.storage import LocalFileStorage, get_storage_client
from attachment_hub.core.unit_of_work import UnitOfWork
from attachment_hub.repositories.attachment_owner_repository import AttachmentOwnerRepository
from attachment_hub.repositories.attachment_repository import AttachmentRepository
from attachment_hub.repositories.media_type_repository import MediaTypeRepository
from attachment_hub.services.attachment_service import AttachmentService


async def get_account_id(
    x_account_id: str | None = Header(default=None, alias="X-Account-Id"),
) -> UUID:
    """Read the already-authenticated account ID supplied by the gateway.

    Raises:
        HTTPException: 401 if the header is missing or not a UUID
    """
    if not x_account_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing account identity",
        )

    try:
        return UUID(x_account_id.strip())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid account identity",
        ) from None


def get_storage() -> LocalFileStorage:
    return get_storage_client()


async def get_attachment_service(
    db: AsyncSession = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
) -> AttachmentService:
    """Build an AttachmentService bound to the request's database session."""
    return AttachmentService(
        repository=AttachmentRepository(db),
        owner_repository=AttachmentOwnerRepository(db),
        media_type_repository=MediaTypeRepository(db),
        uow=UnitOfWork(db),
        storage=storage,
        upload_path=storage.root,
    )
