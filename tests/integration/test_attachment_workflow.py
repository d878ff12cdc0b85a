"""Integration tests for the attachment service against a real session.

These exercise the transaction boundary: whatever the service reports, the
database must agree with it afterwards.
"""

import io
from uuid import UUID, uuid4

import pytest
from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from attachment_hub.core.result import FailureReason
from attachment_hub.core.storage import LocalFileStorage
from attachment_hub.core.unit_of_work import UnitOfWork
from attachment_hub.models.attachment import Attachment
from attachment_hub.models.attachment_owner import AttachmentOwner
from attachment_hub.repositories.attachment_owner_repository import AttachmentOwnerRepository
from attachment_hub.repositories.attachment_repository import AttachmentRepository
from attachment_hub.repositories.media_type_repository import MediaTypeRepository
from attachment_hub.schemas.attachment import AttachmentQuery, AttachmentUpload
from attachment_hub.services.attachment_service import AttachmentService


class RejectingOwnerRepository(AttachmentOwnerRepository):
    """Owner registry whose inserts always fail."""

    async def add(self, attachment_id: UUID, account_id: UUID) -> bool:
        return False


class DuplicatingOwnerRepository(AttachmentOwnerRepository):
    """Owner registry that writes the grant twice, so the ORM insert hits the primary key."""

    async def add(self, attachment_id: UUID, account_id: UUID) -> bool:
        await self.session.execute(
            insert(AttachmentOwner).values(attachment_id=attachment_id, account_id=account_id)
        )
        return await super().add(attachment_id, account_id)


def _service(
    db: AsyncSession,
    storage: LocalFileStorage,
    owner_repository: AttachmentOwnerRepository | None = None,
) -> AttachmentService:
    return AttachmentService(
        repository=AttachmentRepository(db),
        owner_repository=owner_repository or AttachmentOwnerRepository(db),
        media_type_repository=MediaTypeRepository(db),
        uow=UnitOfWork(db),
        storage=storage,
        upload_path=storage.root,
    )


async def _count(db: AsyncSession, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.mark.asyncio
async def test_upload_without_auth_creates_no_owner(db: AsyncSession, storage: LocalFileStorage):
    service = _service(db, storage)
    stored = storage.save(io.BytesIO(b"%PDF-1.4"), "a.pdf", "docs", "g1")

    result = await service.upload(
        AttachmentUpload(module="docs", group="g1", auth=False, account_id=uuid4()),
        stored,
    )

    assert result.ok
    uploaded = result.value
    assert uploaded.full_path == f"{stored.path}/{stored.save_name}"
    assert uploaded.media_type == "application/pdf"

    assert await AttachmentRepository(db).get(uploaded.id) is not None
    assert await _count(db, AttachmentOwner) == 0


@pytest.mark.asyncio
async def test_upload_with_auth_persists_owner(db: AsyncSession, storage: LocalFileStorage):
    service = _service(db, storage)
    account_id = uuid4()
    stored = storage.save(io.BytesIO(b"secret"), "secret.txt", "docs", "g1")

    result = await service.upload(
        AttachmentUpload(module="docs", group="g1", auth=True, account_id=account_id),
        stored,
    )

    assert result.ok
    assert await AttachmentOwnerRepository(db).exists(result.value.id, account_id)


@pytest.mark.asyncio
async def test_owner_insert_failure_discards_attachment(
    db: AsyncSession, storage: LocalFileStorage
):
    """Attachment and ownership writes are all-or-nothing."""
    service = _service(db, storage, owner_repository=RejectingOwnerRepository(db))
    stored = storage.save(io.BytesIO(b"secret"), "secret.txt", "docs", "g1")

    result = await service.upload(
        AttachmentUpload(module="docs", group="g1", auth=True, account_id=uuid4()),
        stored,
    )

    assert not result.ok
    assert result.reason == FailureReason.PERSISTENCE_FAILURE
    assert await _count(db, Attachment) == 0

    query_result = await service.query(AttachmentQuery())
    assert query_result.value.total == 0


@pytest.mark.asyncio
async def test_owner_integrity_error_rolls_back_and_session_stays_usable(
    db: AsyncSession, storage: LocalFileStorage
):
    """A database-level grant conflict discards both rows and leaves the session reusable."""
    service = _service(db, storage, owner_repository=DuplicatingOwnerRepository(db))
    stored = storage.save(io.BytesIO(b"secret"), "secret.txt", "docs", "g1")

    result = await service.upload(
        AttachmentUpload(module="docs", group="g1", auth=True, account_id=uuid4()),
        stored,
    )

    assert not result.ok
    assert result.reason == FailureReason.PERSISTENCE_FAILURE
    assert await _count(db, Attachment) == 0
    assert await _count(db, AttachmentOwner) == 0

    account_id = uuid4()
    retry = await _service(db, storage).upload(
        AttachmentUpload(module="docs", group="g1", auth=True, account_id=account_id),
        storage.save(io.BytesIO(b"secret"), "secret.txt", "docs", "g1"),
    )

    assert retry.ok
    assert await _count(db, Attachment) == 1
    assert await AttachmentOwnerRepository(db).exists(retry.value.id, account_id)


@pytest.mark.asyncio
async def test_download_outcomes_are_distinct(
    db: AsyncSession,
    storage: LocalFileStorage,
    owner_account_id: UUID,
    other_account_id: UUID,
):
    service = _service(db, storage)
    stored = storage.save(io.BytesIO(b"secret"), "secret.txt", "docs", "g1")
    uploaded = (
        await service.upload(
            AttachmentUpload(module="docs", group="g1", auth=True, account_id=owner_account_id),
            stored,
        )
    ).value

    missing = await service.download(uuid4(), owner_account_id)
    denied = await service.download(uploaded.id, other_account_id)
    allowed = await service.download(uploaded.id, owner_account_id)

    assert missing.reason == FailureReason.NOT_FOUND
    assert denied.reason == FailureReason.UNAUTHORIZED
    assert allowed.ok
    assert allowed.value.path == storage.root / uploaded.full_path
    assert allowed.value.file_name == "secret.txt"
    assert allowed.value.media_type == "text/plain"

    storage.delete(uploaded.full_path)
    gone = await service.download(uploaded.id, owner_account_id)
    assert gone.reason == FailureReason.FILE_MISSING


@pytest.mark.asyncio
async def test_public_attachment_downloads_for_any_account(
    db: AsyncSession, storage: LocalFileStorage
):
    service = _service(db, storage)
    stored = storage.save(io.BytesIO(b"hello"), "notes.md", "docs", "g1")
    uploaded = (
        await service.upload(
            AttachmentUpload(module="docs", group="g1", auth=False, account_id=uuid4()),
            stored,
        )
    ).value

    result = await service.download(uploaded.id, uuid4())

    assert result.ok
    assert result.value.media_type is None
