"""Attachment service for query, upload and download operations."""
import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path
from uuid import UUID, uuid4

from attachment_hub.core.metrics import record_attachment_operation
from attachment_hub.core.result import Failure, FailureReason, Result, Success
from attachment_hub.core.storage import LocalFileStorage, StoredFile
from attachment_hub.core.structured_logging import log_json
from attachment_hub.core.unit_of_work import UnitOfWork
from attachment_hub.models.attachment import Attachment
from attachment_hub.repositories.attachment_owner_repository import AttachmentOwnerRepository
from attachment_hub.repositories.attachment_repository import AttachmentRepository
from attachment_hub.repositories.media_type_repository import MediaTypeRepository
from attachment_hub.schemas.attachment import (
    AttachmentQuery,
    AttachmentQueryResult,
    AttachmentResponse,
    AttachmentUpload,
    AttachmentUploadResult,
)

logger = logging.getLogger(__name__)

UPLOAD_FAILED = "Upload failed"
ATTACHMENT_NOT_FOUND = "Attachment not found"
ACCESS_DENIED = "You are not authorized to access this attachment"
FILE_MISSING = "File not found in storage"


@dataclass(frozen=True)
class FileDownload:
    """Everything a transport needs to stream an attachment."""

    path: Path
    file_name: str
    media_type: str | None


class AttachmentService:
    """Service for managing attachment metadata and guarded downloads.

    Collaborators are passed in explicitly; the service holds no state of its
    own between calls.
    """

    def __init__(
        self,
        repository: AttachmentRepository,
        owner_repository: AttachmentOwnerRepository,
        media_type_repository: MediaTypeRepository,
        uow: UnitOfWork,
        storage: LocalFileStorage,
        upload_path: str | Path,
    ):
        """Initialize attachment service.

        Args:
            repository: Attachment metadata store
            owner_repository: Ownership grant registry
            media_type_repository: Extension to media type resolver
            uow: Transaction coordinator spanning both stores
            storage: File existence probe
            upload_path: Root directory that attachment paths are relative to
        """
        self.repository = repository
        self.owner_repository = owner_repository
        self.media_type_repository = media_type_repository
        self.uow = uow
        self.storage = storage
        self.upload_path = Path(upload_path)

    async def query(self, model: AttachmentQuery) -> Result[AttachmentQueryResult]:
        """List attachments matching a filter.

        Args:
            model: Module/group/file name filter with paging

        Returns:
            Success with the page of rows and the total match count
        """
        rows, total = await self.repository.query(model)
        record_attachment_operation("query", "ok")
        return Success(
            AttachmentQueryResult(
                rows=[AttachmentResponse.model_validate(row) for row in rows],
                total=total,
            )
        )

    async def upload(
        self,
        model: AttachmentUpload,
        file_info: StoredFile,
    ) -> Result[AttachmentUploadResult]:
        """Record metadata for a file that has already been written to storage.

        The attachment row and, for auth-gated uploads, the uploader's
        ownership grant are written in one transaction. If either insert
        fails nothing is kept and a single opaque failure is returned.

        Args:
            model: Module, group, auth flag and uploading account
            file_info: Descriptor of the stored file

        Returns:
            Success with the upload projection, or a persistence Failure
        """
        entity = Attachment(
            id=uuid4(),
            module=model.module,
            group=model.group,
            file_name=file_info.file_name,
            save_name=file_info.save_name,
            ext=file_info.ext,
            md5=file_info.md5,
            path=file_info.path,
            full_path=posixpath.join(file_info.path, file_info.save_name),
            size=file_info.size,
            size_text=file_info.size_text,
            auth=model.auth,
        )

        media_type = await self.media_type_repository.get_by_ext(file_info.ext)
        if media_type is not None:
            entity.media_type = media_type.value

        async with self.uow.begin() as tx:
            if await self.repository.add(entity):
                # Auth-gated attachments are only reachable through an owner grant
                if not model.auth or await self.owner_repository.add(entity.id, model.account_id):
                    uploaded = AttachmentUploadResult.model_validate(entity)
                    await tx.commit()
                    record_attachment_operation("upload", "ok")
                    return Success(uploaded)

        log_json(
            logger,
            logging.ERROR,
            "attachment_upload_failed",
            module=model.module,
            group=model.group,
            file_name=file_info.file_name,
            auth=model.auth,
            account_id=model.account_id,
        )
        record_attachment_operation("upload", FailureReason.PERSISTENCE_FAILURE.value)
        return Failure(FailureReason.PERSISTENCE_FAILURE, UPLOAD_FAILED)

    async def download(self, attachment_id: UUID, account_id: UUID) -> Result[FileDownload]:
        """Authorize and locate an attachment for download.

        Args:
            attachment_id: Attachment ID
            account_id: Requesting account

        Returns:
            Success with the absolute path, original name and media type, or a
            Failure whose reason is not_found, unauthorized or file_missing
        """
        attachment = await self.repository.get(attachment_id)
        if attachment is None:
            log_json(
                logger,
                logging.INFO,
                "attachment_not_found",
                attachment_id=attachment_id,
                account_id=account_id,
            )
            return self._download_failure(FailureReason.NOT_FOUND, ATTACHMENT_NOT_FOUND)

        if attachment.auth:
            has_grant = await self.owner_repository.exists(attachment_id, account_id)
            if not has_grant:
                log_json(
                    logger,
                    logging.WARNING,
                    "attachment_download_denied",
                    attachment_id=attachment_id,
                    account_id=account_id,
                )
                return self._download_failure(FailureReason.UNAUTHORIZED, ACCESS_DENIED)

        file_path = self.upload_path / attachment.full_path
        # Point-in-time probe; the file may still vanish before it is streamed
        if not self.storage.file_exists(file_path):
            log_json(
                logger,
                logging.ERROR,
                "attachment_file_missing",
                attachment_id=attachment_id,
                full_path=attachment.full_path,
                resolved_path=file_path,
            )
            return self._download_failure(FailureReason.FILE_MISSING, FILE_MISSING)

        record_attachment_operation("download", "ok")
        return Success(FileDownload(file_path, attachment.file_name, attachment.media_type))

    @staticmethod
    def _download_failure(reason: FailureReason, message: str) -> Failure:
        record_attachment_operation("download", reason.value)
        return Failure(reason, message)
