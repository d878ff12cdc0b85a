"""API routes for attachments."""

import posixpath
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse
from starlette.concurrency import run_in_threadpool

from attachment_hub.api.deps import get_account_id, get_attachment_service, get_storage
from attachment_hub.core.result import Failure, FailureReason
from attachment_hub.core.storage import LocalFileStorage, UploadTooLargeError
from attachment_hub.schemas.attachment import (
    AttachmentQuery,
    AttachmentQueryResult,
    AttachmentUpload,
    AttachmentUploadResult,
)
from attachment_hub.schemas.errors import ErrorResponse
from attachment_hub.services.attachment_service import AttachmentService

router = APIRouter()

_FAILURE_RESPONSES: dict[FailureReason, tuple[int, str]] = {
    FailureReason.PERSISTENCE_FAILURE: (status.HTTP_500_INTERNAL_SERVER_ERROR, "upload_failed"),
    FailureReason.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "attachment_not_found"),
    FailureReason.UNAUTHORIZED: (status.HTTP_403_FORBIDDEN, "permission_denied"),
    FailureReason.FILE_MISSING: (status.HTTP_410_GONE, "file_missing"),
}


def _failure_to_http(failure: Failure) -> HTTPException:
    """Convert a service failure into an HTTP error with a distinct error code."""
    status_code, error = _FAILURE_RESPONSES[failure.reason]
    return HTTPException(
        status_code=status_code,
        detail=ErrorResponse(error=error, message=failure.message).model_dump(),
    )


@router.get(
    "",
    response_model=AttachmentQueryResult,
    summary="Query attachments",
    dependencies=[Depends(get_account_id)],
)
async def query_attachments(
    module: str | None = Query(None, max_length=100),
    group: str | None = Query(None, max_length=100),
    file_name: str | None = Query(None, max_length=255),
    page: int = Query(1, ge=1),
    page_size: int = Query(15, ge=1, le=100),
    service: AttachmentService = Depends(get_attachment_service),
) -> AttachmentQueryResult:
    """List attachment metadata filtered by module, group and file name."""
    result = await service.query(
        AttachmentQuery(
            module=module,
            group=group,
            file_name=file_name,
            page=page,
            page_size=page_size,
        )
    )
    return result.value


@router.post(
    "",
    response_model=AttachmentUploadResult,
    status_code=status.HTTP_201_CREATED,
    summary="Upload attachment",
    responses={500: {"model": ErrorResponse}},
)
async def upload_attachment(
    file: UploadFile = File(...),
    module: str = Form(..., min_length=1, max_length=100),
    group: str = Form(..., min_length=1, max_length=100),
    auth: bool = Form(False),
    service: AttachmentService = Depends(get_attachment_service),
    storage: LocalFileStorage = Depends(get_storage),
    account_id: UUID = Depends(get_account_id),
) -> AttachmentUploadResult:
    """Store a file and record its metadata.

    With ``auth`` set, only the uploading account may download the file.
    """
    try:
        stored = await run_in_threadpool(
            storage.save,
            file.file,
            file.filename or "file",
            module,
            group,
        )
    except UploadTooLargeError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=ErrorResponse(error="file_too_large", message=str(exc)).model_dump(),
        ) from None

    relative_path = posixpath.join(stored.path, stored.save_name)
    try:
        result = await service.upload(
            AttachmentUpload(module=module, group=group, auth=auth, account_id=account_id),
            stored,
        )
    except Exception:
        await run_in_threadpool(storage.delete, relative_path)
        raise

    if not result.ok:
        # Metadata was rolled back, so the bytes would be unreachable
        await run_in_threadpool(storage.delete, relative_path)
        raise _failure_to_http(result)

    return result.value


@router.get(
    "/{attachment_id}/download",
    summary="Download attachment",
    response_class=FileResponse,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        410: {"model": ErrorResponse},
    },
)
async def download_attachment(
    attachment_id: UUID,
    service: AttachmentService = Depends(get_attachment_service),
    account_id: UUID = Depends(get_account_id),
) -> FileResponse:
    """Stream an attachment after checking ownership for auth-gated files."""
    result = await service.download(attachment_id, account_id)
    if not result.ok:
        raise _failure_to_http(result)

    download = result.value
    return FileResponse(
        path=download.path,
        filename=download.file_name,
        media_type=download.media_type,
    )
