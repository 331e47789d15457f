# taskboard/attachment/attachment_router.py
from __future__ import annotations

import logging
import re
import uuid
from pathlib import PurePath
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskboard.auth.auth_router import get_current_user
from taskboard.config import MAX_UPLOAD_BYTES
from taskboard.database import get_db
from taskboard.errors import store_error
from taskboard.models.attachment import Attachment
from taskboard.models.user import User
from taskboard.schemas.attachment_schema import AttachmentRead
from taskboard.storage.file_storage import FileStorage, StorageError, get_storage
from taskboard.task.task_router import get_owned_task

logger = logging.getLogger("taskboard.attachment")

TOO_LARGE = f"File size exceeds {MAX_UPLOAD_BYTES // (1024 * 1024)}MB limit"

router = APIRouter(prefix="/api/tasks/{task_id}/attachments", tags=["attachments"])
files_router = APIRouter(prefix="/api/files", tags=["files"])


def stored_name(original: str) -> str:
    """Collision-resistant storage name that keeps the original extension."""
    suffix = PurePath(original).suffix
    return f"{uuid.uuid4()}{suffix}"


def _read_upload(file: UploadFile) -> bytes:
    # reject on the declared size before touching the body when we can
    if file.size is not None and file.size > MAX_UPLOAD_BYTES:
        raise HTTPException(400, TOO_LARGE)
    data = file.file.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(400, TOO_LARGE)
    return data


def content_disposition(filename: str) -> str:
    try:
        filename.encode("latin-1")
        plain = '"' not in filename and "\\" not in filename
    except UnicodeEncodeError:
        plain = False
    if plain:
        return f'attachment; filename="{filename}"'

    # quoted-string fallback for old clients, exact name in filename*
    fallback = filename.encode("ascii", "replace").decode("ascii")
    fallback = re.sub(r'[?"\\]', "_", fallback)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


# ==========================
#  UPLOAD
# ==========================
@router.post("", response_model=AttachmentRead, status_code=201)
def upload_attachment(
    task_id: int,
    file: Optional[UploadFile] = File(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    storage: FileStorage = Depends(get_storage),
):
    if file is None or not file.filename:
        raise HTTPException(400, "No file uploaded")

    data = _read_upload(file)
    get_owned_task(db, task_id, user)

    filename = stored_name(file.filename)
    file_path = f"{user.id}/{task_id}/{filename}"

    try:
        storage.upload(file_path, data)
    except StorageError as exc:
        logger.error("attachment_upload_failed", extra={"task_id": task_id, "error": str(exc)})
        raise HTTPException(500, str(exc))

    attachment = Attachment(
        task_id=task_id,
        user_id=user.id,
        filename=filename,
        original_filename=file.filename,
        file_size=len(data),
        mime_type=file.content_type or "application/octet-stream",
        file_path=file_path,
    )
    try:
        db.add(attachment)
        db.commit()
        db.refresh(attachment)
    except SQLAlchemyError as exc:
        error = store_error(db, exc, "attachment_insert_failed", task_id=task_id)
        # don't leave bytes behind that no record points to
        try:
            storage.remove([file_path])
        except StorageError:
            logger.warning("attachment_orphan_cleanup_failed", extra={"file_path": file_path})
        raise error

    logger.info("attachment_uploaded", extra={"task_id": task_id, "attachment_id": attachment.id, "bytes": len(data)})
    return attachment


# ==========================
#  LIST
# ==========================
@router.get("", response_model=list[AttachmentRead])
def list_attachments(
    task_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        return (
            db.query(Attachment)
            .filter(Attachment.task_id == task_id, Attachment.user_id == user.id)
            .order_by(Attachment.created_at.desc(), Attachment.id.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        raise store_error(db, exc, "attachment_list_failed", task_id=task_id)


# ==========================
#  DELETE
# ==========================
@router.delete("/{attachment_id}")
def delete_attachment(
    task_id: int,
    attachment_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    storage: FileStorage = Depends(get_storage),
):
    attachment = (
        db.query(Attachment)
        .filter(
            Attachment.id == attachment_id,
            Attachment.task_id == task_id,
            Attachment.user_id == user.id,
        )
        .first()
    )
    if not attachment:
        raise HTTPException(404, "Attachment not found or unauthorized")

    # bytes first: if that fails the record stays, so nothing points at a missing file
    try:
        storage.remove([attachment.file_path])
    except StorageError as exc:
        logger.error("attachment_storage_delete_failed", extra={"attachment_id": attachment_id, "error": str(exc)})
        raise HTTPException(500, str(exc))

    try:
        db.delete(attachment)
        db.commit()
    except SQLAlchemyError as exc:
        raise store_error(db, exc, "attachment_record_delete_failed", attachment_id=attachment_id)

    return {"message": "Attachment deleted successfully"}


# ==========================
#  DOWNLOAD
# ==========================
@files_router.get("/{filename}")
def download_file(
    filename: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    storage: FileStorage = Depends(get_storage),
):
    attachment = (
        db.query(Attachment)
        .filter(Attachment.filename == filename, Attachment.user_id == user.id)
        .first()
    )
    if not attachment:
        raise HTTPException(404, "File not found or unauthorized")

    try:
        data = storage.download(attachment.file_path)
    except StorageError as exc:
        logger.error("attachment_download_failed", extra={"attachment_id": attachment.id, "error": str(exc)})
        raise HTTPException(500, str(exc))

    return Response(
        content=data,
        media_type=attachment.mime_type,
        headers={"Content-Disposition": content_disposition(attachment.original_filename)},
    )
