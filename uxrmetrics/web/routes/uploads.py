"""Project file upload route.

Routes:
- POST /api/upload - Multipart ``file`` + ``projectId``; stores the file under a
  random name and records its metadata on the project
"""

from __future__ import annotations

import logging
from pathlib import Path
from uuid import UUID, uuid4

import aiofiles
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from uxrmetrics.config import UploadConfig
from uxrmetrics.db.connection import get_db
from uxrmetrics.models import AuthContext, ProjectFileRead
from uxrmetrics.projects import repository
from uxrmetrics.web.auth import require_admin
from uxrmetrics.web.dependencies import get_upload_config

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"])


def stored_filename(original_name: str | None) -> str:
    """Random ``<uuid>.<ext>`` name keeping only the original extension."""
    extension = Path(original_name or "").suffix.lstrip(".").lower()
    return f"{uuid4()}.{extension}" if extension else str(uuid4())


@router.post("/api/upload", response_model=ProjectFileRead, status_code=status.HTTP_201_CREATED)
async def upload_file(
    auth: AuthContext = Depends(require_admin),
    file: UploadFile = File(...),
    project_id: UUID = Form(..., alias="projectId"),
    db: AsyncSession = Depends(get_db),
    uploads: UploadConfig = Depends(get_upload_config),
):
    """Attach a file (max ``MAX_UPLOAD_BYTES``, default 10 MiB) to a project."""
    content = await file.read(uploads.max_size_bytes + 1)
    if len(content) > uploads.max_size_bytes:
        limit_mb = uploads.max_size_bytes // (1024 * 1024)
        raise HTTPException(
            status_code=400, detail=f"File too large. Maximum size is {limit_mb}MB"
        )

    filename = stored_filename(file.filename)
    record = await repository.add_project_file(
        db,
        project_id,
        filename=filename,
        original_name=file.filename or filename,
        mime_type=file.content_type or "application/octet-stream",
        size=len(content),
        url=f"{uploads.url_prefix.rstrip('/')}/{filename}",
    )

    uploads.directory.mkdir(parents=True, exist_ok=True)
    path = uploads.directory / filename
    async with aiofiles.open(path, "wb") as out_file:
        await out_file.write(content)

    try:
        await db.commit()
    except Exception:
        path.unlink(missing_ok=True)
        raise

    logger.info("Stored upload %s for project %s (%d bytes)", filename, project_id, len(content))

    return ProjectFileRead.model_validate(record)
