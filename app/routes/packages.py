"""
LinguaHub Backend — Package Route Handlers
============================================

What:  POST /add-package, which creates a course package with question media.
How:   The multipart form is read directly: besides `questions`, it carries
       one file part per media-bearing question, named image_<id> or
       audio_<id> (see app/services/package_service.py).
"""

import logging
from typing import Dict

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from app.database import get_db_session
from app.dependencies import get_file_service
from app.schemas.common import ErrorResponse
from app.schemas.package import AddPackageResponse
from app.services.file_service import FileService
from app.services.package_service import package_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Packages"])


@router.post(
    "/add-package",
    response_model=AddPackageResponse,
    responses={
        400: {"description": "Invalid questions payload or missing media", "model": ErrorResponse},
        404: {"description": "No package document to append to", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Add a package of questions",
)
async def add_package(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    files: FileService = Depends(get_file_service),
) -> AddPackageResponse:
    form = await request.form()

    fields: Dict[str, str] = {}
    uploads: Dict[str, UploadFile] = {}
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            uploads[key] = value
        else:
            fields[key] = value

    logger.info("Received add-package request: %d fields, %d files", len(fields), len(uploads))

    try:
        package = await package_service.add_package(
            db=db, files=files, fields=fields, uploads=uploads
        )
    finally:
        for upload in uploads.values():
            await upload.close()

    return AddPackageResponse(package=package)
