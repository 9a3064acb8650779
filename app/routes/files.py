"""
LinguaHub Backend — Stored File Serving
=========================================

What:  Read-only access to uploaded photos (/uploads/...) and question
       media (/resources/...).
Why:   Reference strings saved in documents are exactly these URL paths.

Security:
    FileService.resolve() rejects paths that escape their folder
    (e.g. ../../etc/passwd) and 404s anything not on disk.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from app.dependencies import get_file_service
from app.services.file_service import PHOTO_FOLDER, RESOURCE_FOLDER, FileService

router = APIRouter(tags=["Files"])

# Stored files never change (timestamped names), so clients may cache them
_CACHE_HEADERS = {"Cache-Control": "public, max-age=86400"}


@router.get(f"/{PHOTO_FOLDER}/{{file_path:path}}", summary="Serve an uploaded photo")
async def serve_photo(file_path: str, files: FileService = Depends(get_file_service)) -> FileResponse:
    return FileResponse(path=str(files.resolve(PHOTO_FOLDER, file_path)), headers=_CACHE_HEADERS)


@router.get(f"/{RESOURCE_FOLDER}/{{file_path:path}}", summary="Serve question media")
async def serve_resource(file_path: str, files: FileService = Depends(get_file_service)) -> FileResponse:
    return FileResponse(path=str(files.resolve(RESOURCE_FOLDER, file_path)), headers=_CACHE_HEADERS)
