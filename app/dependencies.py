"""
LinguaHub Backend — Request Dependencies
==========================================

What:  FastAPI dependencies that hand startup-built collaborators to routes.
Why:   Handlers never import process-wide mutable objects; they receive the
       settings and blob store that create_app()/lifespan put on app.state.

The per-request database session lives in app.database (get_db_session).
"""

from fastapi import Request

from app.config import Settings
from app.services.file_service import FileService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_file_service(request: Request) -> FileService:
    files = getattr(request.app.state, "file_service", None)
    if files is None:
        raise RuntimeError("FileService is not initialized; was the lifespan skipped?")
    return files
