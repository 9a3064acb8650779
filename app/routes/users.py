"""
LinguaHub Backend — User Route Handlers
=========================================

What:  Registration, profile read/update and password update endpoints.
Who:   Called by the learner-facing web client.

Request formats:
    POST /register          multipart/form-data (profile fields + optional photo)
    GET  /profile           ?email=
    PUT  /profile/update    application/json {email, ...fields}, or
                            multipart/form-data (email + any fields + optional photo)
    PUT  /update-password   application/json {email, newPassword}
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile as StarletteUploadFile

from app.database import get_db_session
from app.dependencies import get_file_service
from app.exceptions import ValidationError
from app.schemas.common import ErrorResponse, SuccessResponse
from app.schemas.user import PasswordUpdateRequest, ProfileResponse, RegisterResponse
from app.services.file_service import FileService
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])


@router.post(
    "/register",
    status_code=201,
    response_model=RegisterResponse,
    responses={
        201: {"description": "User created", "model": RegisterResponse},
        400: {"description": "Passwords differ or email already registered", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def register(
    name: Optional[str] = Form(default=None),
    phone: Optional[str] = Form(default=None),
    email: Optional[str] = Form(default=None),
    dateOfBirth: Optional[str] = Form(default=None),
    address: Optional[str] = Form(default=None),
    gender: Optional[str] = Form(default=None),
    password: str = Form(default=""),
    confirm_password: str = Form(default=""),
    photo: Optional[UploadFile] = File(default=None, description="Profile photo (PNG/JPG/GIF/WEBP)"),
    db: AsyncSession = Depends(get_db_session),
    files: FileService = Depends(get_file_service),
) -> RegisterResponse:
    """
    Create an account from the registration form.

    The photo is optional; without it photoURL is stored as null.
    """
    return await user_service.register(
        db=db,
        files=files,
        fields={
            "name": name,
            "phone": phone,
            "email": email,
            "dateOfBirth": dateOfBirth,
            "address": address,
            "gender": gender,
        },
        password=password,
        confirm_password=confirm_password,
        photo=photo,
    )


@router.get(
    "/profile",
    response_model=ProfileResponse,
    responses={
        400: {"description": "Email missing", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Get a user's public profile",
)
async def get_profile(
    email: Optional[str] = Query(default=None, description="Email of the user to fetch"),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    return await user_service.get_profile(db=db, email=email)


@router.put(
    "/profile/update",
    response_model=SuccessResponse,
    responses={
        400: {"description": "Email missing or nothing changed", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Update profile fields and/or photo",
)
async def update_profile(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    files: FileService = Depends(get_file_service),
) -> SuccessResponse:
    """
    Partial update: every field in the body except email is set on the
    profile.

    Accepts application/json (no photo) or multipart/form-data, where a
    `photo` file part replaces the stored photo. The body is read directly
    because the set of fields is open-ended.
    """
    photo: Optional[StarletteUploadFile] = None
    updates: Dict[str, Any] = {}

    content_type = request.headers.get("content-type", "")
    if content_type.split(";")[0].strip().lower() == "application/json":
        try:
            body = await request.json()
        except ValueError:
            raise ValidationError(message="Request body is not valid JSON", field="body")
        if not isinstance(body, dict):
            raise ValidationError(message="Request body must be a JSON object", field="body")
        updates = dict(body)
    else:
        form = await request.form()
        for key, value in form.multi_items():
            if isinstance(value, StarletteUploadFile):
                if key == "photo":
                    photo = value
                continue
            updates[key] = value

    email = updates.pop("email", None)

    return await user_service.update_profile(
        db=db,
        files=files,
        email=email,
        updates=updates,
        photo=photo,
    )


@router.put(
    "/update-password",
    response_model=SuccessResponse,
    responses={
        400: {"description": "Missing fields or password unchanged", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Replace a user's password",
)
async def update_password(
    body: PasswordUpdateRequest,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    return await user_service.update_password(
        db=db, email=body.email, new_password=body.newPassword
    )
