"""
LinguaHub Backend — User Service
==================================

What:  Registration, profile read/update and password update.
Why:   Keeps the account rules (password confirmation, unique email,
       protected fields, no-op detection) out of the HTTP layer.
How:   Each operation is one lookup plus at most one write in the request's
       session, optionally preceded by a photo write through FileService.
Who:   Called by the routes in app/routes/users.py.

Registration Flow (POST /register):
    ┌──────────────┐   ┌──────────────┐   ┌─────────────┐   ┌───────────┐
    │ passwords    │──▶│ email taken? │──▶│ store photo │──▶│  insert   │
    │ match?       │   │ (pre-check)  │   │ (optional)  │   │  (unique) │
    └──────────────┘   └──────────────┘   └─────────────┘   └───────────┘

    The pre-check gives the common duplicate case a clean 400 without
    touching disk. The unique index on users.email catches the concurrent
    case: the losing insert raises IntegrityError, its photo is removed and
    the client sees the same ConflictError.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from app.exceptions import (
    ConflictError,
    DatabaseError,
    NoChangesError,
    NotFoundError,
    ValidationError,
)
from app.models.user import User
from app.schemas.common import SuccessResponse
from app.schemas.user import ProfileResponse, RegisterResponse
from app.security import hash_password, verify_password
from app.services.file_service import IMAGE, PHOTO_FOLDER, FileService, StoredFile

logger = logging.getLogger(__name__)

# Profile fields captured at registration (besides email and password)
PROFILE_FIELDS = ("name", "phone", "dateOfBirth", "address", "gender")

# Never settable through PUT /profile/update
PROTECTED_FIELDS = {"_id", "id", "email", "password", "confirm_password", "password_hash", "newPassword"}


class UserService:
    """
    Stateless account operations; the session and file service are passed
    in per call.
    """

    async def _find_by_email(
        self, db: AsyncSession, email: str, for_update: bool = False
    ) -> Optional[User]:
        query = select(User).where(User.email == email)
        if for_update:
            query = query.with_for_update()
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error looking up user %s: %s", email, str(e))
            raise DatabaseError(
                message="Could not look up the user. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return result.scalar_one_or_none()

    async def register(
        self,
        db: AsyncSession,
        files: FileService,
        fields: Dict[str, Optional[str]],
        password: str,
        confirm_password: str,
        photo: Optional[UploadFile] = None,
    ) -> RegisterResponse:
        """
        Create a user account.

        Args:
            fields: email plus the PROFILE_FIELDS values from the form
            password / confirm_password: must be identical

        Raises:
            ValidationError: passwords differ, or email/password missing
            ConflictError:   a user with this email already exists
            DatabaseError:   the insert failed for another reason
        """
        if password != confirm_password:
            raise ValidationError(message="Passwords do not match!", field="confirm_password")

        email = (fields.get("email") or "").strip()
        if not email:
            raise ValidationError(message="Email is required", field="email")
        if not password:
            raise ValidationError(message="Password is required", field="password")

        if await self._find_by_email(db, email) is not None:
            raise ConflictError(message="User already exists!", context={"email": email})

        stored: Optional[StoredFile] = await files.save_upload(photo, PHOTO_FOLDER, IMAGE)

        profile: Dict[str, Any] = {key: fields.get(key) for key in PROFILE_FIELDS}
        profile["photoURL"] = stored.url if stored else None

        user = User(email=email, password_hash=hash_password(password), profile=profile)

        try:
            db.add(user)
            await db.flush()
        except IntegrityError:
            # Lost the race against a concurrent registration for this email
            await db.rollback()
            if stored:
                await files.cleanup_file(stored.absolute_path)
            raise ConflictError(message="User already exists!", context={"email": email})
        except SQLAlchemyError as e:
            if stored:
                await files.cleanup_file(stored.absolute_path)
            logger.error("Database error registering %s: %s", email, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not register the user. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("User registered: %s (id=%s)", email, user.id)
        return RegisterResponse(userId=str(user.id))

    async def get_profile(self, db: AsyncSession, email: Optional[str]) -> ProfileResponse:
        """
        Return the public projection of a user.

        Raises:
            ValidationError: email missing
            NotFoundError:   no such user
        """
        if not email:
            raise ValidationError(message="Email is required", field="email")

        logger.debug("Profile requested for %s", email)
        user = await self._find_by_email(db, email)
        if user is None:
            raise NotFoundError(resource="user", message="User not found")

        profile = user.profile or {}
        return ProfileResponse(
            name=profile.get("name"),
            email=user.email,
            photoURL=profile.get("photoURL") or None,
            phone=profile.get("phone"),
            address=profile.get("address"),
            gender=profile.get("gender"),
            dateOfBirth=profile.get("dateOfBirth"),
        )

    async def update_profile(
        self,
        db: AsyncSession,
        files: FileService,
        email: Optional[str],
        updates: Dict[str, Any],
        photo: Optional[UploadFile] = None,
    ) -> SuccessResponse:
        """
        Merge `updates` into the user's profile document.

        Identity and credential fields (PROTECTED_FIELDS) are dropped from
        the payload. A new photo replaces photoURL, and the previous file is
        deleted once the new reference has been written.

        Raises:
            ValidationError: email missing
            NotFoundError:   no such user
            NoChangesError:  every value already matches what is stored
        """
        if not email:
            raise ValidationError(message="Email is required", field="email")

        user = await self._find_by_email(db, email, for_update=True)
        if user is None:
            raise NotFoundError(resource="user", message="User not found")

        payload = {k: v for k, v in updates.items() if k not in PROTECTED_FIELDS}

        stored = await files.save_upload(photo, PHOTO_FOLDER, IMAGE)
        if stored:
            payload["photoURL"] = stored.url

        current = dict(user.profile or {})
        merged = {**current, **payload}
        if merged == current:
            raise NoChangesError()

        try:
            user.profile = merged
            await db.flush()
        except SQLAlchemyError as e:
            if stored:
                await files.cleanup_file(stored.absolute_path)
            logger.error("Database error updating profile %s: %s", email, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the profile. Please try again.",
                context={"error_type": type(e).__name__},
            )

        if stored:
            previous = files.path_for_url(current.get("photoURL"), PHOTO_FOLDER)
            if previous is not None and str(previous) != stored.absolute_path:
                await files.cleanup_file(str(previous))

        logger.info("Profile updated for %s: fields=%s", email, sorted(payload))
        return SuccessResponse(success=True, message="Profile updated")

    async def update_password(
        self, db: AsyncSession, email: str, new_password: str
    ) -> SuccessResponse:
        """
        Replace the stored password hash.

        Raises:
            NotFoundError:  no such user
            NoChangesError: the new password equals the current one
        """
        user = await self._find_by_email(db, email, for_update=True)
        if user is None:
            raise NotFoundError(resource="user", message="User not found")

        if verify_password(new_password, user.password_hash):
            raise NoChangesError(message="Password not updated: it matches the current password")

        try:
            user.password_hash = hash_password(new_password)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating password for %s: %s", email, str(e))
            raise DatabaseError(
                message="Could not update the password. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Password updated for %s", email)
        return SuccessResponse(success=True, message="Password updated")


user_service = UserService()
