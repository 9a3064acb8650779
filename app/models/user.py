"""
LinguaHub Backend — User Model
================================

What:  ORM model for the `users` collection.
Why:   Email is the lookup key for every profile operation, so it is a real
       column with a unique index; the remaining profile fields live in a
       JSON document so profile updates can set arbitrary fields.
Who:   Used by UserService.

Table Design Rationale:
    - UUID primary key: exposed to clients as `userId` after registration
    - email (unique): the store rejects a duplicate insert even when two
      registrations pass the existence pre-check concurrently
    - password_hash: salted KDF output, never the plaintext password
    - profile: {name, phone, dateOfBirth, address, gender, photoURL, ...}
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, DocumentJSON


class User(Base):
    """
    A registered learner.

    Lifecycle:
        1. Created by POST /register
        2. Profile fields updated by PUT /profile/update
        3. Password hash replaced by PUT /update-password
        4. Never deleted
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
        index=True,
        comment="Login identity and lookup key; at most one user per email",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="passlib hash string (scheme + salt + digest)",
    )

    profile: Mapped[Dict[str, Any]] = mapped_column(
        DocumentJSON,
        nullable=False,
        default=dict,
        comment="Profile document: name, phone, dateOfBirth, address, gender, photoURL, ...",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
