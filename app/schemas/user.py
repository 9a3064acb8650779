"""
LinguaHub Backend — User & Admin Schemas
==========================================

What:  API contracts for registration, profile, password and admin login.
Why:   Response models control exactly what leaves the server: the profile
       projection has no password field at all, so it can never leak.

Field names keep the camelCase the web client already sends and reads
(dateOfBirth, photoURL, newPassword, userId).
"""

from typing import Optional

from pydantic import BaseModel, Field


class RegisterResponse(BaseModel):
    """Returned by POST /register with HTTP 201."""
    message: str = Field(default="User registered successfully")
    userId: str = Field(description="Identifier of the new user")


class ProfileResponse(BaseModel):
    """
    Fixed public projection of a user, returned by GET /profile.

    photoURL is a URL path such as /uploads/1718000000000-me.jpg, or null.
    """
    name: Optional[str] = None
    email: str
    photoURL: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    gender: Optional[str] = None
    dateOfBirth: Optional[str] = None


class PasswordUpdateRequest(BaseModel):
    """Body of PUT /update-password. Both fields are required and non-empty."""
    email: str = Field(min_length=1)
    newPassword: str = Field(min_length=1)


class AdminLoginRequest(BaseModel):
    """Body of POST /admin/login."""
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class AdminLoginResponse(BaseModel):
    success: bool = True
