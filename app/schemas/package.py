"""
LinguaHub Backend — Package Schemas
=====================================

The package submitted to POST /add-package is a multipart form, not a
model (see app/services/package_service.py); only the response is typed.
"""

from typing import Any, Dict

from pydantic import BaseModel, Field


class AddPackageResponse(BaseModel):
    """Returned by POST /add-package with the package exactly as stored."""
    success: bool = True
    message: str = Field(default="Package added successfully")
    package: Dict[str, Any]
