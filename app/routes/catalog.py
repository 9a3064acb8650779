"""
LinguaHub Backend — Catalog Route Handlers
============================================

What:  Full listings of packages, bundles and FAQs.
How:   Each returns the whole collection as a JSON array; there are no
       query parameters.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ErrorResponse
from app.services.catalog_service import catalog_service

router = APIRouter(tags=["Catalog"])

_ERRORS = {500: {"description": "Server error", "model": ErrorResponse}}


@router.get("/get-all-packages", responses=_ERRORS, summary="List all package documents")
async def get_all_packages(db: AsyncSession = Depends(get_db_session)) -> List[Dict[str, Any]]:
    return await catalog_service.list_packages(db)


@router.get("/get-all-bundles", responses=_ERRORS, summary="List all bundles")
async def get_all_bundles(db: AsyncSession = Depends(get_db_session)) -> List[Dict[str, Any]]:
    return await catalog_service.list_bundles(db)


@router.get("/get-faqs", responses=_ERRORS, summary="List all FAQs")
async def get_faqs(db: AsyncSession = Depends(get_db_session)) -> List[Dict[str, Any]]:
    return await catalog_service.list_faqs(db)
