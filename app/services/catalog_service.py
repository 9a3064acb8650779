"""
LinguaHub Backend — Catalog Service
=====================================

What:  Full listings of the package, bundle and FAQ collections.
How:   One SELECT per call, ordered by insertion time; no pagination,
       filtering or sorting options. Every stored document is returned.
"""

import logging
from typing import Any, Dict, List, Type

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError
from app.models.catalog import Bundle, Faq
from app.models.package import PackageDocument

logger = logging.getLogger(__name__)


class CatalogService:

    async def _list(self, db: AsyncSession, model: Type[Any], collection: str) -> List[Dict[str, Any]]:
        try:
            result = await db.execute(select(model).order_by(model.created_at, model.id))
            documents = [row.to_document() for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing %s: %s", collection, str(e), exc_info=True)
            raise DatabaseError(
                message=f"Could not retrieve {collection}. Please try again.",
                context={"collection": collection, "error_type": type(e).__name__},
            )

        logger.debug("Listed %d %s", len(documents), collection)
        return documents

    async def list_packages(self, db: AsyncSession) -> List[Dict[str, Any]]:
        return await self._list(db, PackageDocument, "packages")

    async def list_bundles(self, db: AsyncSession) -> List[Dict[str, Any]]:
        return await self._list(db, Bundle, "bundles")

    async def list_faqs(self, db: AsyncSession) -> List[Dict[str, Any]]:
        return await self._list(db, Faq, "faqs")


catalog_service = CatalogService()
