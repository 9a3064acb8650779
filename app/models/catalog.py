"""
LinguaHub Backend — Read-Only Catalog Models
==============================================

Bundles and FAQs are opaque documents: the API lists them verbatim and
never writes them. Content is loaded by migrations or by operators.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, DocumentJSON


class CatalogMixin:
    """Shared columns: UUID key, JSON payload, insertion timestamp."""

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    document: Mapped[Dict[str, Any]] = mapped_column(DocumentJSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def to_document(self) -> Dict[str, Any]:
        # Stored fields win over nothing; _id always reflects the row key
        return {**(self.document or {}), "_id": str(self.id)}


class Bundle(CatalogMixin, Base):
    __tablename__ = "bundles"


class Faq(CatalogMixin, Base):
    __tablename__ = "faqs"
