"""
LinguaHub Backend — Package Document Model
============================================

What:  The `packages` collection. In practice it holds a single container
       document whose `packages` list grows as admins add course packages.
How:   Appends replace the whole JSON list (new list object) so SQLAlchemy
       detects the change; the row is locked for the read-modify-write.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, DocumentJSON


class PackageDocument(Base):
    """Container of course packages; each package carries its questions."""

    __tablename__ = "package_documents"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    packages: Mapped[List[Dict[str, Any]]] = mapped_column(
        DocumentJSON,
        nullable=False,
        default=list,
        comment="Ordered list of package objects, each with a questions list",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def to_document(self) -> Dict[str, Any]:
        return {"_id": str(self.id), "packages": list(self.packages or [])}

    def __repr__(self) -> str:
        return f"<PackageDocument(id={self.id}, packages={len(self.packages or [])})>"
