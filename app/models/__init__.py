# Models package init
"""
LinguaHub Backend — Document Models
=====================================

One table per collection. Importing this package registers every model with
Base.metadata (used by Alembic and DocumentStore.create_schema()).
"""

from app.models.user import User
from app.models.package import PackageDocument
from app.models.catalog import Bundle, Faq
from app.models.exam_history import ExamHistory

__all__ = ["User", "PackageDocument", "Bundle", "Faq", "ExamHistory"]
