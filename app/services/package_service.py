"""
LinguaHub Backend — Package Service
=====================================

What:  Builds a course package from a multipart submission and appends it
       to the package document.
Why:   Questions may carry media (an image for image-based questions, an
       audio track for listening questions) that must be stored and linked
       before the package is saved.

File matching:
    Each media file is sent under a field name that names its question:

        questions          = '[{"id": "q1", "type": "reading", "subType": "image-based"}, ...]'
        image_q1           = <diagram.png>
        audio_q7           = <track.mp3>

    A question needs `image_<id>` when its subType is "image-based" and
    `audio_<id>` when its type is "listening"; a listening question that is
    also image-based needs both. Order of the parts does not matter.

Workflow (POST /add-package):
    1. Parse and validate `questions`; check every required file is present
    2. Lock the package document (404 if there is none yet)
    3. Store media under resources/<question type>/ and attach the URLs
    4. Append the package; on failure remove the files written in step 3
"""

import json
import logging
import re
import uuid
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from app.exceptions import DatabaseError, NotFoundError, ValidationError
from app.models.package import PackageDocument
from app.services.file_service import AUDIO, IMAGE, RESOURCE_FOLDER, FileService, StoredFile

logger = logging.getLogger(__name__)

IMAGE_BASED = "image-based"
LISTENING = "listening"

IMAGE_FIELD_PREFIX = "image_"
AUDIO_FIELD_PREFIX = "audio_"

_SAFE_FOLDER = re.compile(r"[^a-z0-9_-]")


def image_field(question_id: str) -> str:
    return f"{IMAGE_FIELD_PREFIX}{question_id}"


def audio_field(question_id: str) -> str:
    return f"{AUDIO_FIELD_PREFIX}{question_id}"


def _media_folder(question: Dict[str, Any]) -> str:
    """resources/<type>, with the type reduced to a safe folder name."""
    folder = _SAFE_FOLDER.sub("", str(question.get("type") or "").lower()) or "misc"
    return f"{RESOURCE_FOLDER}/{folder}"


class PackageService:

    def parse_questions(self, raw: Optional[str]) -> List[Dict[str, Any]]:
        """
        Decode the `questions` form field.

        Raises:
            ValidationError: missing, not JSON, not a list of objects, or a
                             question without a unique non-empty id
        """
        if raw is None or raw == "":
            raise ValidationError(message="questions is required", field="questions")

        try:
            questions = json.loads(raw)
        except (TypeError, ValueError):
            raise ValidationError(message="questions must be a JSON array", field="questions")

        if not isinstance(questions, list) or not all(isinstance(q, dict) for q in questions):
            raise ValidationError(
                message="questions must be a JSON array of objects", field="questions"
            )

        seen = set()
        for index, question in enumerate(questions):
            qid = question.get("id")
            if qid is None or str(qid) == "":
                raise ValidationError(
                    message=f"Question at position {index} has no id",
                    field="questions",
                    context={"index": index},
                )
            if str(qid) in seen:
                raise ValidationError(
                    message=f"Duplicate question id '{qid}'",
                    field="questions",
                    context={"question_id": str(qid)},
                )
            seen.add(str(qid))

        return questions

    def plan_media(
        self, questions: List[Dict[str, Any]], uploads: Mapping[str, UploadFile]
    ) -> List[Tuple[Dict[str, Any], str, str, UploadFile]]:
        """
        Pair each media-bearing question with its uploaded file.

        Returns (question, url_key, media_kind, upload) tuples.

        Raises:
            ValidationError: a required file field is missing
        """
        plan = []
        missing = []
        for question in questions:
            qid = str(question["id"])
            wanted = []
            if question.get("subType") == IMAGE_BASED:
                wanted.append((image_field(qid), "imageUrl", IMAGE))
            if question.get("type") == LISTENING:
                wanted.append((audio_field(qid), "audioUrl", AUDIO))

            for field, url_key, kind in wanted:
                upload = uploads.get(field)
                if upload is None or not upload.filename:
                    missing.append(field)
                else:
                    plan.append((question, url_key, kind, upload))

        if missing:
            raise ValidationError(
                message=f"Missing media files: {', '.join(missing)}",
                field="files",
                context={"missing": missing},
            )
        return plan

    async def add_package(
        self,
        db: AsyncSession,
        files: FileService,
        fields: Mapping[str, str],
        uploads: Mapping[str, UploadFile],
    ) -> Dict[str, Any]:
        """
        Validate, store media, and append a package.

        Args:
            fields:  scalar form fields; `questions` is required, the rest
                     (e.g. id, name) become package attributes
            uploads: file parts keyed by form field name

        Returns:
            The package object as stored.

        Raises:
            ValidationError: bad questions payload or missing media
            NotFoundError:   no package document exists to append to
            DatabaseError:   the append failed
        """
        questions = self.parse_questions(fields.get("questions"))
        plan = self.plan_media(questions, uploads)

        try:
            result = await db.execute(
                select(PackageDocument)
                .order_by(PackageDocument.created_at, PackageDocument.id)
                .limit(1)
                .with_for_update()
            )
            container = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error loading package document: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not load the package catalog. Please try again.",
                context={"error_type": type(e).__name__},
            )

        if container is None:
            raise NotFoundError(
                resource="package document",
                message="No package document exists to add the package to",
            )

        stored: List[StoredFile] = []
        try:
            for question, url_key, kind, upload in plan:
                saved = await files.save_upload(upload, _media_folder(question), kind)
                stored.append(saved)
                question[url_key] = saved.url

            package: Dict[str, Any] = {
                key: value
                for key, value in fields.items()
                if key != "questions"
            }
            package["id"] = str(package.get("id") or uuid.uuid4().hex)
            package["questions"] = questions

            container.packages = [*(container.packages or []), package]
            await db.flush()

        except SQLAlchemyError as e:
            for saved in stored:
                await files.cleanup_file(saved.absolute_path)
            logger.error("Database error appending package: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the package. Please try again.",
                context={"error_type": type(e).__name__},
            )
        except Exception:
            for saved in stored:
                await files.cleanup_file(saved.absolute_path)
            raise

        logger.info(
            "Package %s added with %d questions (%d media files)",
            package["id"],
            len(questions),
            len(stored),
        )
        return package


package_service = PackageService()
