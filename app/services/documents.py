"""Document upload, persistence and retrieval."""

import asyncio
import logging
import re
import time
import uuid
from collections import Counter

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.enums import AnnotationType
from app.exceptions import DocumentNotFoundError, UploadValidationError
from app.models import Annotation, Document, TextFragment
from app.services.pdf import PDFExtractor, PositionedFragment
from app.services.storage import LocalFileStorage

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def generate_unique_filename(original_name: str) -> str:
    """Prefix a sanitized file name with the current time in milliseconds."""
    clean_name = _UNSAFE_FILENAME_CHARS.sub("_", original_name)
    return f"{int(time.time() * 1000)}-{clean_name}"


def validate_upload(content_type: str | None, size: int) -> None:
    """
    Check an upload's type and size before any processing.

    Raises:
        UploadValidationError: 400 for disallowed types or empty files,
            413 for files over the size limit
    """
    if content_type not in settings.allowed_mime_types:
        raise UploadValidationError(f"File type {content_type} is not allowed")
    if size <= 0:
        raise UploadValidationError("Uploaded file is empty")
    if size > settings.max_upload_size_bytes:
        raise UploadValidationError(
            f"File size exceeds maximum allowed size of {settings.max_upload_size_bytes} bytes",
            status_code=413,
        )


class DocumentService:
    """Upload PDFs and manage the documents a user owns."""

    def __init__(
        self,
        db: AsyncSession,
        extractor: PDFExtractor | None = None,
        storage: LocalFileStorage | None = None,
    ):
        self.db = db
        self.extractor = extractor or PDFExtractor()
        self.storage = storage or LocalFileStorage()

    async def process_upload(
        self,
        user_id: uuid.UUID,
        original_name: str,
        content_type: str | None,
        content: bytes,
    ) -> Document:
        """
        Validate, extract, store and persist an uploaded PDF.

        Extraction happens before anything is written, so a PDF that fails
        to decode leaves no file and no rows behind.

        Raises:
            UploadValidationError: If the file type or size is rejected
            ExtractionError: If the PDF cannot be decoded
        """
        validate_upload(content_type, len(content))

        # CPU-bound; keep it off the event loop
        result = await asyncio.to_thread(self.extractor.extract, content)

        filename = generate_unique_filename(original_name)
        await self.storage.save(filename, content)

        try:
            document = Document(
                user_id=user_id,
                filename=filename,
                original_name=original_name,
                file_url=f"{settings.public_file_url}/{filename}",
                mime_type=content_type,
                file_size=len(content),
                page_count=result.page_count,
                extracted_text=result.text.full_text[: settings.max_extracted_text_length],
            )
            self.db.add(document)
            await self.db.flush()

            await self._save_fragments(document.id, result.fragments)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            await self.storage.delete(filename)
            raise

        logger.info(
            f"Stored document {document.id} ({result.page_count} pages, "
            f"{len(result.fragments)} fragments)"
        )
        return document

    async def _save_fragments(
        self, document_id: uuid.UUID, fragments: list[PositionedFragment]
    ) -> None:
        """Insert fragments in batches, keeping their reading order."""
        if not fragments:
            return

        per_page = Counter(f.page_number for f in fragments)
        logger.debug(f"Text fragments per page: {dict(per_page)}")

        batch_size = settings.fragment_batch_size
        for start in range(0, len(fragments), batch_size):
            batch = fragments[start : start + batch_size]
            await self.db.execute(
                insert(TextFragment),
                [
                    {
                        "document_id": document_id,
                        "page_number": fragment.page_number,
                        "fragment_index": start + offset,
                        "text": fragment.text,
                        "x": fragment.x,
                        "y": fragment.y,
                        "width": fragment.width,
                        "height": fragment.height,
                    }
                    for offset, fragment in enumerate(batch)
                ],
            )
            logger.debug(f"Inserted fragment batch {start // batch_size + 1}: {len(batch)} items")

    async def list_documents(self, user_id: uuid.UUID) -> list[Document]:
        """List a user's documents, newest first."""
        result = await self.db.execute(
            select(Document)
            .where(Document.user_id == user_id)
            .order_by(Document.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_document(self, document_id: uuid.UUID, user_id: uuid.UUID) -> Document:
        """
        Get a document owned by the user.

        Raises:
            DocumentNotFoundError: If it does not exist or is not the user's
        """
        result = await self.db.execute(
            select(Document).where(Document.id == document_id, Document.user_id == user_id)
        )
        document = result.scalar_one_or_none()
        if document is None:
            raise DocumentNotFoundError("Document not found")
        return document

    async def rename_document(
        self, document_id: uuid.UUID, user_id: uuid.UUID, original_name: str
    ) -> Document:
        document = await self.get_document(document_id, user_id)
        document.original_name = original_name
        await self.db.flush()
        return document

    async def delete_document(self, document_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """Delete a document with its fragments, annotations and chats, then its file."""
        document = await self.get_document(document_id, user_id)
        filename = document.filename

        await self.db.delete(document)
        await self.db.commit()

        await self.storage.delete(filename)

    async def read_document_file(self, filename: str, user_id: uuid.UUID) -> bytes:
        """
        Read the stored PDF for a document the user owns.

        Raises:
            DocumentNotFoundError: If no such document belongs to the user,
                or its file is missing from storage
        """
        result = await self.db.execute(
            select(Document).where(Document.filename == filename, Document.user_id == user_id)
        )
        if result.scalar_one_or_none() is None:
            raise DocumentNotFoundError("Document not found or access denied")

        try:
            return await self.storage.read(filename)
        except FileNotFoundError:
            logger.error(f"Stored file missing for document file {filename}")
            raise DocumentNotFoundError("Document file not found") from None

    async def list_annotations(
        self, document_id: uuid.UUID, user_id: uuid.UUID
    ) -> list[Annotation]:
        """List saved annotations for a document, newest first."""
        await self.get_document(document_id, user_id)
        result = await self.db.execute(
            select(Annotation)
            .where(Annotation.document_id == document_id)
            .order_by(Annotation.created_at.desc())
        )
        return list(result.scalars().all())

    async def create_annotation(
        self,
        document_id: uuid.UUID,
        user_id: uuid.UUID,
        page_number: int,
        x: float,
        y: float,
        width: float,
        height: float,
        type: AnnotationType,
        color: str,
        text: str | None = None,
    ) -> Annotation:
        """
        Save an annotation the user confirmed.

        Raises:
            DocumentNotFoundError: If the document is not the user's
            ValueError: If the page is outside the document
        """
        document = await self.get_document(document_id, user_id)
        if page_number > document.page_count:
            raise ValueError(
                f"Page {page_number} is outside the document ({document.page_count} pages)"
            )

        annotation = Annotation(
            document_id=document_id,
            page_number=page_number,
            x=x,
            y=y,
            width=width,
            height=height,
            type=str(type),
            color=color,
            text=text,
        )
        self.db.add(annotation)
        await self.db.flush()
        logger.info(f"Annotation {annotation.id} created on document {document_id}")
        return annotation
