"""Document upload, management, annotation and summary endpoints."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, Response, UploadFile
from pydantic import BaseModel, Field

from app.enums import AnnotationType
from app.exceptions import (
    DocumentNotFoundError,
    ExtractionError,
    TutorServiceError,
    UploadValidationError,
)
from app.middleware.rate_limit import rate_limit_upload
from app.models import Annotation, Document
from app.models import Session as DbSession
from app.routes.auth import get_current_session
from app.routes.deps import get_annotation_resolver, get_document_service, get_tutor_service
from app.services.annotations import DEFAULT_HIGHLIGHT_COLOR, AnnotationResolver
from app.services.documents import DocumentService, validate_upload
from app.services.tutor import TutorService
from app.utils import parse_document_id

logger = logging.getLogger(__name__)

router = APIRouter()
uploads_router = APIRouter()


class DocumentResponse(BaseModel):
    id: str
    filename: str
    original_name: str
    file_url: str
    mime_type: str
    file_size: int
    page_count: int
    created_at: str
    updated_at: str


class DocumentDetailResponse(DocumentResponse):
    extracted_text: str | None = None


class DocumentListResponse(BaseModel):
    documents: list[DocumentResponse]


class DocumentUpdate(BaseModel):
    original_name: str = Field(min_length=1, max_length=255)


class AnnotationCreate(BaseModel):
    page_number: int = Field(ge=1)
    x: float = Field(ge=0, le=1)
    y: float = Field(ge=0, le=1)
    width: float = Field(ge=0, le=1)
    height: float = Field(ge=0, le=1)
    type: AnnotationType = AnnotationType.HIGHLIGHT
    color: str = Field(default=DEFAULT_HIGHLIGHT_COLOR, min_length=1, max_length=64)
    text: str | None = None


class AnnotationResponse(BaseModel):
    id: str | None = None
    page_number: int
    x: float
    y: float
    width: float
    height: float
    type: str
    color: str
    text: str | None = None
    created_at: str | None = None


class AnnotationListResponse(BaseModel):
    annotations: list[AnnotationResponse]


class SuggestRequest(BaseModel):
    search_text: str = Field(min_length=1)
    page_number: int | None = Field(default=None, ge=1)
    response_text: str | None = None


class SummaryResponse(BaseModel):
    summary: str


def _document_fields(document: Document) -> dict:
    return {
        "id": str(document.id),
        "filename": document.filename,
        "original_name": document.original_name,
        "file_url": document.file_url,
        "mime_type": document.mime_type,
        "file_size": document.file_size,
        "page_count": document.page_count,
        "created_at": document.created_at.isoformat(),
        "updated_at": document.updated_at.isoformat(),
    }


def _annotation_response(annotation: Annotation) -> AnnotationResponse:
    return AnnotationResponse(
        id=str(annotation.id),
        page_number=annotation.page_number,
        x=annotation.x,
        y=annotation.y,
        width=annotation.width,
        height=annotation.height,
        type=annotation.type,
        color=annotation.color,
        text=annotation.text,
        created_at=annotation.created_at.isoformat() if annotation.created_at else None,
    )


@router.post("", response_model=DocumentDetailResponse, status_code=201)
@rate_limit_upload()
async def upload_document(
    request: Request,
    response: Response,
    file: UploadFile = File(...),
    session: DbSession = Depends(get_current_session),
    service: DocumentService = Depends(get_document_service),
):
    """Upload a PDF, extract its text and store it."""
    try:
        # Reject by declared size before reading the body into memory
        if file.size is not None:
            validate_upload(file.content_type, file.size)

        content = await file.read()
        document = await service.process_upload(
            user_id=session.user_id,
            original_name=file.filename or "document.pdf",
            content_type=file.content_type,
            content=content,
        )
    except UploadValidationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from None
    except ExtractionError as e:
        logger.warning(f"Upload rejected, PDF could not be processed: {e}")
        raise HTTPException(status_code=422, detail="Could not process PDF") from None

    return DocumentDetailResponse(
        **_document_fields(document), extracted_text=document.extracted_text
    )


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    session: DbSession = Depends(get_current_session),
    service: DocumentService = Depends(get_document_service),
):
    """List the current user's documents, newest first."""
    documents = await service.list_documents(session.user_id)
    return DocumentListResponse(
        documents=[DocumentResponse(**_document_fields(d)) for d in documents]
    )


@router.get("/{document_id}", response_model=DocumentDetailResponse)
async def get_document(
    document_id: str,
    session: DbSession = Depends(get_current_session),
    service: DocumentService = Depends(get_document_service),
):
    """Get a document with its extracted text."""
    doc_uuid = parse_document_id(document_id)
    try:
        document = await service.get_document(doc_uuid, session.user_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found") from None

    return DocumentDetailResponse(
        **_document_fields(document), extracted_text=document.extracted_text
    )


@router.patch("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: str,
    update: DocumentUpdate,
    session: DbSession = Depends(get_current_session),
    service: DocumentService = Depends(get_document_service),
):
    """Rename a document."""
    doc_uuid = parse_document_id(document_id)
    try:
        document = await service.rename_document(doc_uuid, session.user_id, update.original_name)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found") from None

    return DocumentResponse(**_document_fields(document))


@router.delete("/{document_id}")
async def delete_document(
    document_id: str,
    session: DbSession = Depends(get_current_session),
    service: DocumentService = Depends(get_document_service),
):
    """Delete a document, its extracted data, chats and stored file."""
    doc_uuid = parse_document_id(document_id)
    try:
        await service.delete_document(doc_uuid, session.user_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found") from None

    return {"status": "deleted"}


@router.get("/{document_id}/annotations", response_model=AnnotationListResponse)
async def list_annotations(
    document_id: str,
    session: DbSession = Depends(get_current_session),
    service: DocumentService = Depends(get_document_service),
):
    """List annotations the user saved on a document."""
    doc_uuid = parse_document_id(document_id)
    try:
        annotations = await service.list_annotations(doc_uuid, session.user_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found") from None

    return AnnotationListResponse(annotations=[_annotation_response(a) for a in annotations])


@router.post("/{document_id}/annotations", response_model=AnnotationResponse, status_code=201)
async def create_annotation(
    document_id: str,
    payload: AnnotationCreate,
    session: DbSession = Depends(get_current_session),
    service: DocumentService = Depends(get_document_service),
):
    """Save an annotation, typically a suggested highlight the user confirmed."""
    doc_uuid = parse_document_id(document_id)
    try:
        annotation = await service.create_annotation(
            doc_uuid, session.user_id, **payload.model_dump()
        )
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found") from None
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None

    return _annotation_response(annotation)


@router.post("/{document_id}/annotations/suggest", response_model=AnnotationListResponse)
async def suggest_annotations(
    document_id: str,
    payload: SuggestRequest,
    session: DbSession = Depends(get_current_session),
    service: DocumentService = Depends(get_document_service),
    resolver: AnnotationResolver = Depends(get_annotation_resolver),
):
    """Find highlight rectangles for a phrase. Returns an empty list on no match."""
    doc_uuid = parse_document_id(document_id)
    try:
        await service.get_document(doc_uuid, session.user_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found") from None

    annotations = await resolver.resolve(
        doc_uuid,
        payload.search_text,
        page_number=payload.page_number,
        response_text=payload.response_text,
    )
    return AnnotationListResponse(
        annotations=[
            AnnotationResponse(
                page_number=a.page_number,
                x=a.x,
                y=a.y,
                width=a.width,
                height=a.height,
                type=str(a.type),
                color=a.color,
                text=a.source_text,
            )
            for a in annotations
        ]
    )


@router.get("/{document_id}/summary", response_model=SummaryResponse)
async def summarize_document(
    document_id: str,
    session: DbSession = Depends(get_current_session),
    service: DocumentService = Depends(get_document_service),
    tutor: TutorService = Depends(get_tutor_service),
):
    """Summarize a document with the tutor model."""
    doc_uuid = parse_document_id(document_id)
    try:
        document = await service.get_document(doc_uuid, session.user_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found") from None

    try:
        summary = await tutor.summarize_document(document)
    except TutorServiceError:
        raise HTTPException(status_code=502, detail="Failed to summarize document") from None

    return SummaryResponse(summary=summary)


@uploads_router.get("/{filename}")
async def download_document_file(
    filename: str,
    session: DbSession = Depends(get_current_session),
    service: DocumentService = Depends(get_document_service),
):
    """Serve the stored PDF for viewing in the browser."""
    try:
        content = await service.read_document_file(filename, session.user_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found") from None

    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )
