"""FastAPI dependency providers for request-scoped services."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.services.annotations import AnnotationResolver, SqlFragmentStore
from app.services.chat import ChatService
from app.services.documents import DocumentService
from app.services.tutor import TutorService


def get_document_service(db: AsyncSession = Depends(get_db)) -> DocumentService:
    return DocumentService(db)


def get_annotation_resolver(db: AsyncSession = Depends(get_db)) -> AnnotationResolver:
    return AnnotationResolver(SqlFragmentStore(db))


def get_tutor_service(
    resolver: AnnotationResolver = Depends(get_annotation_resolver),
) -> TutorService:
    return TutorService(resolver)


def get_chat_service(
    db: AsyncSession = Depends(get_db),
    tutor: TutorService = Depends(get_tutor_service),
) -> ChatService:
    return ChatService(db, tutor)
