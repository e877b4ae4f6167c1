"""Tutor chat endpoints for a document."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, Field, field_validator

from app.config import settings
from app.exceptions import DocumentNotFoundError, TutorServiceError
from app.middleware.rate_limit import rate_limit_chat
from app.models import Session as DbSession
from app.routes.auth import get_current_session
from app.routes.deps import get_chat_service, get_document_service
from app.services.chat import ChatService
from app.services.documents import DocumentService
from app.utils import parse_document_id

logger = logging.getLogger(__name__)

router = APIRouter()


class SendMessageRequest(BaseModel):
    message: str = Field(min_length=1, max_length=settings.max_chat_message_length)
    is_voice: bool = False

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message cannot be empty")
        return v


class AnnotationData(BaseModel):
    page_number: int
    x: float
    y: float
    width: float
    height: float
    type: str
    color: str
    source_text: str | None = None


class AssistantMessage(BaseModel):
    id: str
    content: str
    page_reference: int | None = None
    confidence: float
    timestamp: str


class SendMessageResponse(BaseModel):
    message: AssistantMessage
    annotations: list[AnnotationData]


class ChatMessageResponse(BaseModel):
    id: str
    role: str
    content: str
    metadata: dict | None = None
    created_at: str


class ChatHistoryResponse(BaseModel):
    messages: list[ChatMessageResponse]


@router.post("/{document_id}/send", response_model=SendMessageResponse)
@rate_limit_chat()
async def send_message(
    request: Request,
    response: Response,
    document_id: str,
    payload: SendMessageRequest,
    session: DbSession = Depends(get_current_session),
    documents: DocumentService = Depends(get_document_service),
    chat: ChatService = Depends(get_chat_service),
):
    """Ask the tutor a question about a document."""
    doc_uuid = parse_document_id(document_id)
    try:
        document = await documents.get_document(doc_uuid, session.user_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found") from None

    try:
        turn = await chat.send_message(
            document, session.user_id, payload.message, is_voice=payload.is_voice
        )
    except TutorServiceError as e:
        logger.error(f"Send message error: {e}")
        raise HTTPException(status_code=502, detail="Failed to send message") from None

    return SendMessageResponse(
        message=AssistantMessage(
            id=str(turn.message.id),
            content=turn.response.content,
            page_reference=turn.response.page_reference,
            confidence=turn.response.confidence,
            timestamp=turn.message.created_at.isoformat(),
        ),
        annotations=[AnnotationData(**a.to_dict()) for a in turn.response.annotations],
    )


@router.get("/{document_id}/messages", response_model=ChatHistoryResponse)
async def get_messages(
    document_id: str,
    session: DbSession = Depends(get_current_session),
    documents: DocumentService = Depends(get_document_service),
    chat: ChatService = Depends(get_chat_service),
):
    """Get the chat history for a document, oldest first."""
    doc_uuid = parse_document_id(document_id)
    try:
        await documents.get_document(doc_uuid, session.user_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found") from None

    messages = await chat.get_messages(doc_uuid, session.user_id)
    return ChatHistoryResponse(
        messages=[
            ChatMessageResponse(
                id=str(m.id),
                role=m.role,
                content=m.content,
                metadata=m.message_metadata,
                created_at=m.created_at.isoformat(),
            )
            for m in messages
        ]
    )


@router.delete("/{document_id}/messages")
async def delete_messages(
    document_id: str,
    session: DbSession = Depends(get_current_session),
    chat: ChatService = Depends(get_chat_service),
):
    """Clear the chat history for a document."""
    doc_uuid = parse_document_id(document_id)
    deleted = await chat.delete_conversation(doc_uuid, session.user_id)
    return {"status": "deleted" if deleted else "not_found"}
