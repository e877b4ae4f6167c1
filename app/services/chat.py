"""Tutor chat: one conversation per document and user."""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.enums import MessageRole
from app.models import Conversation, Document, Message
from app.services.tutor import TutorResponse, TutorService

logger = logging.getLogger(__name__)


@dataclass
class ChatTurn:
    """The stored assistant message and the tutor response it came from."""

    message: Message
    response: TutorResponse


def truncate_string(value: str, max_length: int) -> str:
    return value[:max_length] if len(value) > max_length else value


class ChatService:
    """Persist chat messages and run tutor turns."""

    def __init__(self, db: AsyncSession, tutor: TutorService):
        self.db = db
        self.tutor = tutor

    async def find_conversation(
        self, document_id: uuid.UUID, user_id: uuid.UUID
    ) -> Conversation | None:
        result = await self.db.execute(
            select(Conversation).where(
                Conversation.document_id == document_id,
                Conversation.user_id == user_id,
            )
        )
        return result.scalars().first()

    async def find_or_create_conversation(
        self, document_id: uuid.UUID, user_id: uuid.UUID, title: str | None = None
    ) -> Conversation:
        conversation = await self.find_conversation(document_id, user_id)
        if conversation is None:
            conversation = Conversation(
                document_id=document_id,
                user_id=user_id,
                title=truncate_string(title, settings.max_conversation_title_length)
                if title
                else "New Chat Session",
            )
            self.db.add(conversation)
            await self.db.flush()
        return conversation

    async def get_recent_history(
        self, conversation_id: uuid.UUID, limit: int | None = None
    ) -> list[dict]:
        """Last `limit` messages as role/content dicts, oldest first."""
        result = await self.db.execute(
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.desc())
            .limit(limit or settings.chat_history_limit)
        )
        messages = list(result.scalars().all())
        messages.reverse()
        return [{"role": m.role, "content": m.content} for m in messages]

    async def send_message(
        self,
        document: Document,
        user_id: uuid.UUID,
        content: str,
        is_voice: bool = False,
    ) -> ChatTurn:
        """
        Run one tutor turn for a document.

        The user message is stored first; the assistant message is stored
        with the page reference, annotations and confidence as metadata.

        Raises:
            TutorServiceError: If the tutor cannot answer
        """
        conversation = await self.find_or_create_conversation(document.id, user_id, content)
        history = await self.get_recent_history(conversation.id)

        self.db.add(
            Message(conversation_id=conversation.id, role=MessageRole.USER, content=content)
        )
        # Keep the question even if the tutor call fails
        await self.db.commit()

        response = await self.tutor.generate_response(document, history, content)

        assistant_message = Message(
            conversation_id=conversation.id,
            role=MessageRole.ASSISTANT,
            content=response.content,
            message_metadata={
                "page_reference": response.page_reference,
                "annotations": [a.to_dict() for a in response.annotations],
                "confidence": response.confidence,
                "is_voice": is_voice,
            },
        )
        self.db.add(assistant_message)
        conversation.updated_at = datetime.now(UTC)
        await self.db.flush()

        logger.info(
            f"Tutor turn on document {document.id}: "
            f"{len(response.annotations)} annotations, page {response.page_reference}"
        )
        return ChatTurn(message=assistant_message, response=response)

    async def get_messages(self, document_id: uuid.UUID, user_id: uuid.UUID) -> list[Message]:
        """All messages of the document's conversation, oldest first."""
        conversation = await self.find_conversation(document_id, user_id)
        if conversation is None:
            return []

        result = await self.db.execute(
            select(Message)
            .where(Message.conversation_id == conversation.id)
            .order_by(Message.created_at)
        )
        return list(result.scalars().all())

    async def delete_conversation(self, document_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Delete the conversation and its messages. Returns False if none existed."""
        conversation = await self.find_conversation(document_id, user_id)
        if conversation is None:
            return False

        await self.db.delete(conversation)
        await self.db.flush()
        return True
