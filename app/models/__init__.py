"""Models package - re-exports all models for convenient imports."""

from app.models.annotation import Annotation
from app.models.conversation import Conversation
from app.models.document import Document
from app.models.message import Message
from app.models.session import Session
from app.models.text_fragment import TextFragment
from app.models.user import User

__all__ = [
    "Annotation",
    "Conversation",
    "Document",
    "Message",
    "Session",
    "TextFragment",
    "User",
]
