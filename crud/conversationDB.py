# CRUD OPS

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from models.conversation_models import Conversation, ConversationStatus, Message


# Fetch a conversation with its messages loaded, or None.
def get_conversation(db: Session, conversation_id: str) -> Optional[Conversation]:
    return (
        db.query(Conversation)
        .options(selectinload(Conversation.messages))
        .filter(Conversation.id == conversation_id)
        .first()
    )


def count_messages(db: Session, conversation_id: str) -> int:
    return db.scalar(
        select(func.count(Message.id)).where(Message.conversation_id == conversation_id)
    ) or 0


def list_messages(db: Session, conversation_id: str) -> List[Message]:
    return (
        db.query(Message)
        .filter(Message.conversation_id == conversation_id)
        .order_by(Message.timestamp.asc(), Message.position.asc())
        .all()
    )


# Stage a new conversation together with its opening message; the caller commits.
def add_conversation(db: Session, conversation: Conversation, first_message: Message) -> Conversation:
    conversation.messages.append(first_message)
    db.add(conversation)
    return conversation


# Stage a message and, when it is the last one, the completion flip; the caller commits.
def append_message(db: Session, conversation: Conversation, message: Message, completes: bool) -> Message:
    conversation.messages.append(message)
    if completes:
        conversation.status = ConversationStatus.COMPLETED
        conversation.end_time = datetime.utcnow()
    return message

