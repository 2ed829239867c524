# conversation_models.py
# Database structure for agent conversations.
# A Conversation owns its Messages; deleting it deletes them (ORM cascade
# plus ON DELETE CASCADE on the foreign key).

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Text, Enum, UniqueConstraint
)
from sqlalchemy.orm import relationship

from core.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class AgentType(str, enum.Enum):
    A1 = "A1"
    A2 = "A2"


class ConversationPhase(str, enum.Enum):
    INTRODUCTION = "introduction"
    CONVERSATION = "conversation"
    CONCLUSION = "conclusion"


class PolitenessLevel(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ConversationStatus(str, enum.Enum):
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


# --- Conversation Model ---
class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(String(36), primary_key=True, default=_new_id)

    agent1_personality = Column(String(500), nullable=False)
    agent2_personality = Column(String(500), nullable=False)
    topic = Column(String(1000), nullable=False)

    # L: number of back-and-forth exchanges in the conversation phase
    conversation_length = Column(Integer, nullable=False, default=3)

    politeness_level = Column(
        Enum(PolitenessLevel, values_callable=_enum_values, native_enum=False, length=10),
        nullable=False,
        default=PolitenessLevel.MEDIUM,
    )
    status = Column(
        Enum(ConversationStatus, values_callable=_enum_values, native_enum=False, length=20),
        nullable=False,
        default=ConversationStatus.IN_PROGRESS,
    )

    start_time = Column(DateTime, default=datetime.utcnow, nullable=False)
    end_time = Column(DateTime, nullable=True)

    # Ordered the same way transcripts are built
    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=lambda: [Message.timestamp, Message.position],
    )

    @property
    def is_completed(self) -> bool:
        return self.status == ConversationStatus.COMPLETED


# --- Message Model ---
class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (
        # One message per slot; a concurrent double-advance fails here
        UniqueConstraint("conversation_id", "position", name="uq_message_position"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)

    conversation_id = Column(
        String(36),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    agent_type = Column(
        Enum(AgentType, values_callable=_enum_values, native_enum=False, length=10),
        nullable=False,
    )
    phase = Column(
        Enum(ConversationPhase, values_callable=_enum_values, native_enum=False, length=20),
        nullable=False,
    )
    iteration_number = Column(Integer, nullable=False)

    # 1-based index of the message within its conversation
    position = Column(Integer, nullable=False)

    content = Column(Text, nullable=False, default="")

    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)

    conversation = relationship("Conversation", back_populates="messages")
