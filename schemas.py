# backend/schemas.py
# Request/response models for the conversation API. JSON field names are
# camelCase; Python attributes are snake_case.
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from models.conversation_models import (
    AgentType,
    ConversationPhase,
    ConversationStatus,
    PolitenessLevel,
)
from services.turns import normalize_conversation_length, normalize_politeness


class CamelModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# -------------------------
# Requests
# -------------------------
class InitConversationRequest(CamelModel):
    """Start a new conversation and generate the first message."""
    agent1_personality: str = Field(..., max_length=500)
    agent2_personality: str = Field(..., max_length=500)
    topic: str = Field(..., max_length=1000)
    politeness_level: PolitenessLevel = PolitenessLevel.MEDIUM
    conversation_length: int = 3

    @field_validator("agent1_personality", "agent2_personality", "topic", mode="before")
    @classmethod
    def _trim(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    # Lenient fields: bad input is normalized instead of rejected
    @field_validator("politeness_level", mode="before")
    @classmethod
    def _politeness(cls, v: Any) -> PolitenessLevel:
        return normalize_politeness(v)

    @field_validator("conversation_length", mode="before")
    @classmethod
    def _length(cls, v: Any) -> int:
        return normalize_conversation_length(v)


class FollowConversationRequest(CamelModel):
    """Generate the next message of an existing conversation."""
    conversation_id: str = Field(..., min_length=1)

    @field_validator("conversation_id", mode="before")
    @classmethod
    def _as_str(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


# -------------------------
# Responses
# -------------------------
class ConversationResponse(CamelModel):
    conversation_id: str
    message: str
    agent_type: AgentType
    iteration_number: int
    phase: ConversationPhase
    is_ongoing: bool
    total_messages: int
    expected_total_messages: int


class ConversationTranscriptResponse(CamelModel):
    conversation_id: str
    markdown: str
    agent1_personality: str
    agent2_personality: str
    topic: str
    politeness_level: PolitenessLevel
    conversation_length: int
    status: ConversationStatus
    message_count: int
    start_time: datetime
    end_time: Optional[datetime] = None


# -------------------------
# Export (ORM-backed)
# -------------------------
class MessageExport(CamelModel):
    """Mirror of models.conversation_models.Message for export."""
    agent_type: AgentType
    phase: ConversationPhase
    iteration_number: int
    content: str
    timestamp: datetime


class ConversationExport(CamelModel):
    """Mirror of models.conversation_models.Conversation including its messages."""
    conversation_id: str = Field(
        ...,
        validation_alias=AliasChoices("conversationId", "id"),
        serialization_alias="conversationId",
    )
    agent1_personality: str
    agent2_personality: str
    topic: str
    politeness_level: PolitenessLevel
    conversation_length: int
    status: ConversationStatus
    start_time: datetime
    end_time: Optional[datetime] = None
    messages: List[MessageExport] = Field(default_factory=list)
