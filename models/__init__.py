"""
The models package contains the SQLAlchemy ORM models for the
conversation backend.

For example:
from models import Conversation, Message
"""

from .conversation_models import (
    AgentType,
    Conversation,
    ConversationPhase,
    ConversationStatus,
    Message,
    PolitenessLevel,
)
