# services/orchestrator.py
"""
Conversation orchestration: start a conversation, advance it one message at
a time, and read it back once it is completed.

Each operation is one unit of work against the database session it was
given. The provider is called before anything is staged, so a generation
failure leaves no trace, and a new message is committed together with the
completion flip when it is the last one.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from crud import conversationDB as crud_conversation
from models.conversation_models import (
    AgentType,
    Conversation,
    ConversationPhase,
    ConversationStatus,
    Message,
)
from services.conversation_engine import ConversationEngine
from services.errors import ConflictError, NotFoundError, ValidationError
from services.locks import ConversationLocks, conversation_locks
from services.prompt_composer import compose
from services.turns import (
    TurnPlan,
    format_transcript,
    normalize_conversation_length,
    normalize_politeness,
    plan_turn,
)
from utils.config import Settings

logger = logging.getLogger(__name__)

MAX_PERSONALITY_LENGTH = 500
MAX_TOPIC_LENGTH = 1000


@dataclass
class TurnResult:
    conversation: Conversation
    message: Message
    plan: TurnPlan

    @property
    def total_messages(self) -> int:
        return self.plan.position


def _required_text(value: Optional[str], field: str, max_length: int) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{field} is required")
    if len(text) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return text


class ConversationOrchestrator:
    def __init__(
        self,
        db: Session,
        engine: ConversationEngine,
        settings: Settings,
        locks: Optional[ConversationLocks] = None,
    ):
        self.db = db
        self.engine = engine
        self.settings = settings
        self.locks = locks or conversation_locks

    async def _generate(self, persona: str, conversation: Conversation, transcript: str, phase: ConversationPhase) -> str:
        prompt = compose(
            persona,
            conversation.topic,
            transcript,
            conversation.politeness_level,
            phase,
            base_temperature=self.settings.base_temperature,
        )
        return await self.engine.generate(
            prompt.system_instruction,
            prompt.user_instruction,
            max_tokens=self.settings.max_tokens,
            temperature=prompt.temperature,
        )

    async def start(
        self,
        agent1_personality: Optional[str],
        agent2_personality: Optional[str],
        topic: Optional[str],
        politeness_level=None,
        conversation_length=None,
    ) -> TurnResult:
        conversation = Conversation(
            agent1_personality=_required_text(agent1_personality, "agent1Personality", MAX_PERSONALITY_LENGTH),
            agent2_personality=_required_text(agent2_personality, "agent2Personality", MAX_PERSONALITY_LENGTH),
            topic=_required_text(topic, "topic", MAX_TOPIC_LENGTH),
            politeness_level=normalize_politeness(politeness_level),
            conversation_length=normalize_conversation_length(conversation_length),
            status=ConversationStatus.IN_PROGRESS,
            start_time=datetime.utcnow(),
        )

        plan = plan_turn(0, conversation.conversation_length)
        content = await self._generate(conversation.agent1_personality, conversation, "", plan.phase)

        message = Message(
            agent_type=plan.speaker,
            phase=plan.phase,
            iteration_number=plan.iteration_number,
            position=plan.position,
            content=content,
            timestamp=datetime.utcnow(),
        )
        try:
            crud_conversation.add_conversation(self.db, conversation, message)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(conversation)

        logger.info(
            "Conversation %s initialized with first message from %s (%d messages expected)",
            conversation.id, plan.speaker.value, plan.expected_total,
        )
        return TurnResult(conversation=conversation, message=message, plan=plan)

    async def advance(self, conversation_id: str) -> TurnResult:
        async with self.locks.hold(conversation_id):
            return await self._advance(conversation_id)

    async def _advance(self, conversation_id: str) -> TurnResult:
        conversation = crud_conversation.get_conversation(self.db, conversation_id)
        if conversation is None:
            raise NotFoundError()
        if conversation.is_completed:
            raise ConflictError()

        message_count = crud_conversation.count_messages(self.db, conversation.id)
        try:
            plan = plan_turn(message_count, conversation.conversation_length)
        except ValueError:
            # Every slot is filled but the status never flipped
            raise ConflictError()

        persona = (
            conversation.agent1_personality
            if plan.speaker == AgentType.A1
            else conversation.agent2_personality
        )
        history = crud_conversation.list_messages(self.db, conversation.id)
        content = await self._generate(persona, conversation, format_transcript(history), plan.phase)

        message = Message(
            agent_type=plan.speaker,
            phase=plan.phase,
            iteration_number=plan.iteration_number,
            position=plan.position,
            content=content,
            timestamp=datetime.utcnow(),
        )
        try:
            crud_conversation.append_message(self.db, conversation, message, completes=not plan.is_ongoing)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(
                "Message %d of conversation %s was written concurrently", plan.position, conversation_id
            )
            raise ConflictError("Conversation was advanced concurrently")
        except Exception:
            self.db.rollback()
            raise

        if not plan.is_ongoing:
            logger.info("Conversation %s completed", conversation.id)
        logger.info(
            "Added message %d (%s, %s) to conversation %s",
            plan.position, plan.speaker.value, plan.phase.value, conversation.id,
        )
        return TurnResult(conversation=conversation, message=message, plan=plan)

    def get(self, conversation_id: str) -> Conversation:
        """Return a completed conversation; anything else reads as not found."""
        conversation = crud_conversation.get_conversation(self.db, conversation_id)
        if conversation is None:
            raise NotFoundError()
        if not conversation.is_completed:
            raise NotFoundError("Conversation not completed")
        logger.info("Retrieved completed conversation %s", conversation_id)
        return conversation

    async def run_to_completion(
        self,
        agent1_personality: str,
        agent2_personality: str,
        topic: str,
        politeness_level=None,
        conversation_length=None,
    ) -> Conversation:
        """Start a conversation and keep advancing it until it completes."""
        result = await self.start(
            agent1_personality, agent2_personality, topic,
            politeness_level=politeness_level,
            conversation_length=conversation_length,
        )
        while result.plan.is_ongoing:
            result = await self.advance(result.conversation.id)
        return self.get(result.conversation.id)
