# services/turns.py
"""
Turn scheduling for a two-agent conversation.

Everything here is a pure function of the persisted message count and the
configured exchange count L. A conversation has 2 introduction messages,
2*L conversation messages and 2 conclusion messages; A1 always opens and
the agents alternate strictly.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from models.conversation_models import AgentType, ConversationPhase, PolitenessLevel

DEFAULT_CONVERSATION_LENGTH = 3
MIN_CONVERSATION_LENGTH = 1
MAX_CONVERSATION_LENGTH = 10

INTRODUCTION_MESSAGES = 2
CONCLUSION_MESSAGES = 2


@dataclass(frozen=True)
class TurnPlan:
    """What the next message of a conversation looks like."""
    position: int
    speaker: AgentType
    phase: ConversationPhase
    iteration_number: int
    is_ongoing: bool
    expected_total: int


def expected_total_messages(conversation_length: int) -> int:
    return INTRODUCTION_MESSAGES + 2 * conversation_length + CONCLUSION_MESSAGES


def _phase_start(phase: ConversationPhase, conversation_length: int) -> int:
    if phase == ConversationPhase.INTRODUCTION:
        return 1
    if phase == ConversationPhase.CONVERSATION:
        return INTRODUCTION_MESSAGES + 1
    return INTRODUCTION_MESSAGES + 2 * conversation_length + 1


def phase_for_position(position: int, conversation_length: int) -> ConversationPhase:
    """Phase of the 1-based message `position`."""
    total = expected_total_messages(conversation_length)
    if position < 1 or position > total:
        raise ValueError(f"position {position} outside 1..{total}")
    if position <= INTRODUCTION_MESSAGES:
        return ConversationPhase.INTRODUCTION
    if position <= INTRODUCTION_MESSAGES + 2 * conversation_length:
        return ConversationPhase.CONVERSATION
    return ConversationPhase.CONCLUSION


def speaker_for_position(position: int) -> AgentType:
    return AgentType.A1 if position % 2 == 1 else AgentType.A2


def plan_turn(message_count: int, conversation_length: int) -> TurnPlan:
    """
    Plan the message that follows `message_count` persisted messages.
    Raises ValueError when the conversation already has all its messages.
    """
    total = expected_total_messages(conversation_length)
    if message_count < 0 or message_count >= total:
        raise ValueError(
            f"no turn left: {message_count} of {total} messages already exist"
        )
    position = message_count + 1
    phase = phase_for_position(position, conversation_length)
    iteration = (position - _phase_start(phase, conversation_length)) // 2 + 1
    return TurnPlan(
        position=position,
        speaker=speaker_for_position(position),
        phase=phase,
        iteration_number=iteration,
        is_ongoing=position < total,
        expected_total=total,
    )


def normalize_politeness(value: Optional[Any]) -> PolitenessLevel:
    """Map free input onto a PolitenessLevel; anything unknown is medium."""
    if isinstance(value, PolitenessLevel):
        return value
    if isinstance(value, str):
        try:
            return PolitenessLevel(value.strip().lower())
        except ValueError:
            pass
    return PolitenessLevel.MEDIUM


def normalize_conversation_length(value: Optional[Any]) -> int:
    """Absent or non-integer input becomes the default; integers are clamped."""
    if value is None or isinstance(value, bool):
        return DEFAULT_CONVERSATION_LENGTH
    if isinstance(value, int):
        length = value
    elif isinstance(value, float) and value.is_integer():
        length = int(value)
    elif isinstance(value, str):
        try:
            length = int(value.strip())
        except ValueError:
            return DEFAULT_CONVERSATION_LENGTH
    else:
        return DEFAULT_CONVERSATION_LENGTH
    return max(MIN_CONVERSATION_LENGTH, min(MAX_CONVERSATION_LENGTH, length))


def format_transcript(messages: Iterable[Any]) -> str:
    """`{agent_type}: {content}` per message, joined by newlines."""
    lines = []
    for m in messages:
        agent = m.agent_type.value if isinstance(m.agent_type, AgentType) else str(m.agent_type)
        lines.append(f"{agent}: {m.content}")
    return "\n".join(lines)
