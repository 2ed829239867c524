# services/prompt_composer.py
"""
Prompt framing for one agent turn.

compose() is pure: the same persona/topic/transcript/politeness/phase always
produces the same system instruction, user instruction and temperature.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from models.conversation_models import ConversationPhase, PolitenessLevel

BASE_TEMPERATURE = 0.7
TEMPERATURE_STEP = 0.05
LINES_PER_STEP = 2
MAX_TEMPERATURE = 0.9

TONE_PROMPTS = {
    PolitenessLevel.LOW: (
        "Be direct and assertive. Challenge your counterpart bluntly, point out weak reasoning "
        "without softening it, and do not waste words on pleasantries. "
        "Treat your counterpart's claims with suspicion until they are backed up."
    ),
    PolitenessLevel.MEDIUM: (
        "Keep a balanced tone: neither overly polite nor confrontational. "
        "Disagree plainly where you disagree and acknowledge good points where they are made. "
        "Give your counterpart's claims a fair hearing but test them before accepting them."
    ),
    PolitenessLevel.HIGH: (
        "Be respectful and courteous. Acknowledge your counterpart's points graciously before "
        "offering your own view, and phrase disagreement diplomatically. "
        "Assume good faith and take your counterpart's claims seriously."
    ),
}

PHASE_PROMPTS = {
    ConversationPhase.INTRODUCTION: (
        "This is the introduction. Briefly introduce yourself and your initial stance on the topic "
        "in a few sentences. Do not start arguing yet."
    ),
    ConversationPhase.CONVERSATION: (
        "This is the main discussion. Engage critically with what has been said so far: respond to "
        "the most recent points directly, question assumptions, and add new arguments or examples."
    ),
    ConversationPhase.CONCLUSION: (
        "This is the conclusion. Summarize the key points of the discussion and restate your final "
        "position clearly. Do not introduce new arguments."
    ),
}

CLOSING_RULES = [
    "Stay in character for the whole reply.",
    "Do NOT prefix your reply with any labels (no 'A1:' / 'A2:').",
    "Keep the reply focused on the topic.",
]


@dataclass(frozen=True)
class ComposedPrompt:
    system_instruction: str
    user_instruction: str
    temperature: float


def _as_politeness(value: Union[PolitenessLevel, str, None]) -> PolitenessLevel:
    try:
        return PolitenessLevel(value)
    except ValueError:
        return PolitenessLevel.MEDIUM


def _as_phase(value: Union[ConversationPhase, str, None]) -> ConversationPhase:
    try:
        return ConversationPhase(value)
    except ValueError:
        return ConversationPhase.CONVERSATION


def transcript_line_count(transcript: str) -> int:
    return sum(1 for line in (transcript or "").splitlines() if line.strip())


def temperature_for(transcript: str, base: float = BASE_TEMPERATURE) -> float:
    """Step temperature up as the transcript grows, capped at MAX_TEMPERATURE."""
    steps = transcript_line_count(transcript) // LINES_PER_STEP
    return round(min(max(base, MAX_TEMPERATURE), base + steps * TEMPERATURE_STEP), 2)


def build_system_instruction(
    persona: str,
    topic: str,
    politeness: PolitenessLevel,
    phase: ConversationPhase,
) -> str:
    rules = [
        f"You are {persona}. You are taking part in a conversation on '{topic}'.",
        TONE_PROMPTS[politeness],
        PHASE_PROMPTS[phase],
    ]
    rules.extend(CLOSING_RULES)
    return "\n".join(rules)


def build_user_instruction(topic: str, transcript: str, phase: ConversationPhase) -> str:
    if not (transcript or "").strip():
        return f"Open the discussion on {topic}."

    if phase == ConversationPhase.INTRODUCTION:
        task = "Introduce yourself and your initial stance, taking the introduction above into account."
    elif phase == ConversationPhase.CONCLUSION:
        task = "Give your closing statement: summarize the discussion and state your final stance."
    else:
        task = "Respond to the conversation so far, engaging with the latest points."
    return f"Conversation so far on {topic}:\n{transcript}\n\n{task}"


def compose(
    persona: str,
    topic: str,
    transcript: str,
    politeness: Union[PolitenessLevel, str, None],
    phase: Union[ConversationPhase, str, None],
    base_temperature: float = BASE_TEMPERATURE,
) -> ComposedPrompt:
    politeness = _as_politeness(politeness)
    phase = _as_phase(phase)
    return ComposedPrompt(
        system_instruction=build_system_instruction(persona, topic, politeness, phase),
        user_instruction=build_user_instruction(topic, transcript, phase),
        temperature=temperature_for(transcript, base_temperature),
    )
