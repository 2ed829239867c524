# services/exporter.py
"""
Render a completed conversation in one of the export formats:
json, md (Markdown), txt (plain text) and xml.
"""
from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional

from models.conversation_models import AgentType, Conversation, ConversationPhase, Message
from schemas import ConversationExport, MessageExport
from services.errors import ValidationError

AGENT_LABELS = {AgentType.A1: "Agent 1", AgentType.A2: "Agent 2"}
PHASE_TITLES = {
    ConversationPhase.INTRODUCTION: "Introduction",
    ConversationPhase.CONVERSATION: "Conversation",
    ConversationPhase.CONCLUSION: "Conclusion",
}


@dataclass(frozen=True)
class ExportedDocument:
    content: str
    media_type: str
    extension: str


def _iso(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


def _ordered(conversation: Conversation) -> List[Message]:
    return sorted(conversation.messages, key=lambda m: (m.timestamp, m.position))


def render_markdown_transcript(conversation: Conversation) -> str:
    """`**A1:** content` per message, one per line."""
    return "\n".join(f"**{m.agent_type.value}:** {m.content}" for m in _ordered(conversation))


def to_json(conversation: Conversation) -> str:
    export = ConversationExport.model_validate(conversation)
    export.messages = [MessageExport.model_validate(m) for m in _ordered(conversation)]
    return export.model_dump_json(by_alias=True, indent=2)


def to_markdown(conversation: Conversation) -> str:
    lines = [
        "# AI Agent Conversation",
        "",
        f"- **Topic:** {conversation.topic}",
        f"- **Agent 1 (A1):** {conversation.agent1_personality}",
        f"- **Agent 2 (A2):** {conversation.agent2_personality}",
        f"- **Politeness:** {conversation.politeness_level.value}",
        f"- **Exchanges:** {conversation.conversation_length}",
        f"- **Started:** {_iso(conversation.start_time)}",
        f"- **Ended:** {_iso(conversation.end_time)}",
    ]
    current_phase = None
    for m in _ordered(conversation):
        if m.phase != current_phase:
            current_phase = m.phase
            lines += ["", f"## {PHASE_TITLES[m.phase]}", ""]
        lines.append(f"**{m.agent_type.value}:** {m.content}")
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def to_text(conversation: Conversation) -> str:
    lines = [
        "AI Agent Conversation",
        "======================",
        "",
        f"Topic: {conversation.topic}",
        f"Agent 1: {conversation.agent1_personality}",
        f"Agent 2: {conversation.agent2_personality}",
        f"Politeness: {conversation.politeness_level.value}",
        f"Exchanges: {conversation.conversation_length}",
        f"Started: {_iso(conversation.start_time)}",
        f"Ended: {_iso(conversation.end_time)}",
        "",
    ]
    for m in _ordered(conversation):
        lines.append(
            f"[{PHASE_TITLES[m.phase]}] {AGENT_LABELS[m.agent_type]} "
            f"(round {m.iteration_number}): {m.content}"
        )
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def to_xml(conversation: Conversation) -> str:
    root = ET.Element("conversation", id=conversation.id)
    for tag, value in (
        ("topic", conversation.topic),
        ("agent1Personality", conversation.agent1_personality),
        ("agent2Personality", conversation.agent2_personality),
        ("politenessLevel", conversation.politeness_level.value),
        ("conversationLength", str(conversation.conversation_length)),
        ("status", conversation.status.value),
        ("startTime", _iso(conversation.start_time)),
        ("endTime", _iso(conversation.end_time)),
    ):
        ET.SubElement(root, tag).text = value

    messages = ET.SubElement(root, "messages")
    for m in _ordered(conversation):
        node = ET.SubElement(
            messages,
            "message",
            agentType=m.agent_type.value,
            phase=m.phase.value,
            iterationNumber=str(m.iteration_number),
            timestamp=_iso(m.timestamp),
        )
        node.text = m.content

    ET.indent(root)
    return ET.tostring(root, encoding="unicode", xml_declaration=True) + "\n"


EXPORTERS: Dict[str, Callable[[Conversation], str]] = {
    "json": to_json,
    "md": to_markdown,
    "txt": to_text,
    "xml": to_xml,
}

MEDIA_TYPES = {
    "json": "application/json",
    "md": "text/markdown; charset=utf-8",
    "txt": "text/plain; charset=utf-8",
    "xml": "application/xml",
}


def export_conversation(conversation: Conversation, fmt: Optional[str]) -> ExportedDocument:
    key = (fmt or "").strip().lower()
    render = EXPORTERS.get(key)
    if render is None:
        raise ValidationError(
            f"Unsupported export format {fmt!r}; use one of: {', '.join(EXPORTERS)}"
        )
    return ExportedDocument(content=render(conversation), media_type=MEDIA_TYPES[key], extension=key)
