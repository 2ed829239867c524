"""Tests for transcript rendering and export formats."""

import json
import xml.etree.ElementTree as ET

import pytest

from schemas import ConversationExport
from services.errors import ValidationError
from services.exporter import export_conversation, render_markdown_transcript


@pytest.fixture
async def completed(orchestrator):
    return await orchestrator.run_to_completion(
        "Logical analyst", "Creative poet", "Climate change", politeness_level="low", conversation_length=2
    )


class TestExporter:
    async def test_markdown_transcript(self, completed) -> None:
        lines = render_markdown_transcript(completed).split("\n")

        assert len(lines) == 8
        assert lines[0] == "**A1:** reply 1"
        assert lines[1] == "**A2:** reply 2"

    async def test_json_round_trip_preserves_messages(self, completed) -> None:
        document = export_conversation(completed, "json")
        parsed = ConversationExport.model_validate_json(document.content)

        assert document.media_type == "application/json"
        assert parsed.conversation_id == completed.id
        assert [
            (m.agent_type, m.phase, m.iteration_number, m.content, m.timestamp) for m in parsed.messages
        ] == [
            (m.agent_type, m.phase, m.iteration_number, m.content, m.timestamp) for m in completed.messages
        ]

    async def test_json_uses_camel_case(self, completed) -> None:
        data = json.loads(export_conversation(completed, "JSON").content)

        assert data["conversationId"] == completed.id
        assert data["politenessLevel"] == "low"
        assert data["status"] == "Completed"
        assert data["messages"][0]["agentType"] == "A1"
        assert data["messages"][0]["iterationNumber"] == 1
        assert data["messages"][0]["phase"] == "introduction"

    async def test_markdown_groups_by_phase(self, completed) -> None:
        document = export_conversation(completed, "md")
        content = document.content

        assert document.extension == "md"
        assert content.startswith("# AI Agent Conversation")
        assert content.index("## Introduction") < content.index("## Conversation") < content.index("## Conclusion")
        assert "**A2:** reply 8" in content

    async def test_text_lists_every_message(self, completed) -> None:
        content = export_conversation(completed, "txt").content

        assert "Topic: Climate change" in content
        assert "[Introduction] Agent 1 (round 1): reply 1" in content
        assert "[Conversation] Agent 2 (round 2): reply 6" in content
        assert "[Conclusion] Agent 2 (round 1): reply 8" in content

    async def test_xml_is_well_formed(self, completed) -> None:
        document = export_conversation(completed, "xml")
        root = ET.fromstring(document.content.split("\n", 1)[1])

        assert document.media_type == "application/xml"
        assert root.tag == "conversation"
        assert root.get("id") == completed.id
        assert root.findtext("topic") == "Climate change"
        messages = root.find("messages").findall("message")
        assert [m.text for m in messages] == [f"reply {i}" for i in range(1, 9)]
        assert messages[2].get("phase") == "conversation"
        assert messages[2].get("agentType") == "A1"

    async def test_unsupported_format(self, completed) -> None:
        with pytest.raises(ValidationError):
            export_conversation(completed, "pdf")
