# ----------------------------------------------------------------------
# Conversation API router
# ----------------------------------------------------------------------
#   POST /init            start a conversation, returns the first message
#   POST /follow          generate the next message
#   GET  /{id}            completed transcript as markdown + metadata
#   GET  /{id}/export     completed transcript as json | md | txt | xml
#
# Errors are raised as services.errors exceptions; main.py maps them to
# JSON responses.

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

import schemas
from dependencies import get_orchestrator
from services.exporter import export_conversation, render_markdown_transcript
from services.orchestrator import ConversationOrchestrator, TurnResult

router = APIRouter()


def _turn_response(result: TurnResult) -> schemas.ConversationResponse:
    return schemas.ConversationResponse(
        conversation_id=result.conversation.id,
        message=result.message.content,
        agent_type=result.plan.speaker,
        iteration_number=result.plan.iteration_number,
        phase=result.plan.phase,
        is_ongoing=result.plan.is_ongoing,
        total_messages=result.total_messages,
        expected_total_messages=result.plan.expected_total,
    )


@router.post("/init", response_model=schemas.ConversationResponse, status_code=status.HTTP_200_OK)
async def init_conversation(
    req: schemas.InitConversationRequest,
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
):
    """Create a conversation and generate A1's introduction."""
    result = await orchestrator.start(
        req.agent1_personality,
        req.agent2_personality,
        req.topic,
        politeness_level=req.politeness_level,
        conversation_length=req.conversation_length,
    )
    return _turn_response(result)


@router.post("/follow", response_model=schemas.ConversationResponse, status_code=status.HTTP_200_OK)
async def follow_conversation(
    req: schemas.FollowConversationRequest,
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
):
    """Generate the next message; isOngoing=false marks the last one."""
    result = await orchestrator.advance(req.conversation_id)
    return _turn_response(result)


@router.get(
    "/{conversation_id}",
    response_model=schemas.ConversationTranscriptResponse,
    status_code=status.HTTP_200_OK,
)
def get_conversation(
    conversation_id: str,
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
):
    conversation = orchestrator.get(conversation_id)
    return schemas.ConversationTranscriptResponse(
        conversation_id=conversation.id,
        markdown=render_markdown_transcript(conversation),
        agent1_personality=conversation.agent1_personality,
        agent2_personality=conversation.agent2_personality,
        topic=conversation.topic,
        politeness_level=conversation.politeness_level,
        conversation_length=conversation.conversation_length,
        status=conversation.status,
        message_count=len(conversation.messages),
        start_time=conversation.start_time,
        end_time=conversation.end_time,
    )


@router.get("/{conversation_id}/export", status_code=status.HTTP_200_OK)
def export(
    conversation_id: str,
    format: str = Query("json"),
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
):
    conversation = orchestrator.get(conversation_id)
    document = export_conversation(conversation, format)
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={
            "Content-Disposition": (
                f'attachment; filename="conversation_{conversation.id}.{document.extension}"'
            )
        },
    )
