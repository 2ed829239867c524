from __future__ import annotations

import argparse
import asyncio
import logging

from core.database import SessionLocal, init_db
from services.conversation_engine import ConversationEngine
from services.errors import ConversationError
from services.exporter import EXPORTERS, export_conversation
from services.orchestrator import ConversationOrchestrator
from utils.config import configure_logging, get_openai_async_client, get_settings

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run a full AI agent conversation from the command line")
    p.add_argument("--agent1", required=True, help="Personality of agent 1 (speaks first)")
    p.add_argument("--agent2", required=True, help="Personality of agent 2")
    p.add_argument("--topic", required=True, help="Conversation topic")
    p.add_argument("--politeness", default="medium", help="low | medium | high (unknown values become medium)")
    p.add_argument("--length", default="3", help="Number of exchanges in the conversation phase (1-10)")
    p.add_argument("--format", choices=sorted(EXPORTERS), default="md", help="Output format")
    return p.parse_args()


async def main() -> int:
    args = parse_args()
    settings = get_settings()
    configure_logging(settings.log_level)
    init_db()

    engine = ConversationEngine(get_openai_async_client(), model=settings.openai_model)
    with SessionLocal() as db:
        orchestrator = ConversationOrchestrator(db, engine, settings)
        try:
            conversation = await orchestrator.run_to_completion(
                args.agent1,
                args.agent2,
                args.topic,
                politeness_level=args.politeness,
                conversation_length=args.length,
            )
        except ConversationError as e:
            logger.error("Conversation failed: %s", e.message)
            return 1
        print(export_conversation(conversation, args.format).content)
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
