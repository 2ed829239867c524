# This file contains shared dependencies used across different routers.

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from services.conversation_engine import ConversationEngine
from services.orchestrator import ConversationOrchestrator
from utils.config import Settings, get_openai_async_client, get_settings


# One provider client per process, built on first use so the app can
# start (and be tested) without an API key.
@lru_cache(maxsize=1)
def get_engine() -> ConversationEngine:
    return ConversationEngine(get_openai_async_client(), model=get_settings().openai_model)


def get_orchestrator(
    db: Session = Depends(get_db),
    engine: ConversationEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
) -> ConversationOrchestrator:
    return ConversationOrchestrator(db, engine, settings)
