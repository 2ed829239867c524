# backend/main.py
"""
Main application file for the AI Agent Conversation API.
Sets up logging and CORS, maps service errors to JSON responses, wires the
conversation router, and exposes a simple /healthz endpoint.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.database import init_db
from routers import conversation
from services.errors import ConversationError
from utils.config import configure_logging, get_settings

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


def setup_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ConversationError)
    async def handle_conversation_error(request: Request, exc: ConversationError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "message": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "message": err.get("msg", "")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"error": "validation_error", "message": "Invalid input", "errors": errors},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "internal_error", "message": "Internal server error"},
        )


def create_app() -> FastAPI:
    # Create tables in dev (migration tool recommended for prod)
    init_db()

    app = FastAPI(
        title="AI Agent Conversation API",
        description="Orchestrates a phased conversation between two AI personas.",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_error_handlers(app)

    app.include_router(conversation.router, prefix="/api/conversation", tags=["conversation"])

    # Health for dev/proxy/lb checks
    @app.get("/healthz")
    async def healthz():
        return {"ok": True}

    logger.info("AI Agent Conversation API ready")
    return app


app = create_app()
