from contextlib import asynccontextmanager
from pathlib import Path
from typing import List
import logging

from fastapi import FastAPI, HTTPException, Request, APIRouter, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from chatrelay.config import (
    CHAT_MODEL, CORS_ORIGINS, GROQ_API_KEY, HOST, LOG_LEVEL, PORT,
)
from chatrelay.database import make_engine, create_db_and_tables
from chatrelay.exceptions import StorageError, ValidationError
from chatrelay.models import ChatRequest, ChatResponse, ClearResponse, ErrorResponse, MessageRead
from chatrelay.provider import CompletionClient, Configured, resolve_provider_config
from chatrelay.relay import RelayService
from chatrelay.store import HistoryStore

# Configure logging
logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s %(levelname)s %(message)s')
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"

router = APIRouter()  ## chat API, mounted under /api


def get_relay(request: Request) -> RelayService:
    return request.app.state.relay


@router.get("/history", response_model=List[MessageRead])
def get_history(relay: RelayService = Depends(get_relay)):
    logger.info("History requested")
    try:
        messages = relay.history()
    except StorageError as e:
        logger.error(f"Error fetching history: {e.__cause__}")
        raise HTTPException(status_code=500, detail="Failed to fetch chat history")
    return [MessageRead.model_validate(m) for m in messages]


@router.post("/chat", response_model=ChatResponse)
def chat(request: ChatRequest, relay: RelayService = Depends(get_relay)):
    logger.info(f"Chat request: message_len={len(request.message or '')}")
    try:
        exchange = relay.submit(request.message)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        logger.error(f"Error processing chat: {e.__cause__}")
        raise HTTPException(status_code=500, detail="Failed to process message")
    return ChatResponse(
        user_message=MessageRead.model_validate(exchange.user_message),
        ai_message=MessageRead.model_validate(exchange.ai_message),
    )


@router.delete("/history", response_model=ClearResponse)
def clear_history(relay: RelayService = Depends(get_relay)):
    logger.info("Clear history requested")
    try:
        deleted = relay.clear()
    except StorageError as e:
        logger.error(f"Error clearing history: {e.__cause__}")
        raise HTTPException(status_code=500, detail="Failed to clear history")
    return ClearResponse(message="Chat history cleared", deleted=deleted)


def create_app(engine=None, provider_config=None, client=None) -> FastAPI:
    """Build the FastAPI app around an explicitly constructed store and relay.

    Tests pass an in-memory engine and a stub client; production uses the
    environment defaults from chatrelay.config.
    """
    engine = engine or make_engine()
    if provider_config is None:
        provider_config = resolve_provider_config(GROQ_API_KEY)
    if client is None and isinstance(provider_config, Configured):
        client = CompletionClient(provider_config)
    store = HistoryStore(engine)
    relay = RelayService(store, provider_config, client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        create_db_and_tables(engine)
        logger.info(f"Database initialized at {engine.url}")
        if relay.configured:
            logger.info(f"Completion provider configured (model={provider_config.model})")
        else:
            logger.warning("GROQ_API_KEY is not set; replies will be a placeholder message")
        yield
        engine.dispose()

    app = FastAPI(title="Chat Relay", version="0.1.0", lifespan=lifespan)
    app.state.store = store
    app.state.relay = relay

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content=ErrorResponse(error=str(exc.detail)).model_dump())

    @app.exception_handler(RequestValidationError)
    async def body_error(request: Request, exc: RequestValidationError):
        logger.warning(f"Invalid request body: {exc.errors()}")
        return JSONResponse(status_code=400, content=ErrorResponse(error="Invalid request body").model_dump())

    @app.get("/healthz")
    def health():
        try:
            count = store.count()
        except StorageError:
            raise HTTPException(status_code=500, detail="Database unavailable")
        return {
            "ok": True,
            "messages": count,
            "model": provider_config.model if relay.configured else CHAT_MODEL,
            "provider": "configured" if relay.configured else "unconfigured",
        }

    @app.get("/")
    def chat_ui():
        return FileResponse(STATIC_DIR / "index.html")

    app.include_router(router, prefix="/api")
    return app


app = create_app()


def run():
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    run()
