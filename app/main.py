from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional
import datetime
import json
import logging
import os
import secrets

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import Settings, load_settings
from app.context import AppContext, build_context
from app.errors import NetworkError
from app.models import ChatRequest, ChatResponse, ContentOut, Message, ScrapeRequest
from app.rag_core import answer_question
from app.seed import seed_initial_content
from app.session_manager import get_chat_history

STATIC_DIR = Path(__file__).parent / "static"

logger = logging.getLogger("audit_logger")


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def require_admin(
    x_admin_key: Optional[str] = Header(default=None),
    ctx: AppContext = Depends(get_context),
):
    if not x_admin_key or not secrets.compare_digest(
        x_admin_key.encode(), ctx.settings.admin_key.encode()
    ):
        raise HTTPException(status_code=403, detail="Forbidden: Admin access required")


def create_app(settings: Optional[Settings] = None, context: Optional[AppContext] = None) -> FastAPI:
    """
    Build the API. A prebuilt `context` is used as-is (tests); otherwise one is
    built from `settings` at startup and closed at shutdown.
    """
    if settings is None:
        settings = context.settings if context else load_settings()

    # Configure logging
    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        ctx = context or build_context(settings)
        if ctx.settings.seed_initial_content:
            seed_initial_content(ctx.storage)
        app.state.context = ctx
        try:
            yield
        finally:
            if context is None:
                ctx.close()

    app = FastAPI(
        title="Campus Assistant API",
        description="Campus information chatbot backed by scraped website content",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        # Browsers reject "*" with credentials
        allow_credentials=settings.cors_origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health_check():
        """Health check for the hosting platform"""
        return {"status": "healthy"}

    @app.post("/api/chat", response_model=ChatResponse, response_model_exclude_none=True)
    def chat(request: ChatRequest, ctx: AppContext = Depends(get_context)):
        try:
            result = answer_question(ctx, request.message, request.sessionId)
            audit_log = {
                "timestamp": datetime.datetime.utcnow().isoformat(),
                "session_id": result.sessionId,
                "user_query": request.message,
                "ai_answer": result.message.content,
                "sources": [s.url for s in result.message.sources or []],
                "status": "SUCCESS"
            }
            logger.info("AUDIT_LOG: %s", json.dumps(audit_log))
            return result
        except Exception as e:
            audit_log = {
                "timestamp": datetime.datetime.utcnow().isoformat(),
                "session_id": request.sessionId,
                "user_query": request.message,
                "error": str(e),
                "status": "ERROR"
            }
            logger.error("AUDIT_LOG: %s", json.dumps(audit_log))
            raise HTTPException(status_code=500, detail=str(e) or "Failed to process chat message")

    @app.get(
        "/api/history/{session_id}",
        response_model=List[Message],
        response_model_exclude_none=True,
    )
    def history(session_id: str, ctx: AppContext = Depends(get_context)):
        try:
            return get_chat_history(ctx.storage, session_id)
        except Exception as e:
            logger.error(f"Get history error: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e) or "Failed to get conversation history")

    # =========================
    # ADMIN ENDPOINTS
    # =========================

    @app.post("/api/scrape", response_model=ContentOut, dependencies=[Depends(require_admin)])
    def scrape(request: ScrapeRequest, ctx: AppContext = Depends(get_context)):
        try:
            result = ctx.scraper(request.url)
            saved = ctx.storage.save_content(result.url, result.title, result.content)
            logger.info("Stored content for %s", result.url)
            return ContentOut.from_record(saved)
        except NetworkError as e:
            logger.error(f"Scrape network error: {str(e)}")
            raise HTTPException(status_code=503, detail=str(e))
        except Exception as e:
            logger.error(f"Scrape error: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e) or "Failed to scrape page")

    @app.post("/api/scrape/refresh", response_model=ContentOut, dependencies=[Depends(require_admin)])
    def refresh(request: ScrapeRequest, ctx: AppContext = Depends(get_context)):
        if ctx.storage.get_content(request.url) is None:
            raise HTTPException(status_code=404, detail="URL not found in content library")

        try:
            result = ctx.scraper(request.url)
            updated = ctx.storage.save_content(request.url, result.title, result.content)
            logger.info("Refreshed content for %s", request.url)
            return ContentOut.from_record(updated)
        except NetworkError as e:
            logger.error(f"Refresh network error: {str(e)}")
            raise HTTPException(status_code=503, detail=str(e))
        except Exception as e:
            logger.error(f"Refresh error: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e) or "Failed to refresh page content")

    @app.get("/api/content", response_model=List[ContentOut], dependencies=[Depends(require_admin)])
    def list_content(ctx: AppContext = Depends(get_context)):
        try:
            return [ContentOut.from_record(c) for c in ctx.storage.list_content()]
        except Exception as e:
            logger.error(f"Get content error: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e) or "Failed to get content")

    if STATIC_DIR.is_dir():
        app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")

    return app


app = create_app()


# For local development
if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
