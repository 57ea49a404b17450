"""
Blog Comments Backend - FastAPI Application Entry Point

Wires the comment service to MongoDB and the sensitive-word filter,
registers the comment router and handles startup/shutdown events.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from config import (
    CORS_ORIGINS, COMMENT_COLLECTION, SENSITIVE_WORDS_PATH,
    SENSITIVE_MASK_CHAR, SENSITIVE_MATCH_MODE,
)
from database import db, MongoGateway, create_indexes, close_connection
from routes.comments import comments_router
from services.comment_service import CommentService
from services.sensitive_filter import SensitiveFilter

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def build_comment_service(database=db) -> CommentService:
    return CommentService(
        MongoGateway(database),
        SensitiveFilter(SENSITIVE_WORDS_PATH),
        collection=COMMENT_COLLECTION,
        mask_char=SENSITIVE_MASK_CHAR,
        match_mode=SENSITIVE_MATCH_MODE,
    )


# ---------------------------------------------------------------------------
# Application lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting comment backend...")
    await create_indexes()
    app.state.comment_service = build_comment_service()
    logger.info("Comment backend is ready.")
    yield
    logger.info("Shutting down comment backend...")
    await close_connection()
    logger.info("Database connection closed.")


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Blog Comments API",
    description="Comment lifecycle, pagination and search for blog documents",
    version="1.0.0",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Register routers
# ---------------------------------------------------------------------------

app.include_router(comments_router)

# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "Blog Comments API", "version": "1.0.0"}


# ---------------------------------------------------------------------------
# Run with uvicorn
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001, log_level="info")
