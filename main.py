import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.config import settings
from app.database import init_db
from app.middleware import CSRFProtectionMiddleware, RequestSizeLimitMiddleware, limiter
from app.routes import auth, chat, documents, health
from app.services.anthropic import close_client as close_anthropic_client

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    await init_db()
    logger.info(f"PDF Tutor API started, storing uploads in {settings.upload_dir}")
    yield
    await close_anthropic_client()


app = FastAPI(
    title="PDF Tutor API",
    description="Upload PDFs, ask an AI tutor about them and get highlights on the page",
    version="0.1.0",
    lifespan=lifespan,
)

# slowapi reads the limiter from app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Middleware runs in reverse order of registration: CORS, CSRF, then size limit
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(CSRFProtectionMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(documents.router, prefix="/api/documents", tags=["documents"])
app.include_router(documents.uploads_router, prefix="/api/uploads", tags=["documents"])
app.include_router(chat.router, prefix="/api/chat", tags=["chat"])
app.include_router(health.router, prefix="/api/health", tags=["health"])
