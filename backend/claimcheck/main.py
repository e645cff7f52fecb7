import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from claimcheck.api.routes import router
from claimcheck.config import get_settings
from claimcheck.database import engine, Base

# Import models so SQLAlchemy knows about them when creating tables
from claimcheck.models.analysis import AnalysisRecord  # noqa: F401

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


# =============================================================================
# LIFESPAN: Startup and Shutdown Logic
# =============================================================================
#
# Everything BEFORE 'yield' runs once on startup, everything AFTER it once
# on shutdown.
#
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""

    # === STARTUP ===
    # create_all is a no-op for tables that already exist
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    # === SHUTDOWN ===
    await engine.dispose()


app = FastAPI(
    title="ClaimCheck",
    description="Claim verification and trust scoring for AI-generated text",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures server-side; never leak details to the client."""
    logger.exception(f"Unexpected error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Unexpected error"})


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
