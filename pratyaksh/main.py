"""
Pratyaksh API — Application entry point.

Bootstraps FastAPI, wires up middleware, registers route groups and logs the
API-key configuration at startup.

Extension points:
  - Add new route groups with app.include_router() below
  - Add new middleware in the middleware block
  - Change startup behaviour in the lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from pratyaksh.core.config import settings
from pratyaksh.core.rate_limit import limiter
from pratyaksh.routes.admin import router as admin_router
from pratyaksh.routes.analyze import router as analyze_router
from pratyaksh.routes.health import VERSION
from pratyaksh.routes.health import router as health_router
from pratyaksh.routes.upload import router as upload_router
from pratyaksh.services.key_storage import log_environment_status

# ─── Logging ───────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
# httpx logs full request URLs at INFO, and Gemini keys travel in the query string
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


# ─── Lifespan ──────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Pratyaksh API (env: %s)", settings.environment)
    log_environment_status()
    yield
    logger.info("Shutting down Pratyaksh API")


# ─── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="Pratyaksh API",
    description=(
        "Deepfake authenticity scoring for images, video and audio. "
        "Scores come from a third-party AI model and are probabilistic, not guaranteed."
    ),
    version=VERSION,
    lifespan=lifespan,
    # Disable docs in production to reduce attack surface
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)


# ─── Rate limiting ─────────────────────────────────────────────────────────────
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ─── Middleware ─────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Routes ────────────────────────────────────────────────────────────────────
app.include_router(health_router, prefix="/health", tags=["health"])
app.include_router(upload_router)
app.include_router(analyze_router)
app.include_router(admin_router)


@app.get("/", tags=["root"])
async def root():
    """API root — basic metadata."""
    return {
        "name": "Pratyaksh API",
        "version": VERSION,
        "status": "running",
        "environment": settings.environment,
        "docs": "/docs",
    }
