"""
Java Builder API - Main Application
FastAPI interface for compiling, packaging and running single Java sources.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.routers import builder
from java_builder import BUILDER_NAME, PROFILE_ID  # type: ignore

_log = logging.getLogger(__name__)


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title=settings.API_TITLE,
    description="Single-source Java builds: source text → synthesized Maven layout → javac → jar / run",
    version=settings.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return 422 with structured error details."""
    body = await request.body()
    _log.warning(
        "422 on %s %s  body[:200]=%s  errors=%s",
        request.method, request.url.path, body[:200], exc.errors()[:3],
    )
    return JSONResponse(status_code=422, content={"detail": exc.errors()})


# =============================================================================
# Health Check
# =============================================================================

@app.get("/health")
async def health_check():
    """Liveness plus the toolchain builds will use (binaries are not probed)."""
    return {
        "status": "healthy",
        "service": "java-builder-api",
        "version": settings.API_VERSION,
        "builder": BUILDER_NAME,
        "toolchain": {"javac": settings.JAVAC, "java": settings.JAVA},
    }


@app.get("/")
async def root():
    """Entry points of the build API."""
    return {
        "message": "Java Builder API - paste a .java source, get a compiled, packaged or executed build",
        "profile": PROFILE_ID,
        "endpoints": {
            "compile": "POST /builder/compile",
            "package": "POST /builder/package",
            "evaluate": "POST /builder/evaluate",
        },
        "docs": "/docs",
    }


# =============================================================================
# Register Routers
# =============================================================================

app.include_router(builder.router, prefix="/builder", tags=["builder"])


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True  # For development
    )
