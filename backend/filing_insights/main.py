"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from filing_insights.api import analysis, documents
from filing_insights.config import DEFAULT_CORS_ORIGINS, get_settings
from filing_insights.services.exceptions import ExtractionError, RetrievalError

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Refuse to start without credentials rather than failing every request
    get_settings().require_credentials()
    logger.info("Filing Insights API started")
    yield


app = FastAPI(
    title="Filing Insights API",
    description="Companies House filing extraction and analysis API",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
)

allowed_origins = settings.cors_origins or DEFAULT_CORS_ORIGINS.copy()
cors_allow_all = settings.cors_allow_all or "*" in allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if cors_allow_all else allowed_origins,
    allow_credentials=not cors_allow_all,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RetrievalError)
async def retrieval_error_handler(request: Request, exc: RetrievalError):
    logger.error("Document retrieval failed (%s): %s", exc.status_code, exc)
    return JSONResponse(
        status_code=502,
        content={
            "error": "Failed to download document",
            "details": str(exc),
            "upstream_status": exc.status_code,
        },
    )


@app.exception_handler(ExtractionError)
async def extraction_error_handler(request: Request, exc: ExtractionError):
    logger.error("Document extraction failed: %s", exc)
    return JSONResponse(
        status_code=422,
        content={"error": "Failed to process document", "details": str(exc)},
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Filing Insights API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/favicon.ico")
async def favicon():
    """Favicon endpoint to prevent 404 errors."""
    return Response(status_code=204)


# Include routers
app.include_router(
    documents.router,
    prefix=f"/api/{settings.api_version}/documents",
    tags=["documents"]
)

app.include_router(
    analysis.router,
    prefix=f"/api/{settings.api_version}/analysis",
    tags=["analysis"]
)


def run() -> None:
    """Serve the API with uvicorn, bound per HOST, PORT and RELOAD."""
    current = get_settings()
    uvicorn.run(
        "filing_insights.main:app",
        host=current.host,
        port=current.port,
        reload=current.reload,
        reload_dirs=[str(Path(__file__).resolve().parent)] if current.reload else None,
    )
