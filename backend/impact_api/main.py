import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .errors import ImpactAPIError
from .logging_config import configure_logging
from .routers import reports, views, wizard

configure_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Impact Report API",
    description="Backend API for building NGO impact reports from receipts, photos and voice notes",
    version="1.0.0",
)

# Configure CORS
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(views.router)
app.include_router(wizard.router)
app.include_router(reports.router)


@app.exception_handler(ImpactAPIError)
async def impact_api_error_handler(request: Request, exc: ImpactAPIError) -> JSONResponse:
    """Map domain errors to the same `{"detail": ...}` shape as HTTPException."""
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy", "service": "impact-report-api"}


@app.get("/")
async def root() -> dict:
    """Root endpoint with API information."""
    return {
        "name": "Impact Report API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    uvicorn.run("impact_api.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
