import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from imagestudio.config import get_settings
from imagestudio.routers import generation, pages
from imagestudio.services.imagen import get_imagen_service
from imagestudio.services.sessions import SessionRegistry

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    imagen_service = get_imagen_service()
    if not imagen_service.api_key:
        logger.warning("GEMINI_API_KEY is not set; image generation requests will fail")

    app.state.sessions = SessionRegistry(
        imagen_service.generate,
        default_prompt=settings.default_prompt,
        default_aspect_ratio=settings.default_aspect_ratio,
        max_sessions=settings.max_sessions,
    )

    yield

    # Shutdown
    await app.state.sessions.aclose()


app = FastAPI(
    title=settings.app_name,
    description="""
    ## Image Generator

    Describe an image, pick an aspect ratio, and get an AI-generated picture back.

    ### How it works:

    1. **Describe**: Type a prompt such as "a lighthouse on a rocky coast during a storm".

    2. **Choose a shape**: Pick one of 1:1, 3:4, 4:3, 9:16 or 16:9.

    3. **Generate**: The prompt is sent to Google's Imagen model. While it works the
       session shows a loading state, then either the image or an error message.

    Each browser session keeps its own form and result. Only the latest request
    of a session is ever shown.
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "detail": str(exc) if settings.debug else "Internal server error",
            "type": type(exc).__name__,
        },
    )


# Include routers
app.include_router(pages.router)
app.include_router(generation.router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/api")
async def api_info():
    """API information."""
    return {
        "service": settings.app_name,
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "page": "GET /",
            "aspect_ratios": "GET /api/v1/aspect-ratios",
            "session_state": "GET /api/v1/session",
            "update_form": "PATCH /api/v1/session/form",
            "generate_image": "POST /api/v1/session/generate",
        }
    }
