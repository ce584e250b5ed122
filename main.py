import asyncio
import logging
from datetime import datetime

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware

from autoupload.config import get_settings
from autoupload.dependencies import get_credential_store
from autoupload.routers import auth, upload
from autoupload.services.credential_store import CredentialStore
from autoupload.services.file_cleanup import start_cleanup_scheduler
from autoupload.utils.ffprobe import check_ffmpeg_installed

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="YouTube Auto-Upload API",
    description="Uploads finished videos to YouTube with generated metadata and streamed progress",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(upload.router)
app.include_router(auth.router)


@app.get("/")
async def root():
    """Root endpoint with basic information"""
    return {
        "message": "YouTube Auto-Upload API",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "upload": "/api/upload",
            "next_schedule": "/api/upload/next-schedule",
            "auth_url": "/api/auth/url",
            "auth_status": "/api/auth/status",
            "health": "/health",
            "docs": "/docs"
        }
    }


@app.get("/health")
async def health_check(credential_store: CredentialStore = Depends(get_credential_store)):
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "services": {
            "ffprobe_available": check_ffmpeg_installed(),
            "youtube_authenticated": credential_store.is_authenticated(),
            "youtube_configured": bool(settings.youtube_client_id and settings.youtube_client_secret)
        }
    }


@app.on_event("startup")
async def startup_event():
    """Create the uploads directory and start the temp file sweeper"""
    settings.ensure_directories()

    if not check_ffmpeg_installed():
        logger.warning("FFprobe not found in PATH. Video validation will be skipped.")

    if not (settings.youtube_client_id and settings.youtube_client_secret):
        logger.warning("YOUTUBE_CLIENT_ID / YOUTUBE_CLIENT_SECRET not set. Uploads will fail.")

    asyncio.create_task(start_cleanup_scheduler())
    logger.info("Upload backend initialized successfully.")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
