"""
FastAPI Entry Point for Athleon AI
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from athleon.config.base import settings
from athleon.db.database import init_db
from athleon.routers.ai import router as ai_router
from athleon.services.judgment_client import judgment_client
from athleon.utils.logger import get_logger, setup_logging

setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
logger = get_logger(__name__)
logger.info("🚀 Starting Athleon AI API initialization...")


@asynccontextmanager
async def lifespan(app: FastAPI):
    os.makedirs(os.path.join(settings.LOCAL_UPLOAD_DIR, "videos"), exist_ok=True)
    init_db()
    if judgment_client.is_configured:
        logger.info(f"✅ AI analysis enabled with model {judgment_client.model}")
    else:
        logger.warning("⚠️ OPENROUTER_API_KEY not set - analyses will use synthetic results")
    yield


app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="AI-powered sports performance analysis for the Athleon marketplace",
    version=settings.VERSION,
    lifespan=lifespan
)

# Development: allow all origins. Production: configured origins only
if settings.DEBUG:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["*"],
        max_age=86400
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=86400
    )

app.include_router(ai_router)

# Stored uploads are served back under the same path recorded in the usage log
app.mount("/uploads", StaticFiles(directory=settings.LOCAL_UPLOAD_DIR, check_dir=False), name="uploads")


@app.get("/")
async def root():
    return {"message": f"{settings.APP_NAME} API", "version": settings.VERSION}


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "services": {
            "ai": "configured" if judgment_client.is_configured else "fallback",
            "model": judgment_client.model
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("athleon.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
