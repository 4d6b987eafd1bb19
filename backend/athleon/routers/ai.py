"""
AI routes: video and text analysis, history, coach chat
"""

import os
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from athleon.config.base import settings
from athleon.db.database import get_db
from athleon.models.analysis import (
    AnalysisHistory,
    AnalysisRecord,
    AnalysisRequest,
    AnalysisResult,
    Pagination,
    TextAnalysisRequest,
    TrendPoint,
    VideoAnalysisResponse,
    VideoAnalysisSummary,
)
from athleon.models.chat import ChatReply, ChatRequest
from athleon.routers.deps import CurrentUser, get_current_user, require_athlete
from athleon.services import analysis_store
from athleon.services.analysis_pipeline import AnalysisPipeline, analysis_pipeline
from athleon.services.chat_service import ChatService, chat_service
from athleon.services.video_processing import DurationExceededError
from athleon.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/ai", tags=["AI"])

UPLOAD_CHUNK_SIZE = 1024 * 1024  # 1MB


def get_analysis_pipeline() -> AnalysisPipeline:
    return analysis_pipeline


def get_chat_service() -> ChatService:
    return chat_service


def video_upload_dir() -> str:
    return os.path.join(settings.LOCAL_UPLOAD_DIR, "videos")


def _discard(path: Optional[str]) -> None:
    if not path:
        return
    try:
        if os.path.exists(path):
            os.remove(path)
    except OSError as e:
        logger.error(f"Failed to clean up upload {path}: {e}")


async def _save_upload(video: UploadFile) -> str:
    """Validate and stream an uploaded video to the upload directory"""
    extension = os.path.splitext(video.filename or "")[1].lower()
    content_type = (video.content_type or "").lower()
    if extension not in settings.ALLOWED_EXTENSIONS or not content_type.startswith("video/"):
        raise HTTPException(
            status_code=400,
            detail="Only video files are allowed (mp4, mov, avi, mkv, webm)"
        )

    upload_dir = video_upload_dir()
    os.makedirs(upload_dir, exist_ok=True)
    unique_suffix = f"{int(datetime.now().timestamp() * 1000)}-{uuid.uuid4().hex[:9]}"
    path = os.path.join(upload_dir, f"video-{unique_suffix}{extension}")

    written = 0
    try:
        with open(path, "wb") as target:
            while chunk := await video.read(UPLOAD_CHUNK_SIZE):
                written += len(chunk)
                if written > settings.MAX_FILE_SIZE:
                    raise HTTPException(
                        status_code=413,
                        detail=f"File too large. Maximum size is {settings.MAX_FILE_SIZE // (1024 * 1024)}MB."
                    )
                target.write(chunk)
    except BaseException:
        _discard(path)
        raise

    logger.info(f"Stored upload {os.path.basename(path)} ({written / (1024 * 1024):.1f}MB)")
    return path


@router.post("/upload-video", response_model=VideoAnalysisResponse)
async def upload_video(
    video: Optional[UploadFile] = File(None),
    video_title: Optional[str] = Form(None, alias="videoTitle"),
    video_url: Optional[str] = Form(None, alias="videoUrl"),
    user: CurrentUser = Depends(require_athlete),
    db: Session = Depends(get_db),
    pipeline: AnalysisPipeline = Depends(get_analysis_pipeline)
):
    """Upload and analyze a video (athletes only)"""
    if video is None and not video_url:
        raise HTTPException(status_code=400, detail="Video file or URL is required")

    saved_path = await _save_upload(video) if video is not None else None

    try:
        analysis = await pipeline.analyze(AnalysisRequest(video_path=saved_path, title=video_title))

        stored_url = f"/uploads/videos/{os.path.basename(saved_path)}" if saved_path else video_url
        title = video_title or (video.filename if video is not None else None) or "Untitled Video"
        usage_log = await run_in_threadpool(
            analysis_store.record_video_analysis, db, user.id, title, stored_url, analysis
        )
    except DurationExceededError as e:
        logger.warning(f"Rejected upload from {user.id}: {e}")
        _discard(saved_path)
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"AI upload error: {type(e).__name__}: {e}")
        _discard(saved_path)
        raise HTTPException(status_code=500, detail=f"Failed to analyze video: {e}")

    return VideoAnalysisResponse(
        message="Video analyzed successfully",
        analysis=VideoAnalysisSummary(
            id=usage_log.id,
            score=analysis.score,
            improvement=analysis.improvement,
            insights=analysis.insights,
            skill_breakdown=analysis.skill_breakdown,
            is_related=analysis.is_related,
            rejection_reason=analysis.rejection_reason
        )
    )


@router.get("/results", response_model=AnalysisHistory)
def get_results(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: CurrentUser = Depends(require_athlete),
    db: Session = Depends(get_db)
):
    """Analysis history with score trend (athletes only)"""
    results, total = analysis_store.list_analyses(db, user.id, page, limit)
    trend = analysis_store.performance_trend(db, user.id)

    return AnalysisHistory(
        results=[
            AnalysisRecord(
                id=r.id,
                video_title=r.video_title,
                video_url=r.video_url,
                score=analysis_store.plain_number(r.score),
                insights=r.insights or [],
                skill_breakdown=r.skill_breakdown or [],
                analyzed_at=r.created_at
            )
            for r in results
        ],
        performance_trend=[TrendPoint(score=analysis_store.plain_number(p.score), date=p.created_at) for p in trend],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=analysis_store.total_pages(total, limit)
        )
    )


@router.post("/analyze-text", response_model=AnalysisResult)
async def analyze_text(
    request: TextAnalysisRequest,
    user: CurrentUser = Depends(get_current_user),
    pipeline: AnalysisPipeline = Depends(get_analysis_pipeline)
):
    """Analyze performance from a text description"""
    if not request.sport.strip() or not request.description.strip():
        raise HTTPException(status_code=400, detail="Sport and description are required")

    logger.info(f"Text analysis for {user.id}: {request.sport}")
    return await pipeline.analyze(
        AnalysisRequest(sport=request.sport.strip(), description=request.description.strip())
    )


@router.post("/chat", response_model=ChatReply)
async def chat(
    request: ChatRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    coach: ChatService = Depends(get_chat_service)
):
    """AI coach chat grounded in the caller's latest analysis"""
    if not request.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    context = await run_in_threadpool(analysis_store.build_chat_context, db, user.id, user.name)
    reply = await coach.respond(request.message, context)
    return ChatReply(reply=reply, timestamp=datetime.now(timezone.utc))
