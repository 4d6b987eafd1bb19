"""
Pytest configuration and fixtures for testing
"""

import os

# Tests never reach the real judgment service or the on-disk database
os.environ["OPENROUTER_API_KEY"] = ""
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_FILE"] = ""

import random
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from athleon.config.base import settings
from athleon.db.database import init_db, get_db, make_engine
from athleon.main import app
from athleon.routers.ai import get_analysis_pipeline, get_chat_service
from athleon.services.analysis_pipeline import AnalysisPipeline
from athleon.services.chat_service import ChatService
from athleon.services.fallback_synthesizer import FallbackSynthesizer
from athleon.services.judgment_client import JudgmentClient
from athleon.services.video_processing import (
    FrameExtractionService,
    VideoMetadata,
    VideoProcessor,
)


class StubProcessor(VideoProcessor):
    """Reports a fixed duration and writes fake JPEG bytes"""

    def __init__(self, duration: float = 30.0, failing_timestamps=()):
        super().__init__("Stub")
        self.duration = duration
        self.failing_timestamps = set(failing_timestamps)
        self.requested = []
        self.written_paths = []

    def get_video_metadata(self, video_path: str) -> VideoMetadata:
        fps = 30.0
        return VideoMetadata(
            duration=self.duration,
            fps=fps,
            total_frames=int(self.duration * fps),
            width=1280,
            height=720,
            file_size=os.path.getsize(video_path)
        )

    def write_frame(self, video_path: str, timestamp: float, output_path: str) -> None:
        from athleon.services.video_processing import ExtractionError

        self.requested.append(timestamp)
        self.written_paths.append(output_path)
        if round(timestamp, 6) in self.failing_timestamps:
            raise ExtractionError(f"Stub failure at {timestamp}")
        with open(output_path, "wb") as frame_file:
            frame_file.write(b"\xff\xd8\xff\xe0fake-jpeg\xff\xd9")


def completion(content):
    """Chat completion shaped like the openai SDK response object"""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(total_tokens=42),
        error=None
    )


@pytest.fixture
def make_completion():
    return completion


@pytest.fixture
def video_file(tmp_path):
    """Placeholder video file on disk"""
    path = tmp_path / "session.mp4"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 256)
    return str(path)


@pytest.fixture
def processor_factory():
    return StubProcessor


@pytest.fixture
def stub_processor():
    return StubProcessor()


@pytest.fixture
def frame_service(stub_processor):
    return FrameExtractionService(stub_processor, max_duration=600)


@pytest.fixture
def openai_stub():
    """Stands in for AsyncOpenAI; set ``create.return_value`` per test"""
    stub = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=AsyncMock())))
    return stub


@pytest.fixture
def configured_client(openai_stub):
    return JudgmentClient(api_key="test-key", model="test/model", client=openai_stub)


@pytest.fixture
def unconfigured_client(openai_stub):
    return JudgmentClient(api_key="", model="test/model", client=openai_stub)


@pytest.fixture
def synthesizer():
    return FallbackSynthesizer(rng=random.Random(7))


@pytest.fixture
def pipeline(frame_service, unconfigured_client, synthesizer):
    return AnalysisPipeline(frame_service, unconfigured_client, synthesizer)


@pytest.fixture
def db_session():
    engine = make_engine("sqlite://")
    init_db(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db_session, pipeline, unconfigured_client, tmp_path, monkeypatch):
    """Create a test client for FastAPI app"""
    monkeypatch.setattr(settings, "LOCAL_UPLOAD_DIR", str(tmp_path / "uploads"))

    def override_db():
        yield db_session

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_analysis_pipeline] = lambda: pipeline
    app.dependency_overrides[get_chat_service] = lambda: ChatService(unconfigured_client)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def athlete_headers():
    return {"X-User-Id": "athlete-1", "X-User-Name": "Jordan Reyes", "X-User-Role": "athlete"}


@pytest.fixture
def model_document():
    """A well-formed analysis document as the model returns it"""
    return {
        "isRelated": True,
        "score": 82,
        "insights": ["Strong knee drive", "Arm swing crosses the midline"],
        "skillBreakdown": [
            {"skill": "Speed", "value": 85},
            {"skill": "Technique", "value": 78},
            {"skill": "Endurance", "value": 70},
            {"skill": "Accuracy", "value": 74},
            {"skill": "Power", "value": 80},
            {"skill": "Agility", "value": 76},
        ],
        "improvement": 5,
    }
