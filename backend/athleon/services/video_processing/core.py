"""
Video preprocessing core
Duration probing and frame sampling with scoped scratch-file cleanup
"""

import asyncio
import base64
import os
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from athleon.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_FRAME_POSITIONS = (0.1, 0.3, 0.5, 0.7, 0.9)
DEFAULT_MAX_DURATION = 600.0


class ProcessingError(Exception):
    """Base exception for video processing errors"""

    def __init__(self, message: str, error_code: str, details: Dict[str, Any] = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()


class ProbeError(ProcessingError):
    """The container duration could not be determined"""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message, "PROBE_FAILED", details)


class DurationExceededError(ProcessingError):
    """The video is longer than the allowed ceiling"""

    def __init__(self, duration: float, max_duration: float):
        minutes = int(max_duration // 60)
        super().__init__(
            f"Video is too long. Maximum allowed duration is {minutes} minutes.",
            "DURATION_EXCEEDED",
            {"duration": duration, "max_duration": max_duration}
        )
        self.duration = duration
        self.max_duration = max_duration


class ExtractionError(ProcessingError):
    """Frames could not be decoded or encoded"""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message, "EXTRACTION_FAILED", details)


@dataclass
class VideoMetadata:
    """Video metadata container"""
    duration: float
    fps: float
    total_frames: int
    width: int
    height: int
    file_size: int

    def is_valid(self) -> bool:
        return self.duration > 0 and self.fps > 0


@dataclass
class ExtractedFrame:
    """A still frame held in memory as base64 JPEG"""
    position: float
    timestamp: float
    base64_data: str
    mime_type: str = "image/jpeg"


class VideoProcessor(ABC):
    """Backend that can probe a video and write single frames to disk"""

    def __init__(self, name: str):
        self.name = name
        self.logger = get_logger(f"{__name__}.{name}")

    @abstractmethod
    def get_video_metadata(self, video_path: str) -> VideoMetadata:
        """Probe the container; raise ProbeError when unreadable"""

    @abstractmethod
    def write_frame(self, video_path: str, timestamp: float, output_path: str) -> None:
        """Write the frame nearest to ``timestamp`` as a JPEG at ``output_path``.

        Raise ExtractionError when the frame cannot be decoded or encoded.
        """


def frame_scratch_path(video_path: str, index: int) -> str:
    """Scratch file for the ``index``-th frame, next to the source video"""
    directory = os.path.dirname(os.path.abspath(video_path))
    stem = os.path.splitext(os.path.basename(video_path))[0]
    return os.path.join(directory, f"{stem}-frame-{index}.jpg")


def _remove_quietly(path: str) -> None:
    try:
        if os.path.exists(path):
            os.remove(path)
    except OSError as e:
        logger.warning(f"Failed to remove scratch frame {path}: {e}")


class FrameExtractionService:
    """Validates duration and samples frames at fixed relative positions"""

    def __init__(
        self,
        processor: VideoProcessor,
        max_duration: float = DEFAULT_MAX_DURATION,
        positions: Sequence[float] = DEFAULT_FRAME_POSITIONS,
        executor: Optional[ThreadPoolExecutor] = None
    ):
        self.processor = processor
        self.max_duration = max_duration
        self.positions = tuple(positions)
        self.executor = executor or ThreadPoolExecutor(max_workers=2)

    def probe(self, video_path: str) -> VideoMetadata:
        """Probe the video and enforce the duration ceiling"""
        if not os.path.exists(video_path):
            raise ProbeError(f"Video file not found: {video_path}", {"path": video_path})

        metadata = self.processor.get_video_metadata(video_path)
        if not metadata.is_valid():
            raise ProbeError(
                f"Could not determine duration of {video_path}",
                {"path": video_path, "metadata": metadata.__dict__}
            )

        if metadata.duration > self.max_duration:
            raise DurationExceededError(metadata.duration, self.max_duration)

        return metadata

    def frame_timestamps(self, duration: float) -> List[float]:
        return [duration * position for position in self.positions]

    def extract_frames_sync(self, video_path: str) -> List[ExtractedFrame]:
        """
        Extract one frame per configured position.

        Frames that fail individually are skipped; if none survive an
        ExtractionError is raised. Scratch files never outlive the call.
        """
        metadata = self.probe(video_path)
        timestamps = self.frame_timestamps(metadata.duration)
        logger.info(
            f"Extracting {len(timestamps)} frames from {os.path.basename(video_path)} "
            f"({metadata.duration:.1f}s)"
        )

        frames: List[ExtractedFrame] = []
        scratch_paths: List[str] = []
        try:
            for index, (position, timestamp) in enumerate(zip(self.positions, timestamps), start=1):
                output_path = frame_scratch_path(video_path, index)
                scratch_paths.append(output_path)
                try:
                    self.processor.write_frame(video_path, timestamp, output_path)
                    with open(output_path, 'rb') as frame_file:
                        data = frame_file.read()
                except (ExtractionError, OSError) as e:
                    logger.warning(f"Frame {index} at {timestamp:.2f}s failed: {e}")
                    continue
                finally:
                    _remove_quietly(output_path)

                if not data:
                    logger.warning(f"Frame {index} at {timestamp:.2f}s is empty")
                    continue

                frames.append(ExtractedFrame(
                    position=position,
                    timestamp=timestamp,
                    base64_data=base64.b64encode(data).decode('utf-8')
                ))
        finally:
            for path in scratch_paths:
                _remove_quietly(path)

        if not frames:
            raise ExtractionError(
                f"No frames could be extracted from {video_path}",
                {"path": video_path, "attempted": len(timestamps)}
            )

        logger.info(f"Extracted {len(frames)}/{len(timestamps)} frames")
        return frames

    async def check_duration(self, video_path: str) -> VideoMetadata:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, self.probe, video_path)

    async def extract_frames(self, video_path: str) -> List[ExtractedFrame]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, self.extract_frames_sync, video_path)
