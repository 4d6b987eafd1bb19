"""
Video preprocessing package
Duration validation and frame extraction for AI analysis
"""

from .core import (
    DEFAULT_FRAME_POSITIONS,
    DurationExceededError,
    ExtractedFrame,
    ExtractionError,
    FrameExtractionService,
    ProbeError,
    ProcessingError,
    VideoMetadata,
    VideoProcessor,
    frame_scratch_path,
)

from .opencv_processor import OpenCVProcessor

# Global service instance
_frame_extraction_service = None


def get_frame_extraction_service() -> FrameExtractionService:
    """Get singleton frame extraction service configured from settings"""
    global _frame_extraction_service

    if _frame_extraction_service is None:
        from athleon.config.base import settings

        processor = OpenCVProcessor(
            target_size=(settings.FRAME_MAX_WIDTH, settings.FRAME_MAX_HEIGHT),
            jpeg_quality=settings.FRAME_JPEG_QUALITY
        )
        _frame_extraction_service = FrameExtractionService(
            processor,
            max_duration=settings.MAX_VIDEO_DURATION_SECONDS,
            positions=settings.FRAME_POSITIONS
        )

    return _frame_extraction_service


__all__ = [
    'DEFAULT_FRAME_POSITIONS',
    'DurationExceededError',
    'ExtractedFrame',
    'ExtractionError',
    'FrameExtractionService',
    'ProbeError',
    'ProcessingError',
    'VideoMetadata',
    'VideoProcessor',
    'OpenCVProcessor',
    'frame_scratch_path',
    'get_frame_extraction_service',
]
