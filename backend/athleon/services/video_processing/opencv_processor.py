"""
OpenCV video processor
Probes containers and writes resized JPEG stills with Pillow
"""

import os
from typing import Tuple

import cv2
from PIL import Image

from .core import VideoProcessor, VideoMetadata, ProbeError, ExtractionError


class OpenCVProcessor(VideoProcessor):
    """OpenCV-backed probe and frame writer"""

    # Tried in order when opening a capture
    BACKENDS = [
        (cv2.CAP_FFMPEG, "FFMPEG"),
        (cv2.CAP_ANY, "ANY"),
    ]

    def __init__(self, target_size: Tuple[int, int] = (640, 480), jpeg_quality: int = 90):
        super().__init__("OpenCV")
        self.target_size = target_size
        self.jpeg_quality = jpeg_quality

    def _open(self, video_path: str, error_cls):
        """Open a capture with the first working backend; failures raise ``error_cls``"""
        for backend, backend_name in self.BACKENDS:
            try:
                cap = cv2.VideoCapture(video_path, backend)
                if cap.isOpened():
                    return cap
            except cv2.error as e:
                raise error_cls(f"Could not open video {video_path}: {e}", {"path": video_path}) from e
            self.logger.debug(f"Could not open {video_path} with {backend_name}")
            cap.release()
        raise error_cls(f"Could not open video: {video_path}", {"path": video_path})

    def get_video_metadata(self, video_path: str) -> VideoMetadata:
        cap = self._open(video_path, ProbeError)
        try:
            fps = cap.get(cv2.CAP_PROP_FPS) or 0.0
            total_frames = int(cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0)
            width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
            height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)
            file_size = os.path.getsize(video_path)
        except (cv2.error, OSError) as e:
            raise ProbeError(f"Could not read video properties: {e}", {"path": video_path})
        finally:
            cap.release()

        duration = total_frames / fps if fps > 0 and total_frames > 0 else 0.0
        self.logger.info(f"Probed {os.path.basename(video_path)}: {total_frames} frames, {fps:.2f} FPS, {duration:.1f}s")

        return VideoMetadata(
            duration=duration,
            fps=fps,
            total_frames=total_frames,
            width=width,
            height=height,
            file_size=file_size
        )

    def write_frame(self, video_path: str, timestamp: float, output_path: str) -> None:
        cap = self._open(video_path, ExtractionError)
        try:
            cap.set(cv2.CAP_PROP_POS_MSEC, timestamp * 1000.0)
            ok, frame = cap.read()
            if not ok or frame is None:
                # Some containers only seek by frame index
                fps = cap.get(cv2.CAP_PROP_FPS) or 0.0
                total_frames = int(cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0)
                frame_index = min(int(timestamp * fps), max(total_frames - 1, 0))
                cap.set(cv2.CAP_PROP_POS_FRAMES, frame_index)
                ok, frame = cap.read()
        except cv2.error as e:
            raise ExtractionError(f"Could not decode frame at {timestamp:.2f}s: {e}")
        finally:
            cap.release()

        if not ok or frame is None:
            raise ExtractionError(f"No frame decoded at {timestamp:.2f}s", {"timestamp": timestamp})

        try:
            rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            image = self._fit(Image.fromarray(rgb_frame))
            image.save(output_path, format='JPEG', quality=self.jpeg_quality)
        except (cv2.error, OSError, ValueError) as e:
            raise ExtractionError(f"Could not encode frame at {timestamp:.2f}s: {e}")

    def _fit(self, image: Image.Image) -> Image.Image:
        """Resize to fit inside target_size, preserving aspect ratio"""
        width, height = image.size
        target_width, target_height = self.target_size
        if width <= target_width and height <= target_height:
            return image

        aspect = width / height
        if aspect > (target_width / target_height):
            new_width, new_height = target_width, max(1, int(target_width / aspect))
        else:
            new_width, new_height = max(1, int(target_height * aspect)), target_height
        return image.resize((new_width, new_height), Image.Resampling.LANCZOS)
