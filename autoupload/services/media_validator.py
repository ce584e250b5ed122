"""
Media Validator - Checks uploaded videos and thumbnails against YouTube channel requirements
"""
import os
import logging
from typing import Optional

from PIL import Image, UnidentifiedImageError

from ..exceptions import ProbeError
from ..models.schemas import VideoMetadata, VideoValidationResult, ThumbnailValidationResult
from ..utils.ffprobe import MediaProber, parse_frame_rate, get_video_duration

logger = logging.getLogger(__name__)

MIN_DURATION_SECONDS = 300
MAX_DURATION_SECONDS = 600
MIN_WIDTH = 1920
MIN_HEIGHT = 1080
TARGET_ASPECT_RATIO = 16 / 9
ASPECT_RATIO_TOLERANCE = 0.01
REQUIRED_FORMAT = "mp4"

THUMBNAIL_WIDTH = 1280
THUMBNAIL_HEIGHT = 720
THUMBNAIL_MAX_BYTES = 2 * 1024 * 1024
THUMBNAIL_FORMATS = {"JPEG", "PNG"}

_default_prober = MediaProber()


def _ratio_value(ratio: str) -> Optional[float]:
    """Convert "W:H" to W/H, None if it cannot be used"""
    width, _, height = ratio.partition(":")
    try:
        w = float(width)
        h = float(height)
    except ValueError:
        return None
    if w <= 0 or h <= 0:
        return None
    return w / h


def extract_video_metadata(info: dict) -> VideoMetadata:
    """
    Build VideoMetadata from ffprobe output

    Raises:
        ProbeError: if the file has no video stream
    """
    streams = info.get("streams", [])
    video_stream = next((s for s in streams if s.get("codec_type") == "video"), None)
    audio_stream = next((s for s in streams if s.get("codec_type") == "audio"), None)

    if video_stream is None:
        raise ProbeError("No video stream found")

    container = info.get("format", {})
    width = int(video_stream.get("width") or 0)
    height = int(video_stream.get("height") or 0)

    # ffprobe reports "0:1" (or nothing) when the display ratio is unknown
    aspect_ratio = video_stream.get("display_aspect_ratio")
    if not aspect_ratio or _ratio_value(aspect_ratio) is None:
        aspect_ratio = f"{width}:{height}"

    try:
        bitrate = int(container.get("bit_rate") or 0)
    except (TypeError, ValueError):
        bitrate = 0

    return VideoMetadata(
        duration=get_video_duration(info),
        width=width,
        height=height,
        aspect_ratio=aspect_ratio,
        has_audio=audio_stream is not None,
        format=container.get("format_name", ""),
        bitrate=bitrate,
        fps=parse_frame_rate(video_stream.get("r_frame_rate")),
        video_codec=video_stream.get("codec_name"),
        audio_codec=audio_stream.get("codec_name") if audio_stream else None,
    )


def check_video_metadata(metadata: VideoMetadata) -> list[str]:
    """Return every requirement the video fails, empty if it passes"""
    errors = []

    if not MIN_DURATION_SECONDS <= metadata.duration <= MAX_DURATION_SECONDS:
        errors.append(
            f"duration: Video must be between {MIN_DURATION_SECONDS} and "
            f"{MAX_DURATION_SECONDS} seconds (got {metadata.duration:.1f}s)"
        )

    if metadata.width < MIN_WIDTH:
        errors.append(f"width: Video width must be at least {MIN_WIDTH}px (got {metadata.width}px)")

    if metadata.height < MIN_HEIGHT:
        errors.append(f"height: Video height must be at least {MIN_HEIGHT}px (got {metadata.height}px)")

    ratio = _ratio_value(metadata.aspect_ratio)
    if ratio is None or abs(ratio - TARGET_ASPECT_RATIO) > ASPECT_RATIO_TOLERANCE:
        errors.append(f"aspectRatio: Aspect ratio must be 16:9 (got {metadata.aspect_ratio})")

    if not metadata.has_audio:
        errors.append("hasAudio: Video must have audio")

    if REQUIRED_FORMAT not in metadata.format.lower():
        errors.append(f"format: Video must be an MP4 file (got {metadata.format or 'unknown'})")

    return errors


def validate_video(file_path: str, prober: Optional[MediaProber] = None) -> VideoValidationResult:
    """
    Validate a saved video file

    Args:
        file_path: Path to the video
        prober: Media inspection backend, defaults to the ffprobe binary

    Returns:
        VideoValidationResult; valid with no metadata when ffprobe is missing
    """
    prober = prober or _default_prober

    if not prober.available():
        logger.warning("ffprobe not available, skipping video validation for %s", file_path)
        return VideoValidationResult(valid=True)

    try:
        metadata = extract_video_metadata(prober.probe(file_path))
    except (ProbeError, ValueError) as e:
        logger.error(f"Error probing video {file_path}: {e}")
        return VideoValidationResult(valid=False, errors=[str(e)])

    logger.info(f"Video metadata extracted: {metadata.model_dump()}")

    errors = check_video_metadata(metadata)
    if errors:
        logger.error(f"Video validation failed: {errors}")
        return VideoValidationResult(valid=False, metadata=metadata, errors=errors)

    logger.info(f"Video validation passed: {file_path}")
    return VideoValidationResult(valid=True, metadata=metadata)


def validate_thumbnail(file_path: str) -> ThumbnailValidationResult:
    """
    Validate a thumbnail image: 1280x720, under 2MB, JPG or PNG

    All checks run; every failure is reported.
    """
    try:
        with Image.open(file_path) as image:
            width, height = image.size
            image_format = (image.format or "").upper()
        file_size = os.path.getsize(file_path)
    except (UnidentifiedImageError, OSError) as e:
        logger.error(f"Error validating thumbnail {file_path}: {e}")
        return ThumbnailValidationResult(valid=False, errors=[str(e)])

    errors = []

    if (width, height) != (THUMBNAIL_WIDTH, THUMBNAIL_HEIGHT):
        errors.append(f"Thumbnail must be {THUMBNAIL_WIDTH}x{THUMBNAIL_HEIGHT} resolution")

    if file_size > THUMBNAIL_MAX_BYTES:
        errors.append("Thumbnail must be under 2MB")

    if image_format not in THUMBNAIL_FORMATS:
        errors.append("Thumbnail must be JPG or PNG format")

    if errors:
        logger.error(f"Thumbnail validation failed: {errors}")
        return ThumbnailValidationResult(valid=False, errors=errors)

    logger.info(f"Thumbnail validation passed: {file_path}")
    return ThumbnailValidationResult(valid=True)
