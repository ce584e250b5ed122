"""
Upload Pipeline - Parse, save, validate, generate metadata, authenticate and upload,
reporting each stage as a ProgressEvent
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Optional

from pydantic import TypeAdapter, ValidationError

from ..config import Settings
from ..exceptions import UploadInputError
from ..models.schemas import (
    Language,
    PrivacyStatus,
    ProgressEvent,
    Stage,
    StoredCredential,
    UploadOptions,
    UploadRequest,
)
from .credential_store import CredentialStore
from .file_storage import file_extension, remove_files, save_upload
from .media_validator import validate_thumbnail, validate_video
from .metadata_generator import generate_metadata
from .youtube_client import YouTubeClient, build_youtube_client

logger = logging.getLogger(__name__)

UPLOAD_START_PROGRESS = 40
UPLOAD_PROGRESS_SPAN = 0.6

_DONE = object()
_datetime_adapter = TypeAdapter(datetime)


@dataclass
class UploadForm:
    """Raw multipart form fields, before any checks"""
    video: Any = None
    thumbnail: Any = None
    topic: Optional[str] = None
    summary: Optional[str] = None
    language: Optional[str] = None
    privacy: Optional[str] = None
    schedule_time: Optional[str] = None


def _is_file(value) -> bool:
    return value is not None and not isinstance(value, str) and bool(getattr(value, "filename", None))


def parse_upload_form(form: UploadForm) -> UploadRequest:
    """
    Check required fields and convert the form into an UploadRequest

    Raises:
        UploadInputError: on missing fields or invalid enum / date values
    """
    missing = []
    if not _is_file(form.video):
        missing.append("video")
    if not (form.topic or "").strip():
        missing.append("topic")
    if not (form.summary or "").strip():
        missing.append("summary")
    if missing:
        raise UploadInputError(f"Missing required fields: {', '.join(missing)}")

    try:
        language = Language(form.language or Language.HINDI.value)
    except ValueError:
        raise UploadInputError(f"Unsupported language: {form.language}") from None

    try:
        privacy = PrivacyStatus(form.privacy or PrivacyStatus.PUBLIC.value)
    except ValueError:
        raise UploadInputError(f"Unsupported privacy status: {form.privacy}") from None

    schedule_time = None
    if form.schedule_time:
        try:
            schedule_time = _datetime_adapter.validate_python(form.schedule_time)
        except ValidationError:
            raise UploadInputError(f"Invalid scheduleTime: {form.schedule_time}") from None
        if schedule_time.tzinfo is None:
            schedule_time = schedule_time.replace(tzinfo=timezone.utc)

    return UploadRequest(
        topic=form.topic.strip(),
        summary=form.summary.strip(),
        language=language,
        privacy=privacy,
        schedule_time=schedule_time
    )


def to_publish_at(schedule_time: Optional[datetime]) -> Optional[str]:
    """RFC 3339 UTC timestamp for status.publishAt"""
    if schedule_time is None:
        return None
    return schedule_time.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class _EventBuilder:
    """Builds ProgressEvents whose progress never goes backwards"""

    def __init__(self):
        self.progress = 0.0

    def event(self, stage: Stage, progress: float, message: str, **extra) -> ProgressEvent:
        self.progress = max(self.progress, min(progress, 100.0))
        return ProgressEvent(stage=stage, progress=round(self.progress, 2), message=message, **extra)

    def error(self, message: str, error: Optional[str] = None, **extra) -> ProgressEvent:
        return ProgressEvent(
            stage=Stage.ERROR,
            progress=round(self.progress, 2),
            message=message,
            error=error or message,
            **extra
        )


class UploadPipeline:
    """
    Sequential upload state machine

    Parsing -> Saving -> Validating -> Generating -> Authenticating ->
    Uploading -> Complete, or Error at any point. Error is terminal.
    """

    def __init__(
        self,
        settings: Settings,
        credential_store: CredentialStore,
        client_factory: Callable[[Settings, StoredCredential], YouTubeClient] = build_youtube_client,
        video_validator=validate_video,
        thumbnail_validator=validate_thumbnail,
        rng=None
    ):
        self.settings = settings
        self.credential_store = credential_store
        self.client_factory = client_factory
        self.video_validator = video_validator
        self.thumbnail_validator = thumbnail_validator
        self.rng = rng

    async def run(self, form: UploadForm) -> AsyncIterator[ProgressEvent]:
        """Run the whole pipeline, yielding one event per stage transition"""
        events = _EventBuilder()
        loop = asyncio.get_running_loop()

        try:
            yield events.event(Stage.PARSING, 5, "Parsing upload data...")
            request = parse_upload_form(form)

            yield events.event(Stage.SAVING, 10, "Saving uploaded files...")
            video_path = await save_upload(
                form.video,
                self.settings.upload_dir,
                "video",
                "mp4",
                max_bytes=self.settings.max_video_size_bytes
            )
            thumbnail_path = None
            if _is_file(form.thumbnail):
                thumbnail_path = await save_upload(
                    form.thumbnail,
                    self.settings.upload_dir,
                    "thumbnail",
                    file_extension(form.thumbnail.filename, "jpg")
                )

            yield events.event(Stage.VALIDATING, 20, "Validating video file...")
            video_result = await loop.run_in_executor(None, self.video_validator, video_path)
            if not video_result.valid:
                yield events.error("Video validation failed", ", ".join(video_result.errors or []))
                return

            if thumbnail_path:
                thumbnail_result = await loop.run_in_executor(None, self.thumbnail_validator, thumbnail_path)
                if not thumbnail_result.valid:
                    yield events.error("Thumbnail validation failed", ", ".join(thumbnail_result.errors or []))
                    return

            yield events.event(Stage.GENERATING, 30, "Generating metadata...")
            metadata = generate_metadata(request.topic, request.summary, request.language, rng=self.rng)

            yield events.event(Stage.AUTHENTICATING, 35, "Authenticating with YouTube...")
            credential = self.credential_store.load()
            if credential is None:
                yield events.error("Authentication required", "Please authenticate with YouTube first")
                return
            client = self.client_factory(self.settings, credential)

            yield events.event(Stage.UPLOADING, UPLOAD_START_PROGRESS, "Starting video upload to YouTube...")
            options = UploadOptions(
                title=metadata.title,
                description=metadata.description,
                tags=metadata.tags,
                category_id=self.settings.category_id,
                privacy_status=request.privacy,
                publish_at=to_publish_at(request.schedule_time),
                playlist_id=self.settings.youtube_default_playlist_id or None,
                language=metadata.language.value,
                made_for_kids=False
            )

            progress_queue: asyncio.Queue = asyncio.Queue()

            def on_progress(progress: float):
                loop.call_soon_threadsafe(progress_queue.put_nowait, progress)

            def upload():
                try:
                    return client.retry_upload(
                        video_path,
                        thumbnail_path,
                        options,
                        self.settings.max_upload_retries,
                        on_progress
                    )
                finally:
                    loop.call_soon_threadsafe(progress_queue.put_nowait, _DONE)

            future = loop.run_in_executor(None, upload)
            while True:
                progress = await progress_queue.get()
                if progress is _DONE:
                    break
                yield events.event(
                    Stage.UPLOADING,
                    UPLOAD_START_PROGRESS + progress * UPLOAD_PROGRESS_SPAN,
                    f"Uploading video: {progress:.1f}%"
                )

            try:
                result = await future
            finally:
                remove_files(video_path, thumbnail_path)

            if result.success:
                logger.info(f"Upload completed successfully: {result.video_id} {result.video_url}")
                yield events.event(
                    Stage.COMPLETE,
                    100,
                    "Video uploaded successfully!",
                    video_id=result.video_id,
                    video_url=result.video_url
                )
            else:
                logger.error(f"Upload failed: {result.error}")
                yield events.error(
                    "Upload failed",
                    result.error,
                    video_id=result.video_id,
                    video_url=result.video_url
                )

        except UploadInputError as e:
            logger.warning(f"Rejected upload request: {e}")
            yield events.error("Invalid upload request", str(e))
        except Exception as e:
            logger.error(f"Unexpected error during upload: {e}", exc_info=True)
            yield events.error("An unexpected error occurred", str(e))
