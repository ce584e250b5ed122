"""
Pydantic schemas for the upload pipeline and API responses
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Language(str, Enum):
    """Language of the generated title/description"""
    HINDI = "hi"
    ENGLISH = "en"
    HINGLISH = "hinglish"


class PrivacyStatus(str, Enum):
    """YouTube privacy status"""
    PUBLIC = "public"
    UNLISTED = "unlisted"
    PRIVATE = "private"


class Stage(str, Enum):
    """Upload pipeline stage"""
    PARSING = "Parsing"
    SAVING = "Saving"
    VALIDATING = "Validating"
    GENERATING = "Generating"
    AUTHENTICATING = "Authenticating"
    UPLOADING = "Uploading"
    COMPLETE = "Complete"
    ERROR = "Error"


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UploadRequest(BaseModel):
    """Parsed and checked upload form fields"""
    topic: str
    summary: str
    language: Language = Language.HINDI
    privacy: PrivacyStatus = PrivacyStatus.PUBLIC
    schedule_time: Optional[datetime] = None


class VideoMetadata(BaseModel):
    """Technical properties of a probed video file"""
    duration: float
    width: int
    height: int
    aspect_ratio: str
    has_audio: bool
    format: str
    bitrate: int = 0
    fps: float = 0.0
    video_codec: Optional[str] = None
    audio_codec: Optional[str] = None


class VideoValidationResult(BaseModel):
    valid: bool
    metadata: Optional[VideoMetadata] = None
    errors: Optional[list[str]] = None


class ThumbnailValidationResult(BaseModel):
    valid: bool
    errors: Optional[list[str]] = None


class GeneratedMetadata(BaseModel):
    """Title, description and tags generated for an upload"""
    title: str
    description: str
    tags: list[str]
    language: Language


class UploadOptions(BaseModel):
    """Options sent with a single videos.insert call"""
    title: str
    description: str
    tags: list[str] = Field(default_factory=list)
    category_id: str = "24"
    privacy_status: PrivacyStatus = PrivacyStatus.PUBLIC
    publish_at: Optional[str] = None
    playlist_id: Optional[str] = None
    language: Optional[str] = None
    made_for_kids: bool = False


class UploadResult(BaseModel):
    """
    Outcome of one upload attempt

    retryable is False when the video itself was created but a follow-up
    call (thumbnail, playlist) failed; uploading again would duplicate it.
    """
    success: bool
    video_id: Optional[str] = None
    video_url: Optional[str] = None
    error: Optional[str] = None
    retryable: bool = True


class ProgressEvent(CamelModel):
    """One frame of the upload progress stream"""
    stage: Stage
    progress: float
    message: str
    video_id: Optional[str] = None
    video_url: Optional[str] = None
    error: Optional[str] = None

    def to_sse(self) -> str:
        """Render as a server-sent event frame"""
        return f"data: {self.model_dump_json(by_alias=True, exclude_none=True)}\n\n"


class StoredCredential(CamelModel):
    """OAuth token pair persisted between requests"""
    access_token: str
    refresh_token: str


class AuthUrlResponse(CamelModel):
    auth_url: str


class AuthStatusResponse(BaseModel):
    authenticated: bool


class ScheduleResponse(CamelModel):
    schedule_time: datetime


class ErrorResponse(BaseModel):
    """Error response model"""
    error: str
    detail: Optional[str] = None
