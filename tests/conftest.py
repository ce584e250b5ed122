"""
Pytest configuration and fixtures for testing
"""
import io

import pytest
from fastapi.testclient import TestClient
from starlette.datastructures import UploadFile

from autoupload.config import Settings, get_settings
from autoupload.dependencies import get_client_factory, get_credential_store, get_upload_pipeline
from autoupload.models.schemas import (
    StoredCredential,
    ThumbnailValidationResult,
    UploadResult,
    VideoValidationResult,
)
from autoupload.services.credential_store import MemoryCredentialStore
from autoupload.services.upload_pipeline import UploadPipeline


def make_probe_info(
    duration=450.0,
    width=1920,
    height=1080,
    display_aspect_ratio="16:9",
    has_audio=True,
    format_name="mov,mp4,m4a,3gp,3g2,mj2",
    r_frame_rate="30000/1001",
    has_video=True
):
    """ffprobe -show_format -show_streams style output"""
    streams = []
    if has_video:
        stream = {
            "codec_type": "video",
            "codec_name": "h264",
            "width": width,
            "height": height,
            "r_frame_rate": r_frame_rate,
        }
        if display_aspect_ratio is not None:
            stream["display_aspect_ratio"] = display_aspect_ratio
        streams.append(stream)
    if has_audio:
        streams.append({"codec_type": "audio", "codec_name": "aac"})
    return {
        "format": {
            "duration": str(duration),
            "format_name": format_name,
            "bit_rate": "8000000",
        },
        "streams": streams,
    }


class FakeProber:
    def __init__(self, info=None, available=True, error=None):
        self.info = info if info is not None else make_probe_info()
        self._available = available
        self.error = error
        self.probed = []

    def available(self):
        return self._available

    def probe(self, file_path):
        self.probed.append(file_path)
        if self.error:
            raise self.error
        return self.info


class FakeYouTubeClient:
    """Stands in for YouTubeClient inside the pipeline and auth routes"""

    def __init__(self, result=None, progress=(25.0, 50.0, 100.0), error=None):
        self.result = result or UploadResult(
            success=True,
            video_id="abc123",
            video_url="https://www.youtube.com/watch?v=abc123"
        )
        self.progress = progress
        self.error = error
        self.calls = []
        self.auth_url = "https://accounts.google.com/o/oauth2/auth?client_id=test"
        self.exchange_error = None

    def retry_upload(self, video_path, thumbnail_path, options, max_retries=3, on_progress=None):
        self.calls.append({
            "video_path": video_path,
            "thumbnail_path": thumbnail_path,
            "options": options,
            "max_retries": max_retries,
        })
        for value in self.progress:
            if on_progress:
                on_progress(value)
        if self.error:
            raise self.error
        return self.result

    def get_auth_url(self):
        return self.auth_url

    def exchange_code(self, code):
        if self.exchange_error:
            raise self.exchange_error
        return StoredCredential(access_token=f"access-{code}", refresh_token="refresh")


def make_upload(content=b"fake video bytes", filename="clip.mp4"):
    return UploadFile(file=io.BytesIO(content), filename=filename)


def always_valid_video(path):
    return VideoValidationResult(valid=True)


def always_valid_thumbnail(path):
    return ThumbnailValidationResult(valid=True)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        youtube_client_id="client-id",
        youtube_client_secret="client-secret",
        upload_dir=str(tmp_path / "uploads"),
        tokens_path=str(tmp_path / "tokens.json"),
    )


@pytest.fixture
def credential():
    return StoredCredential(access_token="access", refresh_token="refresh")


@pytest.fixture
def credential_store(credential):
    return MemoryCredentialStore(credential)


@pytest.fixture
def fake_client():
    return FakeYouTubeClient()


@pytest.fixture
def client(settings, credential_store, fake_client):
    """Create a test client for the FastAPI app with fakes injected"""
    from main import app

    def client_factory(settings, credential=None):
        return fake_client

    def upload_pipeline():
        return UploadPipeline(
            settings,
            credential_store,
            client_factory=client_factory,
            video_validator=always_valid_video,
            thumbnail_validator=always_valid_thumbnail
        )

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_credential_store] = lambda: credential_store
    app.dependency_overrides[get_client_factory] = lambda: client_factory
    app.dependency_overrides[get_upload_pipeline] = upload_pipeline
    yield TestClient(app)
    app.dependency_overrides.clear()
