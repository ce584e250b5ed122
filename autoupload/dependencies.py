"""
FastAPI dependencies shared by the routers
"""
from fastapi import Depends

from .config import Settings, get_settings
from .services.credential_store import CredentialStore, FileCredentialStore
from .services.upload_pipeline import UploadPipeline
from .services.youtube_client import build_youtube_client


def get_credential_store(settings: Settings = Depends(get_settings)) -> CredentialStore:
    return FileCredentialStore(settings.tokens_path)


def get_client_factory():
    """Callable (settings, credential) -> YouTubeClient"""
    return build_youtube_client


def get_upload_pipeline(
    settings: Settings = Depends(get_settings),
    credential_store: CredentialStore = Depends(get_credential_store),
    client_factory=Depends(get_client_factory)
) -> UploadPipeline:
    return UploadPipeline(settings, credential_store, client_factory=client_factory)
