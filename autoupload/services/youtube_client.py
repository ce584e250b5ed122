"""
YouTube Client - OAuth, resumable uploads, thumbnails and playlists via the YouTube Data API v3
"""
import os
import time
import logging
from typing import Callable, Optional

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build
from googleapiclient.http import MediaFileUpload

from ..config import Settings
from ..exceptions import AuthenticationError
from ..models.schemas import PrivacyStatus, StoredCredential, UploadOptions, UploadResult

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/youtube.upload",
    "https://www.googleapis.com/auth/youtube",
    "https://www.googleapis.com/auth/youtube.force-ssl",
]
AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URI = "https://oauth2.googleapis.com/token"
WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

ProgressCallback = Callable[[float], None]


class YouTubeClient:
    """
    Wrapper around the YouTube Data API for single-video uploads

    The API resource is built on first use from the stored credential;
    pass `service` to use a pre-built (or fake) resource instead.
    """

    def __init__(
        self,
        settings: Settings,
        credential: Optional[StoredCredential] = None,
        service=None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.client_id = settings.youtube_client_id
        self.client_secret = settings.youtube_client_secret
        self.redirect_uri = settings.youtube_redirect_uri
        self.chunk_size = settings.upload_chunk_size_bytes
        self.credential = credential
        self._service = service
        self._sleep = sleep

    def _client_config(self) -> dict:
        return {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": AUTH_URI,
                "token_uri": TOKEN_URI,
                "redirect_uris": [self.redirect_uri],
            }
        }

    def _flow(self) -> Flow:
        # The code is exchanged in a later request by a new Flow, so no PKCE verifier
        return Flow.from_client_config(
            self._client_config(),
            scopes=SCOPES,
            redirect_uri=self.redirect_uri,
            autogenerate_code_verifier=False
        )

    @property
    def youtube(self):
        """YouTube Data API v3 resource"""
        if self._service is None:
            if self.credential is None:
                raise AuthenticationError("No stored credential. Please authenticate with YouTube first")
            credentials = Credentials(
                token=self.credential.access_token,
                refresh_token=self.credential.refresh_token,
                token_uri=TOKEN_URI,
                client_id=self.client_id,
                client_secret=self.client_secret,
                scopes=SCOPES
            )
            self._service = build("youtube", "v3", credentials=credentials, cache_discovery=False)
            logger.info("YouTube client initialized")
        return self._service

    def get_auth_url(self) -> str:
        """Consent-screen URL requesting offline access to upload/manage videos"""
        auth_url, _ = self._flow().authorization_url(
            access_type="offline",
            prompt="consent"
        )
        return auth_url

    def exchange_code(self, code: str) -> StoredCredential:
        """
        Exchange an authorization code for an access/refresh token pair

        Raises:
            AuthenticationError: if the code is rejected or no refresh token is returned
        """
        flow = self._flow()
        try:
            flow.fetch_token(code=code)
        except Exception as e:
            logger.error(f"Error getting tokens from code: {e}", exc_info=True)
            raise AuthenticationError(f"Token exchange failed: {e}") from e

        credentials = flow.credentials
        if not credentials.token or not credentials.refresh_token:
            raise AuthenticationError("Token exchange did not return a refresh token")

        self.credential = StoredCredential(
            access_token=credentials.token,
            refresh_token=credentials.refresh_token
        )
        self._service = None
        logger.info("OAuth tokens obtained successfully")
        return self.credential

    def _video_body(self, options: UploadOptions) -> dict:
        language = options.language or "hi"
        privacy = options.privacy_status
        status = {
            "selfDeclaredMadeForKids": options.made_for_kids,
        }
        if options.publish_at:
            # YouTube only schedules private videos
            if privacy != PrivacyStatus.PRIVATE:
                logger.info(f"publishAt set, sending privacyStatus=private instead of {privacy.value}")
            privacy = PrivacyStatus.PRIVATE
            status["publishAt"] = options.publish_at
        status["privacyStatus"] = privacy.value

        return {
            "snippet": {
                "title": options.title,
                "description": options.description,
                "tags": options.tags,
                "categoryId": options.category_id,
                "defaultLanguage": language,
                "defaultAudioLanguage": language,
            },
            "status": status,
        }

    def upload_video(
        self,
        video_path: str,
        thumbnail_path: Optional[str],
        options: UploadOptions,
        on_progress: Optional[ProgressCallback] = None
    ) -> UploadResult:
        """
        Upload one video, then attach the thumbnail and playlist entry

        Args:
            video_path: Local video file
            thumbnail_path: Optional local thumbnail image
            options: Title, description, tags, privacy and scheduling
            on_progress: Called with 0-100 as bytes are sent

        Returns:
            UploadResult. Primary upload failures are retryable; thumbnail or
            playlist failures are not, since the video already exists.
        """
        logger.info(f"Starting video upload: {video_path} ({options.title!r})")

        try:
            file_size = os.path.getsize(video_path)
            media = MediaFileUpload(
                video_path,
                mimetype="video/*",
                chunksize=self.chunk_size,
                resumable=True
            )
            request = self.youtube.videos().insert(
                part="snippet,status",
                body=self._video_body(options),
                media_body=media
            )

            response = None
            while response is None:
                status, response = request.next_chunk()
                if status is not None:
                    progress = (status.resumable_progress / file_size) * 100 if file_size else 0.0
                    logger.debug(f"Upload progress: {progress:.2f}%")
                    if on_progress:
                        on_progress(progress)

            video_id = response.get("id")
            if not video_id:
                raise ValueError(f"Upload response did not include a video id: {response}")
        except Exception as e:
            logger.error(f"Error uploading video: {e}", exc_info=True)
            return UploadResult(success=False, error=str(e))

        if on_progress:
            on_progress(100.0)

        video_url = WATCH_URL.format(video_id=video_id)
        logger.info(f"Video uploaded successfully: {video_id} {video_url}")

        try:
            if thumbnail_path:
                self.upload_thumbnail(video_id, thumbnail_path)
            if options.playlist_id:
                self.add_to_playlist(video_id, options.playlist_id)
        except Exception as e:
            return UploadResult(
                success=False,
                video_id=video_id,
                video_url=video_url,
                error=f"Video {video_id} uploaded but post-processing failed: {e}",
                retryable=False
            )

        return UploadResult(success=True, video_id=video_id, video_url=video_url)

    def upload_thumbnail(self, video_id: str, thumbnail_path: str) -> None:
        """Set the custom thumbnail of an uploaded video"""
        logger.info(f"Uploading thumbnail for {video_id}: {thumbnail_path}")
        try:
            self.youtube.thumbnails().set(
                videoId=video_id,
                media_body=MediaFileUpload(thumbnail_path)
            ).execute()
        except Exception as e:
            logger.error(f"Error uploading thumbnail: {e}", exc_info=True)
            raise
        logger.info(f"Thumbnail uploaded successfully: {video_id}")

    def add_to_playlist(self, video_id: str, playlist_id: str) -> None:
        """Append an uploaded video to a playlist"""
        logger.info(f"Adding video {video_id} to playlist {playlist_id}")
        try:
            self.youtube.playlistItems().insert(
                part="snippet",
                body={
                    "snippet": {
                        "playlistId": playlist_id,
                        "resourceId": {
                            "kind": "youtube#video",
                            "videoId": video_id,
                        },
                    }
                }
            ).execute()
        except Exception as e:
            logger.error(f"Error adding video to playlist: {e}", exc_info=True)
            raise
        logger.info(f"Video added to playlist successfully: {video_id} -> {playlist_id}")

    def retry_upload(
        self,
        video_path: str,
        thumbnail_path: Optional[str],
        options: UploadOptions,
        max_retries: int = 3,
        on_progress: Optional[ProgressCallback] = None
    ) -> UploadResult:
        """
        Call upload_video up to max_retries times with exponential backoff

        Waits 2**attempt seconds after each failed attempt (2s, 4s, ...).
        A non-retryable result is returned immediately.
        """
        last_error = ""

        for attempt in range(1, max_retries + 1):
            logger.info(f"Upload attempt {attempt}/{max_retries}")

            result = self.upload_video(video_path, thumbnail_path, options, on_progress)
            if result.success or not result.retryable:
                return result

            last_error = result.error or "Unknown error"
            logger.warning(f"Upload attempt {attempt} failed: {last_error}")

            if attempt < max_retries:
                delay = 2 ** attempt
                logger.info(f"Waiting {delay}s before retry")
                self._sleep(delay)

        return UploadResult(
            success=False,
            error=f"Failed after {max_retries} attempts. Last error: {last_error}"
        )


def build_youtube_client(settings: Settings, credential: Optional[StoredCredential] = None) -> YouTubeClient:
    """Default factory used by the upload pipeline and auth routes"""
    return YouTubeClient(settings, credential)
