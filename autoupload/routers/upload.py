"""
Upload Router - Streams upload progress as server-sent events
"""
import logging
from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import StreamingResponse

from ..config import Settings, get_settings
from ..dependencies import get_upload_pipeline
from ..models.schemas import ErrorResponse, ProgressEvent, ScheduleResponse, Stage
from ..services.metadata_generator import generate_schedule_time
from ..services.upload_pipeline import UploadForm, UploadPipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["upload"])

# Stages during which the multipart files are still being read
_FORM_STAGES = {Stage.PARSING, Stage.SAVING}


async def _replay(buffered: list[ProgressEvent], events: AsyncIterator[ProgressEvent]) -> AsyncIterator[str]:
    for event in buffered:
        yield event.to_sse()
    async for event in events:
        yield event.to_sse()


@router.post("")
async def upload_video(
    video: Optional[UploadFile] = File(None),
    thumbnail: Optional[UploadFile] = File(None),
    topic: Optional[str] = Form(None),
    summary: Optional[str] = Form(None),
    language: Optional[str] = Form(None),
    privacy: Optional[str] = Form(None),
    scheduleTime: Optional[str] = Form(None),
    pipeline: UploadPipeline = Depends(get_upload_pipeline)
):
    """
    Upload a video to YouTube

    - Validates the video (and thumbnail)
    - Generates title, description and tags
    - Uploads with retry, attaching thumbnail and playlist
    - Responds with `data: <ProgressEvent JSON>` frames
    """
    form = UploadForm(
        video=video,
        thumbnail=thumbnail,
        topic=topic,
        summary=summary,
        language=language,
        privacy=privacy,
        schedule_time=scheduleTime
    )
    events = pipeline.run(form)

    # Form files are closed once this handler returns, so the pipeline is
    # advanced here until the uploads have been written to disk.
    buffered = []
    async for event in events:
        buffered.append(event)
        if event.stage not in _FORM_STAGES:
            break

    return StreamingResponse(
        _replay(buffered, events),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        }
    )


@router.get(
    "/next-schedule",
    response_model=ScheduleResponse,
    response_model_by_alias=True,
    responses={400: {"model": ErrorResponse}}
)
async def next_schedule(
    uploads_per_week: int = Query(3),
    settings: Settings = Depends(get_settings)
):
    """Suggest the next publish slot for the schedule field"""
    try:
        schedule_time = generate_schedule_time(
            uploads_per_week,
            timezone=settings.schedule_timezone,
            hour=settings.schedule_hour
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ScheduleResponse(schedule_time=schedule_time)
