"""
File Cleanup Service - Removes temp uploads left behind by failed requests
"""
import asyncio
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)


async def cleanup_old_files(settings: Optional[Settings] = None, now: Optional[datetime] = None) -> int:
    """
    Remove upload files older than the configured TTL

    Returns:
        Number of files removed
    """
    settings = settings or get_settings()
    ttl = timedelta(hours=settings.file_ttl_hours)
    now = now or datetime.now()
    removed = 0

    upload_dir = Path(settings.upload_dir)
    if not upload_dir.exists():
        return removed

    for file_path in upload_dir.iterdir():
        if not file_path.is_file():
            continue
        file_age = datetime.fromtimestamp(file_path.stat().st_mtime)
        if now - file_age > ttl:
            try:
                file_path.unlink()
                removed += 1
                logger.info(f"Cleaned up upload: {file_path.name}")
            except OSError as e:
                logger.warning(f"Failed to delete {file_path}: {e}")

    return removed


async def start_cleanup_scheduler():
    """
    Start the periodic cleanup scheduler

    Runs cleanup at configured intervals
    """
    settings = get_settings()
    interval = settings.cleanup_interval_minutes * 60

    while True:
        await asyncio.sleep(interval)
        try:
            await cleanup_old_files(settings)
        except Exception as e:
            logger.error(f"Cleanup error: {e}", exc_info=True)
