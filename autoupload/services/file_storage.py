"""
File Storage - Saves multipart uploads to the uploads directory and removes them afterwards
"""
import os
import time
import uuid
import logging
from pathlib import Path
from typing import Optional

from ..exceptions import UploadInputError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1MB chunks


def unique_filename(prefix: str, extension: str) -> str:
    """e.g. video_1718000000000_1a2b3c4d.mp4"""
    extension = extension.lstrip(".") or "bin"
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.{extension}"


def file_extension(filename: Optional[str], default: str) -> str:
    suffix = Path(filename or "").suffix.lower().lstrip(".")
    return suffix or default


async def save_upload(
    upload,
    directory: str,
    prefix: str,
    extension: str,
    max_bytes: Optional[int] = None
) -> str:
    """
    Stream an uploaded file to disk

    Args:
        upload: Object with an async read(size) method (starlette UploadFile)
        directory: Destination directory, created if missing
        prefix: Filename prefix ("video", "thumbnail")
        extension: Filename extension
        max_bytes: Reject files larger than this

    Returns:
        Path of the saved file

    Raises:
        UploadInputError: if the file exceeds max_bytes (partial file removed)
    """
    Path(directory).mkdir(parents=True, exist_ok=True)
    file_path = os.path.join(directory, unique_filename(prefix, extension))

    total_size = 0
    try:
        with open(file_path, "wb") as f:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                total_size += len(chunk)

                if max_bytes is not None and total_size > max_bytes:
                    raise UploadInputError(
                        f"{prefix.capitalize()} file too large. Maximum size: {max_bytes // (1024 * 1024)}MB"
                    )

                f.write(chunk)
    except Exception:
        remove_files(file_path)
        raise

    logger.info(f"Saved {prefix} upload to {file_path} ({total_size} bytes)")
    return file_path


def remove_files(*paths: Optional[str]) -> None:
    """Delete the given files, ignoring None and already-removed paths"""
    for path in paths:
        if not path:
            continue
        try:
            os.remove(path)
            logger.info(f"Removed temp file: {path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to delete {path}: {e}")
