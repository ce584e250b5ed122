"""
FFprobe utility for video inspection
"""
import subprocess
import json
import shutil
from typing import Optional

from ..exceptions import ProbeError


def check_ffmpeg_installed() -> bool:
    """Check if ffprobe is installed"""
    if shutil.which("ffprobe") is None:
        return False
    try:
        subprocess.run(
            ["ffprobe", "-version"],
            capture_output=True,
            check=True
        )
        return True
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False


def parse_frame_rate(rate: Optional[str], default: float = 30.0) -> float:
    """
    Parse an ffprobe rational frame rate such as "30000/1001"

    Args:
        rate: Rational string "num/den" (or a bare integer)
        default: Value used when the stream reports no rate

    Returns:
        Frames per second, 0.0 for "0/0" or malformed input
    """
    if not rate:
        return default

    numerator, _, denominator = rate.partition("/")
    try:
        num = int(numerator)
        den = int(denominator) if denominator else 1
    except ValueError:
        return 0.0

    if den == 0:
        return 0.0
    return num / den


class MediaProber:
    """
    Thin wrapper around the ffprobe binary

    Injected into the video validator so tests can replace it.
    """

    def __init__(self, binary: str = "ffprobe", timeout: int = 60):
        self.binary = binary
        self.timeout = timeout
        self._available: Optional[bool] = None

    def available(self) -> bool:
        """Check (once) whether the ffprobe binary can be executed"""
        if self._available is None:
            if self.binary == "ffprobe":
                self._available = check_ffmpeg_installed()
            else:
                self._available = shutil.which(self.binary) is not None
        return self._available

    def probe(self, file_path: str) -> dict:
        """
        Get container and stream information

        Args:
            file_path: Path to the media file

        Returns:
            Parsed ffprobe JSON with "format" and "streams" keys

        Raises:
            ProbeError: if ffprobe fails or prints invalid JSON
        """
        try:
            result = subprocess.run(
                [
                    self.binary,
                    "-v", "quiet",
                    "-print_format", "json",
                    "-show_format",
                    "-show_streams",
                    str(file_path)
                ],
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout
            )
            return json.loads(result.stdout)
        except subprocess.CalledProcessError as e:
            raise ProbeError(f"ffprobe failed for {file_path}: {e.stderr or e.returncode}") from e
        except subprocess.TimeoutExpired as e:
            raise ProbeError(f"ffprobe timed out after {self.timeout}s") from e
        except json.JSONDecodeError as e:
            raise ProbeError(f"Invalid ffprobe output: {e}") from e


def get_video_duration(info: dict) -> float:
    """Duration in seconds from ffprobe output, 0.0 if absent"""
    try:
        return float(info.get("format", {}).get("duration") or 0)
    except (TypeError, ValueError):
        return 0.0
