"""
Exceptions raised by the upload backend
"""


class UploadInputError(ValueError):
    """Missing or malformed upload form data"""


class ProbeError(RuntimeError):
    """ffprobe could not read a media file"""


class AuthenticationError(RuntimeError):
    """OAuth code exchange failed or no stored credential is usable"""
