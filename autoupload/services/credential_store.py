"""
Credential Store - Persists the YouTube OAuth token pair
"""
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ..models.schemas import StoredCredential

logger = logging.getLogger(__name__)


class CredentialStore(ABC):
    """Load/save interface for the stored OAuth credential"""

    @abstractmethod
    def load(self) -> Optional[StoredCredential]:
        """Return the stored credential, or None if there is no usable one"""

    @abstractmethod
    def save(self, credential: StoredCredential) -> None:
        """Replace the stored credential"""

    def is_authenticated(self) -> bool:
        credential = self.load()
        return bool(credential and credential.access_token and credential.refresh_token)


class FileCredentialStore(CredentialStore):
    """
    JSON file holding {"accessToken": ..., "refreshToken": ...}

    Not locked; one server process is expected to own the file.
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def load(self) -> Optional[StoredCredential]:
        if not self.path.exists():
            return None
        try:
            return StoredCredential.model_validate(json.loads(self.path.read_text(encoding="utf-8")))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Could not read stored credential from {self.path}: {e}")
            return None

    def save(self, credential: StoredCredential) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            credential.model_dump_json(by_alias=True, indent=2),
            encoding="utf-8"
        )
        logger.info(f"Stored OAuth credential in {self.path}")


class MemoryCredentialStore(CredentialStore):
    """In-process store, used when no file should be touched"""

    def __init__(self, credential: Optional[StoredCredential] = None):
        self._credential = credential

    def load(self) -> Optional[StoredCredential]:
        return self._credential

    def save(self, credential: StoredCredential) -> None:
        self._credential = credential
