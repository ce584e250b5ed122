import asyncio
import json
import os
import time
from datetime import datetime

import pytest

from autoupload.exceptions import UploadInputError
from autoupload.models.schemas import StoredCredential
from autoupload.services.credential_store import FileCredentialStore, MemoryCredentialStore
from autoupload.services.file_cleanup import cleanup_old_files
from autoupload.services.file_storage import file_extension, remove_files, save_upload, unique_filename
from conftest import make_upload


def test_save_upload_writes_file(tmp_path):
    path = asyncio.run(save_upload(make_upload(b"abc" * 1000), str(tmp_path / "uploads"), "video", "mp4"))

    assert os.path.basename(path).startswith("video_")
    assert path.endswith(".mp4")
    with open(path, "rb") as f:
        assert f.read() == b"abc" * 1000


def test_save_upload_rejects_oversized_file(tmp_path):
    directory = tmp_path / "uploads"
    with pytest.raises(UploadInputError):
        asyncio.run(save_upload(make_upload(b"\0" * 2048), str(directory), "thumbnail", "jpg", max_bytes=1024))
    assert list(directory.iterdir()) == []


def test_unique_filenames_differ():
    assert unique_filename("video", "mp4") != unique_filename("video", "mp4")


def test_file_extension():
    assert file_extension("Cover.JPEG", "jpg") == "jpeg"
    assert file_extension("cover", "jpg") == "jpg"
    assert file_extension(None, "jpg") == "jpg"


def test_remove_files_ignores_missing(tmp_path):
    existing = tmp_path / "a.mp4"
    existing.write_bytes(b"x")
    remove_files(str(existing), None, str(tmp_path / "missing.mp4"))
    assert not existing.exists()


def test_cleanup_removes_only_stale_files(settings):
    settings.ensure_directories()
    stale = os.path.join(settings.upload_dir, "video_old.mp4")
    fresh = os.path.join(settings.upload_dir, "video_new.mp4")
    for path in (stale, fresh):
        with open(path, "wb") as f:
            f.write(b"x")
    three_hours_ago = time.time() - 3 * 3600
    os.utime(stale, (three_hours_ago, three_hours_ago))

    removed = asyncio.run(cleanup_old_files(settings, now=datetime.now()))

    assert removed == 1
    assert not os.path.exists(stale)
    assert os.path.exists(fresh)


def test_cleanup_without_upload_dir(settings):
    assert asyncio.run(cleanup_old_files(settings)) == 0


def test_file_credential_store_round_trip(tmp_path):
    path = tmp_path / "tokens.json"
    store = FileCredentialStore(str(path))
    assert store.load() is None
    assert not store.is_authenticated()

    store.save(StoredCredential(access_token="a", refresh_token="r"))

    assert json.loads(path.read_text()) == {"accessToken": "a", "refreshToken": "r"}
    assert store.load() == StoredCredential(access_token="a", refresh_token="r")
    assert store.is_authenticated()


def test_file_credential_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "tokens.json"
    path.write_text("{not json")
    assert FileCredentialStore(str(path)).load() is None

    path.write_text(json.dumps({"accessToken": "a"}))
    assert FileCredentialStore(str(path)).load() is None


def test_memory_credential_store():
    store = MemoryCredentialStore()
    assert store.load() is None
    store.save(StoredCredential(access_token="a", refresh_token="r"))
    assert store.is_authenticated()
