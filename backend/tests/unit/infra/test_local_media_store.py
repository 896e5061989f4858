"""Unit tests for the filesystem media store."""

from __future__ import annotations

import io

import pytest

from chaitube.infra.media.local_media_store import LocalMediaStore
from chaitube.services._shared.errors import MediaStoreError
from chaitube.services._shared.ports import MediaUpload
from tests.helpers.utils import not_raises


@pytest.fixture()
def store(tmp_path) -> LocalMediaStore:
    return LocalMediaStore(tmp_path / "media", url_prefix="/media/")


def _upload(name: str, payload: bytes = b"bytes") -> MediaUpload:
    return MediaUpload(stream=io.BytesIO(payload), filename=name)


class TestLocalMediaStore:
    def test_store_writes_file_and_returns_url(self, store):
        url = store.store(_upload("avatar.png", b"\x89PNG"))

        assert url.startswith("/media/")
        assert url.endswith("-avatar.png")
        stored = store.root / url.rsplit("/", 1)[1]
        assert stored.read_bytes() == b"\x89PNG"

    def test_filenames_are_sanitized(self, store):
        """
        GIVEN a client filename with path traversal
        WHEN it is stored
        THEN the file lands directly under the media root.
        """
        url = store.store(_upload("../../etc/passwd"))
        stored = store.root / url.rsplit("/", 1)[1]

        assert stored.parent == store.root
        assert ".." not in url

    def test_same_name_twice_gives_two_files(self, store):
        first = store.store(_upload("a.png"))
        second = store.store(_upload("a.png"))
        assert first != second

    def test_destroy_removes_file(self, store):
        url = store.store(_upload("cover.png"))
        with not_raises(MediaStoreError):
            store.destroy(url)
        assert not (store.root / url.rsplit("/", 1)[1]).exists()

    @pytest.mark.parametrize(
        "url", ["https://cdn.example.com/a.png", "/media/../secrets.txt", "/media/x/y.png"]
    )
    def test_destroy_rejects_foreign_urls(self, store, url):
        with pytest.raises(MediaStoreError):
            store.destroy(url)

    def test_destroy_missing_file_fails(self, store):
        with pytest.raises(MediaStoreError):
            store.destroy("/media/does-not-exist.png")

    def test_unwritable_root_raises_media_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = LocalMediaStore(blocker / "media")

        with pytest.raises(MediaStoreError):
            store.store(_upload("a.png"))
