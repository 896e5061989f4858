from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import BinaryIO, Protocol
from uuid import uuid4

from chaitube.services._shared.errors import MediaStoreError


@dataclass(frozen=True, slots=True)
class MediaUpload:
    """
    A file handed over by the transport layer.

    :param stream: Readable binary stream positioned at the start of the file.
    :param filename: Client-supplied filename (untrusted).
    :param content_type: Client-supplied MIME type, if any.
    """

    stream: BinaryIO
    filename: str
    content_type: str | None = None


class MediaStore(Protocol):
    """Port for the external media host (avatars, cover images)."""

    def store(self, upload: MediaUpload) -> str:
        """Persist ``upload`` and return its public URL.

        :raises MediaStoreError: When the upload fails.
        """

    def destroy(self, url: str) -> None:
        """Delete media previously returned by :meth:`store`.

        :raises MediaStoreError: When the delete fails.
        """


class InMemoryMediaStore(MediaStore):
    """
    Media store keeping uploads in a dict; used in tests and local tooling.

    ``fail_uploads`` makes every :meth:`store` call fail, to exercise the
    error paths of callers.
    """

    def __init__(self, *, url_prefix: str = "memory://media", fail_uploads: bool = False) -> None:
        self.url_prefix = url_prefix.rstrip("/")
        self.fail_uploads = fail_uploads
        self.objects: dict[str, bytes] = {}
        self.destroyed: list[str] = []
        self._lock = threading.Lock()

    def store(self, upload: MediaUpload) -> str:
        if self.fail_uploads:
            raise MediaStoreError("Upload rejected by media store")
        url = f"{self.url_prefix}/{uuid4().hex}-{upload.filename}"
        with self._lock:
            self.objects[url] = upload.stream.read()
        return url

    def destroy(self, url: str) -> None:
        with self._lock:
            if self.objects.pop(url, None) is None:
                raise MediaStoreError(f"Unknown media: {url}")
            self.destroyed.append(url)
