# chaitube/infra/media/local_media_store.py
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from uuid import uuid4

from werkzeug.utils import secure_filename

from chaitube.services._shared.errors import MediaStoreError
from chaitube.services._shared.ports import MediaStore, MediaUpload

log = logging.getLogger(__name__)


class LocalMediaStore(MediaStore):
    """
    Filesystem-backed media store.

    Files land under ``root`` as ``<random hex>-<sanitized name>`` and are
    addressed publicly as ``<url_prefix>/<stored name>``. Only names produced
    by :meth:`store` can be destroyed; anything resolving outside ``root`` is
    rejected.

    :param root: Target directory; created on first write.
    :param url_prefix: Public prefix for returned URLs.
    """

    def __init__(self, root: str | Path, url_prefix: str = "/media") -> None:
        self.root = Path(root).resolve()
        self.url_prefix = url_prefix.rstrip("/")

    def store(self, upload: MediaUpload) -> str:
        name = secure_filename(upload.filename or "") or "upload"
        stored_name = f"{uuid4().hex}-{name}"
        target = self.root / stored_name
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as fh:
                shutil.copyfileobj(upload.stream, fh)
        except OSError as exc:
            raise MediaStoreError(f"Could not write {stored_name}") from exc
        log.info("media.stored name=%s", stored_name)
        return f"{self.url_prefix}/{stored_name}"

    def destroy(self, url: str) -> None:
        target = self._path_for(url)
        try:
            target.unlink()
        except OSError as exc:
            raise MediaStoreError(f"Could not delete {target.name}") from exc

    def _path_for(self, url: str) -> Path:
        prefix = f"{self.url_prefix}/"
        if not url.startswith(prefix):
            raise MediaStoreError(f"Not a local media URL: {url}")
        target = (self.root / url[len(prefix):]).resolve()
        if target.parent != self.root:
            raise MediaStoreError(f"Not a local media URL: {url}")
        return target
