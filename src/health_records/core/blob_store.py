# ============================================================================
# src/health_records/core/blob_store.py
# ============================================================================
"""
Local-directory blob store for uploaded report files.

store() returns a stable URL; delete() removes the file behind it. File
bytes are only read back at extraction time, which uses the upload buffer
directly, so there is no read path here.
"""

import logging
import re
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads/"


class BlobStore:

    def __init__(self, root: Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def store(self, data: bytes, filename: str) -> str:
        safe_name = re.sub(r"[^A-Za-z0-9._-]", "_", Path(filename).name) or "upload"
        blob_name = f"{uuid.uuid4()}_{safe_name}"
        (self.root / blob_name).write_bytes(data)
        logger.debug(f"Stored {len(data)} bytes as {blob_name}")
        return f"{URL_PREFIX}{blob_name}"

    def delete(self, url: str) -> None:
        if not url.startswith(URL_PREFIX):
            logger.warning(f"Not a local blob URL, skipping delete: {url}")
            return
        path = self.root / Path(url[len(URL_PREFIX):]).name
        path.unlink(missing_ok=True)
