"""Local-directory object storage with signed URLs."""
import time
import hmac
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional
from urllib.parse import quote

from finsight.utils.auth import sign
from finsight.utils.exceptions import StorageError
from finsight.utils.logger import get_logger

logger = get_logger()


class ObjectStore:
    """Stores objects as files under <root>/<bucket>/<path>."""

    BUCKETS = ("documents", "receipts")

    def __init__(self, root: Path, secret: str, signed_url_seconds: int = 3600):
        """
        Initialize object store.

        Args:
            root: Directory holding one sub-directory per bucket
            secret: Key used to sign download URLs
            signed_url_seconds: Default lifetime of signed URLs
        """
        self.root = Path(root)
        self.secret = secret
        self.signed_url_seconds = signed_url_seconds
        for bucket in self.BUCKETS:
            (self.root / bucket).mkdir(parents=True, exist_ok=True)

    def upload(self, bucket: str, path: str, data: bytes) -> str:
        """Write data to bucket/path, refusing to overwrite."""
        target = self._resolve(bucket, path)
        if target.exists():
            raise StorageError(f"Object already exists: {bucket}/{path}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.debug(f"Stored {len(data)} bytes at {bucket}/{path}")
        return path

    def download(self, bucket: str, path: str) -> bytes:
        """Read the object at bucket/path."""
        target = self._resolve(bucket, path)
        if not target.is_file():
            raise StorageError(f"Object not found: {bucket}/{path}")
        return target.read_bytes()

    def remove(self, bucket: str, paths: Iterable[str]) -> int:
        """Delete objects, returning how many existed."""
        removed = 0
        for path in paths:
            target = self._resolve(bucket, path)
            if target.is_file():
                target.unlink()
                removed += 1
        return removed

    def exists(self, bucket: str, path: str) -> bool:
        return self._resolve(bucket, path).is_file()

    def create_signed_url(self, bucket: str, path: str, expires_in: Optional[int] = None) -> str:
        """Build a time-limited download URL for an object."""
        expires_at = int(time.time()) + (expires_in or self.signed_url_seconds)
        token = sign(self.secret, f"{bucket}/{path}:{expires_at}")
        return f"/storage/{bucket}/{quote(path)}?expires={expires_at}&token={token}"

    def verify_signed_url(self, bucket: str, path: str, expires: int, token: str) -> bool:
        """Check a signed URL's token and expiry."""
        if expires < int(time.time()):
            return False
        expected = sign(self.secret, f"{bucket}/{path}:{expires}")
        return hmac.compare_digest(expected, token)

    def _resolve(self, bucket: str, path: str) -> Path:
        if bucket not in self.BUCKETS:
            raise StorageError(f"Unknown bucket: {bucket}")
        parts = PurePosixPath(path).parts
        if not parts or path.startswith("/") or ".." in parts:
            raise StorageError(f"Invalid object path: {path}")
        return self.root / bucket / Path(*parts)
