"""Tests for local object storage."""
import unittest
import tempfile
import shutil
from pathlib import Path
from urllib.parse import parse_qs, urlparse, unquote

from finsight.storage import ObjectStore
from finsight.utils.exceptions import StorageError


class TestObjectStore(unittest.TestCase):
    """Test ObjectStore functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = Path(tempfile.mkdtemp())
        self.store = ObjectStore(self.test_dir, "secret", signed_url_seconds=60)

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_upload_download_remove(self):
        """Test the object lifecycle."""
        self.store.upload("documents", "user-1/a.pdf", b"data")

        self.assertEqual(self.store.download("documents", "user-1/a.pdf"), b"data")
        self.assertEqual(self.store.remove("documents", ["user-1/a.pdf", "user-1/missing.pdf"]), 1)
        self.assertFalse(self.store.exists("documents", "user-1/a.pdf"))

    def test_no_overwrite(self):
        """Test uploads never replace an object."""
        self.store.upload("receipts", "r.png", b"one")

        with self.assertRaises(StorageError):
            self.store.upload("receipts", "r.png", b"two")
        self.assertEqual(self.store.download("receipts", "r.png"), b"one")

    def test_rejects_unsafe_paths(self):
        """Test unknown buckets and traversal."""
        for bucket, path in (("avatars", "a.png"), ("documents", "../secret"), ("documents", "/etc/passwd")):
            with self.assertRaises(StorageError):
                self.store.upload(bucket, path, b"x")

    def test_missing_object(self):
        """Test downloading something that is not there."""
        with self.assertRaises(StorageError):
            self.store.download("documents", "nothing.pdf")

    def test_signed_url(self):
        """Test signed URLs verify until they expire."""
        url = urlparse(self.store.create_signed_url("receipts", "user 1/r.png"))
        query = parse_qs(url.query)
        expires, token = int(query["expires"][0]), query["token"][0]
        path = unquote(url.path[len("/storage/receipts/"):])

        self.assertEqual(path, "user 1/r.png")
        self.assertTrue(self.store.verify_signed_url("receipts", path, expires, token))
        self.assertFalse(self.store.verify_signed_url("receipts", "user 1/other.png", expires, token))
        self.assertFalse(self.store.verify_signed_url("receipts", path, expires - 3600, token))


if __name__ == "__main__":
    unittest.main()
