import io
import logging
import unittest
from datetime import datetime, timezone
from pathlib import Path

from s3_fetch.errors import LocalWriteError, RemoteListingError, S3FetchError, log_and_reraise
from s3_fetch.models import DownloadTarget, ListingPage, ObjectEntry
from s3_fetch.progress import NullProgress, TqdmProgress
from s3_fetch.utils import human_bytes


class ObjectEntryTests(unittest.TestCase):
    def test_folder_marker_detection(self):
        self.assertTrue(ObjectEntry("docs/").is_folder_marker)
        self.assertFalse(ObjectEntry("docs/readme.txt").is_folder_marker)
        self.assertFalse(ObjectEntry("docs").is_folder_marker)

    def test_from_s3(self):
        modified = datetime(2024, 1, 2, tzinfo=timezone.utc)

        entry = ObjectEntry.from_s3({"Key": "a/b.txt", "Size": 12, "LastModified": modified, "ETag": '"x"'})

        self.assertEqual(ObjectEntry("a/b.txt", 12, modified), entry)

    def test_listing_page_has_more(self):
        self.assertFalse(ListingPage(prefix="").has_more)
        self.assertTrue(ListingPage(prefix="", continuation_token="t").has_more)


class DownloadTargetTests(unittest.TestCase):
    def test_key_is_joined_onto_root(self):
        target = DownloadTarget.for_entry(ObjectEntry("a/b/c.txt"), "/data/out")

        self.assertEqual(Path("/data/out/a/b/c.txt"), target.local_path)
        self.assertEqual("a/b/c.txt", target.key)

    def test_folder_marker_maps_to_directory_path(self):
        target = DownloadTarget.for_entry(ObjectEntry("docs/"), "/data/out")

        self.assertEqual(Path("/data/out/docs"), target.local_path)

    def test_rejects_escaping_keys(self):
        for key in ("../x", "a/../../x", "/etc/passwd"):
            with self.assertRaises(LocalWriteError, msg=key):
                DownloadTarget.for_entry(ObjectEntry(key), "/data/out")


class ProgressTests(unittest.TestCase):
    def test_tqdm_progress_counts_and_closes(self):
        out = io.StringIO()
        progress = TqdmProgress(file=out, ascii=True)

        progress.start(3)
        for _ in range(3):
            progress.increment()
        progress.stop()
        progress.stop()

        self.assertIn("3/3", out.getvalue())

    def test_increment_before_start_is_ignored(self):
        TqdmProgress().increment()
        NullProgress().increment()


class ErrorsTests(unittest.TestCase):
    def test_log_and_reraise_wraps_foreign_errors(self):
        @log_and_reraise(RemoteListingError)
        def boom():
            raise KeyError("Prefix")

        with self.assertLogs(__name__, level=logging.ERROR):
            with self.assertRaises(RemoteListingError) as ctx:
                boom()

        self.assertIsInstance(ctx.exception, S3FetchError)
        self.assertIsInstance(ctx.exception.__cause__, KeyError)

    def test_log_and_reraise_passes_own_errors_through(self):
        @log_and_reraise(RemoteListingError)
        def boom():
            raise LocalWriteError("disk full")

        with self.assertRaises(LocalWriteError):
            boom()


class HumanBytesTests(unittest.TestCase):
    def test_units(self):
        self.assertEqual("512.0 B", human_bytes(512))
        self.assertEqual("1.5 KB", human_bytes(1536))
        self.assertEqual("2.0 GB", human_bytes(2 * 1024 ** 3))


if __name__ == "__main__":
    unittest.main()
