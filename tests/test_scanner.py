import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from wav_filter.models import DirectoryReadError
from wav_filter.scanner import DirectoryWalker


class TestDirectoryWalker(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_yields_regular_files_recursively(self) -> None:
        (self.root / "a" / "b").mkdir(parents=True)
        (self.root / "top.wav").write_bytes(b"x")
        (self.root / "a" / "mid.txt").write_bytes(b"x")
        (self.root / "a" / "b" / "deep.wav").write_bytes(b"x")

        files = list(DirectoryWalker(self.root).iter_files())

        self.assertEqual(
            sorted(files),
            sorted(
                [
                    self.root / "top.wav",
                    self.root / "a" / "mid.txt",
                    self.root / "a" / "b" / "deep.wav",
                ]
            ),
        )

    def test_directories_are_not_yielded(self) -> None:
        (self.root / "only_dirs" / "nested").mkdir(parents=True)
        self.assertEqual(list(DirectoryWalker(self.root).iter_files()), [])

    def test_is_lazy(self) -> None:
        (self.root / "one.wav").write_bytes(b"x")
        iterator = DirectoryWalker(self.root).iter_files()
        self.assertEqual(next(iterator), self.root / "one.wav")
        with self.assertRaises(StopIteration):
            next(iterator)

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks unsupported")
    def test_symlinks_are_not_followed(self) -> None:
        outside = tempfile.TemporaryDirectory()
        self.addCleanup(outside.cleanup)
        outside_dir = Path(outside.name)
        (outside_dir / "elsewhere.wav").write_bytes(b"x")
        (self.root / "real.wav").write_bytes(b"x")
        (self.root / "linked_dir").symlink_to(outside_dir, target_is_directory=True)
        (self.root / "linked.wav").symlink_to(self.root / "real.wav")
        (self.root / "dangling.wav").symlink_to(self.root / "missing.wav")

        files = list(DirectoryWalker(self.root).iter_files())

        self.assertEqual(files, [self.root / "real.wav"])

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks unsupported")
    def test_symlink_cycle_terminates(self) -> None:
        loop_dir = self.root / "loop"
        loop_dir.mkdir()
        (loop_dir / "inner.wav").write_bytes(b"x")
        (loop_dir / "back").symlink_to(self.root, target_is_directory=True)

        files = list(DirectoryWalker(self.root).iter_files())

        self.assertEqual(files, [loop_dir / "inner.wav"])

    def test_missing_root_raises(self) -> None:
        with self.assertRaises(DirectoryReadError):
            list(DirectoryWalker(self.root / "absent").iter_files())

    def test_unreadable_directory_aborts_walk(self) -> None:
        (self.root / "a").mkdir()
        (self.root / "a" / "x.wav").write_bytes(b"x")
        real_scandir = os.scandir

        def failing_scandir(path):
            if Path(os.fsdecode(path)) == self.root / "a":
                raise PermissionError(13, "Permission denied", os.fsdecode(path))
            return real_scandir(path)

        with patch("os.scandir", side_effect=failing_scandir):
            with self.assertRaises(DirectoryReadError) as ctx:
                list(DirectoryWalker(self.root).iter_files())
        self.assertEqual(ctx.exception.path, self.root / "a")
        self.assertIsInstance(ctx.exception.cause, PermissionError)


if __name__ == "__main__":
    unittest.main()
