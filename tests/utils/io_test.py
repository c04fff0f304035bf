import os
import tempfile
from unittest import TestCase

from kvharness.utils import io


class IoTests(TestCase):
    def test_normalize_path(self):
        self.assertEqual("/already/a/normalized/path", io.normalize_path("/already/a/normalized/path"))
        self.assertEqual("/not/normalized", io.normalize_path("/not/normalized/path/../"))
        self.assertEqual(os.path.expanduser("~"), io.normalize_path("~/Documents/.."))
        self.assertEqual(os.path.join(".", "n1.log"), io.normalize_path("n1.log"))

    def test_remove_file_and_directory(self):
        with tempfile.TemporaryDirectory() as tmp:
            state_file = os.path.join(tmp, "127.0.0.1:21001.db")
            state_dir = os.path.join(tmp, "127.0.0.1:21002.db")
            os.makedirs(os.path.join(state_dir, "nested"))
            with open(state_file, "w", encoding="utf-8") as f:
                f.write("x")

            io.remove_path(state_file)
            io.remove_path(state_dir)

            self.assertEqual([], os.listdir(tmp))

    def test_is_executable(self):
        with tempfile.TemporaryDirectory() as tmp:
            binary = os.path.join(tmp, "service")
            with open(binary, "w", encoding="utf-8") as f:
                f.write("#!/bin/sh\n")
            self.assertFalse(io.is_executable(binary))
            os.chmod(binary, 0o755)
            self.assertTrue(io.is_executable(binary))
            self.assertFalse(io.is_executable(tmp))
