# Copyright Red Hat
#
# tests/compare/test_entry.py - Entry and relative path tests.
#
# This file is part of the xattrdiff project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest

from xattrdiff import XattrDiffPathError
from xattrdiff.compare.entry import relative_path


class TestRelativePath(unittest.TestCase):
    def test_simple(self):
        self.assertEqual(relative_path("/srv/a", "/srv/a/x"), "x")
        self.assertEqual(relative_path("/srv/a", "/srv/a/d/x"), "d/x")

    def test_trailing_separator(self):
        self.assertEqual(relative_path("/srv/a/", "/srv/a/x"), "x")

    def test_relative_roots(self):
        self.assertEqual(relative_path(".", "./x"), "x")
        self.assertEqual(relative_path("a", "a/x"), "x")

    def test_filesystem_root(self):
        self.assertEqual(relative_path("/", "/etc/passwd"), "etc/passwd")

    def test_not_beneath_root(self):
        with self.assertRaises(XattrDiffPathError) as cm:
            relative_path("/srv/a", "/srv/ab/x")
        self.assertEqual(cm.exception.root, "/srv/a")
        self.assertEqual(cm.exception.path, "/srv/ab/x")

    def test_root_itself(self):
        with self.assertRaises(XattrDiffPathError):
            relative_path("/srv/a", "/srv/a")
