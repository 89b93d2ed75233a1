# Copyright Red Hat
#
# tests/compare/test_engine.py - Merge engine core tests.
#
# This file is part of the xattrdiff project.
#
# SPDX-License-Identifier: Apache-2.0
import itertools
import os
import unittest
from unittest.mock import patch

from xattrdiff import Side, XattrDiffPathError
from xattrdiff.compare.engine import MergeEngine
from xattrdiff.compare.entry import Entry
from xattrdiff.compare.findings import FindingType, OnlyIn
from xattrdiff.compare.options import CompareOptions
from xattrdiff.compare.stream import EntryStream, StreamState

from ._util import make_stream


class EngineTestsBase(unittest.TestCase):
    def setUp(self):
        self.findings = []
        self.engine = MergeEngine(self.findings.append)

    def lines(self):
        return [str(f) for f in self.findings]

    def merge(self, left, right):
        return self.engine.merge(make_stream("/l", left), make_stream("/r", right))


class TestMergeEngine(EngineTestsBase):
    def test_empty_streams(self):
        results = self.merge([], [])
        self.assertEqual(self.findings, [])
        self.assertEqual(results.differences, 0)
        self.assertFalse(results.incomplete)

    def test_disjoint(self):
        results = self.merge(["x"], ["y"])
        self.assertEqual(self.lines(), ["only in /l: x", "only in /r: y"])
        self.assertEqual(results.only_in, 2)

    def test_identical_attributes(self):
        results = self.merge([("f", {"tag": b"v1"})], [("f", {"tag": b"v1"})])
        self.assertEqual(self.findings, [])
        self.assertEqual(results.left_count, 1)
        self.assertEqual(results.right_count, 1)

    def test_extra_attribute(self):
        results = self.merge([("f", {})], [("f", {"secure": b"1"})])
        self.assertEqual(self.lines(), ["xattr only in /r/f: secure"])
        self.assertEqual(results.xattr_only_in, 1)

    def test_mismatch(self):
        results = self.merge([("d/f", {"a": b"1"})], [("d/f", {"a": b"2"})])
        self.assertEqual(self.lines(), ["d/f d/f differ: a"])
        self.assertEqual(results.xattr_mismatch, 1)

    def test_left_exhausted_first(self):
        self.merge(["a"], ["a", "b", "c"])
        self.assertEqual(self.lines(), ["only in /r: b", "only in /r: c"])

    def test_right_exhausted_first(self):
        self.merge(["a", "b", "c"], ["a"])
        self.assertEqual(self.lines(), ["only in /l: b", "only in /l: c"])

    def test_interleaved(self):
        left = ["a", ("b", {"x": b"1"}), "d", "f"]
        right = [("b", {"x": b"2"}), "c", "e", "f"]
        self.merge(left, right)
        self.assertEqual(
            self.lines(),
            [
                "only in /l: a",
                "b b differ: x",
                "only in /r: c",
                "only in /l: d",
                "only in /r: e",
            ],
        )

    def test_attribute_findings_follow_path_match(self):
        self.merge(
            [("a", {"k": b"1"}), "b"],
            [("a", {"k": b"2", "m": b"0"}), "c"],
        )
        self.assertEqual(
            self.lines(),
            [
                "a a differ: k",
                "xattr only in /r/a: m",
                "only in /l: b",
                "only in /r: c",
            ],
        )

    def test_byte_order(self):
        """Paths are compared byte-wise: 'a.txt' sorts before 'a/b'."""
        self.merge(["a.txt", "a/b"], ["a/b"])
        self.assertEqual(self.lines(), ["only in /l: a.txt"])

    def test_completeness_and_ordering(self):
        """Every path in the union is classified once, in order."""
        universe = ["a", "a/b", "a.c", "b", "c/d", "f/g/h"]
        for mask in itertools.product((0, 1, 2), repeat=len(universe)):
            left = [p for p, m in zip(universe, mask) if m in (0, 2)]
            right = [p for p, m in zip(universe, mask) if m in (1, 2)]
            left.sort(key=os.fsencode)
            right.sort(key=os.fsencode)
            findings = []
            engine = MergeEngine(findings.append)
            results = engine.merge(make_stream("/l", left), make_stream("/r", right))
            only_left = {f.path for f in findings if f.side == Side.LEFT}
            only_right = {f.path for f in findings if f.side == Side.RIGHT}
            self.assertEqual(only_left, set(left) - set(right))
            self.assertEqual(only_right, set(right) - set(left))
            self.assertEqual(len(findings), len(set(left) ^ set(right)))
            keys = [os.fsencode(f.path) for f in findings]
            self.assertEqual(keys, sorted(keys))
            self.assertEqual(results.left_count, len(left))
            self.assertEqual(results.right_count, len(right))

    def test_idempotence(self):
        entries = [("a", {"x": b"1"}), ("b/c", {}), ("d", {"y": b"", "z": b"2"})]
        results = self.merge(entries, entries)
        self.assertEqual(self.findings, [])
        self.assertEqual(results.differences, 0)


class TestMergeEngineErrors(EngineTestsBase):
    def test_left_aborted(self):
        left = make_stream("/l", ["a"], aborted=True)
        right = make_stream("/r", ["a", "b", "c"])
        with self.assertLogs("xattrdiff.compare.engine", level="ERROR") as cm:
            results = self.engine.merge(left, right)
        self.assertTrue(results.incomplete)
        self.assertEqual(self.findings, [])
        self.assertEqual(right.state, StreamState.EXHAUSTED)
        self.assertIn("2 entries from /r not compared", cm.output[0])

    def test_right_aborted_after_matches(self):
        left = make_stream("/l", ["a", "b", "z"])
        right = make_stream("/r", ["a", "c"], aborted=True)
        with self.assertLogs("xattrdiff.compare.engine", level="ERROR"):
            results = self.engine.merge(left, right)
        # Findings made before the abort was seen are kept
        self.assertEqual(self.lines(), ["only in /l: b", "only in /r: c"])
        self.assertTrue(results.incomplete)
        self.assertEqual(left.state, StreamState.EXHAUSTED)

    def test_aborted_empty_stream(self):
        left = make_stream("/l", [], aborted=True)
        right = make_stream("/r", ["x", "y"])
        with self.assertLogs("xattrdiff.compare.engine", level="ERROR"):
            results = self.engine.merge(left, right)
        self.assertEqual(self.findings, [])
        self.assertTrue(results.incomplete)

    def test_path_not_beneath_root(self):
        left = EntryStream("/l", maxsize=4)
        left.put(Entry("/elsewhere/x", {}))
        left.close()
        right = make_stream("/r", ["x"])
        with self.assertRaises(XattrDiffPathError):
            self.engine.merge(left, right)


class TestMergeEngineStatus(unittest.TestCase):
    def test_no_status_when_quiet(self):
        engine = MergeEngine(lambda f: None, CompareOptions(verbose=False))
        with patch("xattrdiff.compare.engine._log_info") as mock_info:
            engine.merge(make_stream("/l", ["a"]), make_stream("/r", ["b"]))
        mock_info.assert_not_called()

    def test_status_rate_limited(self):
        engine = MergeEngine(lambda f: None, CompareOptions(verbose=True))
        with patch("xattrdiff.compare.engine._log_info") as mock_info:
            engine.merge(
                make_stream("/l", ["a", "b", "c"]), make_stream("/r", ["d", "e"])
            )
        # Several decisions within one interval yield a single status line
        mock_info.assert_called_once()
        args = mock_info.call_args[0]
        self.assertIn("queued", args[0])
        self.assertEqual(args[1], 0)

    def test_status_every_decision_with_zero_interval(self):
        engine = MergeEngine(
            lambda f: None, CompareOptions(verbose=True, status_interval=0)
        )
        with patch("xattrdiff.compare.engine.time") as mock_time, patch(
            "xattrdiff.compare.engine._log_info"
        ) as mock_info:
            mock_time.monotonic.side_effect = itertools.count(1.0)
            engine.merge(make_stream("/l", ["a", "b"]), make_stream("/r", ["c"]))
        self.assertEqual(mock_info.call_count, 3)

    def test_finding_types_counted(self):
        findings = []
        engine = MergeEngine(findings.append)
        results = engine.merge(
            make_stream("/l", [("a", {"x": b"1", "y": b"1"}), "b"]),
            make_stream("/r", [("a", {"x": b"2", "z": b"1"})]),
        )
        self.assertEqual(results.only_in, 1)
        self.assertEqual(results.xattr_only_in, 2)
        self.assertEqual(results.xattr_mismatch, 1)
        self.assertEqual(results.differences, 4)
        self.assertEqual(
            [f.finding_type for f in findings],
            [
                FindingType.XATTR_MISMATCH,
                FindingType.XATTR_ONLY_IN,
                FindingType.XATTR_ONLY_IN,
                FindingType.ONLY_IN,
            ],
        )
        self.assertIsInstance(findings[-1], OnlyIn)
