"""
Test suite for treeshift.string_diff.

    §1  apply
    §2  normalize (and its laws)
    §3  merge (and its law)
    §4  target_range
"""

import sys
import os
import pytest

# Add parent to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from treeshift.point import Point
from treeshift.range import Range
from treeshift.string_diff import (
    StringDiff, TextDiff,
    apply_string_diff, merge_string_diffs, normalize_string_diff, target_range,
)


# ═══════════════════════════════════════════════════════════════════
#  §1  APPLY
# ═══════════════════════════════════════════════════════════════════

class TestApply:

    def test_no_diffs(self):
        assert apply_string_diff("abc") == "abc"

    def test_replace(self):
        assert apply_string_diff("hello world", StringDiff(6, 11, "earth")) == "hello earth"

    def test_diffs_are_sequential(self):
        # the second diff is against "aXbc", not "abc"
        assert apply_string_diff("abc", StringDiff(1, 1, "X"), StringDiff(2, 2, "Y")) == "aXYbc"

    def test_delete(self):
        assert apply_string_diff("abcdef", StringDiff(1, 3, "")) == "adef"


# ═══════════════════════════════════════════════════════════════════
#  §2  NORMALIZE
# ═══════════════════════════════════════════════════════════════════

NORMALIZE_CASES = [
    ("hello world", StringDiff(0, 11, "hello earth")),
    ("abc", StringDiff(0, 3, "abc")),
    ("aa", StringDiff(0, 2, "aaa")),
    ("abcdef", StringDiff(1, 5, "bXe")),
    ("abcdef", StringDiff(2, 2, "")),
    ("", StringDiff(0, 0, "new")),
    ("mississippi", StringDiff(0, 11, "missouri")),
    ("abab", StringDiff(0, 4, "ab")),
]


class TestNormalize:

    def test_trims_shared_prefix(self):
        result = normalize_string_diff("hello world", StringDiff(0, 11, "hello earth"))
        assert result == StringDiff(6, 11, "earth")

    def test_trims_shared_suffix(self):
        result = normalize_string_diff("cat hat", StringDiff(0, 7, "bat hat"))
        assert result == StringDiff(0, 1, "b")

    def test_suffix_does_not_overlap_prefix(self):
        assert normalize_string_diff("aa", StringDiff(0, 2, "aaa")) == StringDiff(2, 2, "a")

    def test_noop_is_none(self):
        assert normalize_string_diff("abc", StringDiff(0, 3, "abc")) is None
        assert normalize_string_diff("abc", StringDiff(1, 1, "")) is None

    def test_pure_insert_untouched(self):
        assert normalize_string_diff("abc", StringDiff(1, 1, "X")) == StringDiff(1, 1, "X")

    @pytest.mark.parametrize("text,diff", NORMALIZE_CASES)
    def test_same_effect(self, text, diff):
        normalized = normalize_string_diff(text, diff)
        expected = apply_string_diff(text, diff)
        if normalized is None:
            assert expected == text
        else:
            assert apply_string_diff(text, normalized) == expected

    @pytest.mark.parametrize("text,diff", NORMALIZE_CASES)
    def test_idempotent(self, text, diff):
        normalized = normalize_string_diff(text, diff)
        if normalized is not None:
            assert normalize_string_diff(text, normalized) == normalized


# ═══════════════════════════════════════════════════════════════════
#  §3  MERGE
# ═══════════════════════════════════════════════════════════════════

MERGE_CASES = [
    # typing two characters in a row
    ("abc", StringDiff(1, 1, "X"), StringDiff(2, 2, "Y")),
    # b inside a's inserted text
    ("abc", StringDiff(1, 2, "WXYZ"), StringDiff(2, 4, "_")),
    # b across the boundary of a's inserted text and the tail
    ("hello", StringDiff(1, 3, "ABC"), StringDiff(3, 5, "Z")),
    # b after a, no overlap
    ("hello world", StringDiff(0, 0, "X"), StringDiff(7, 8, "W")),
    ("abcdef", StringDiff(1, 3, ""), StringDiff(2, 3, "Z")),
    # b before a
    ("hello world", StringDiff(5, 5, "X"), StringDiff(0, 1, "Y")),
    ("hello world", StringDiff(5, 7, "Q"), StringDiff(0, 1, "J")),
    # b swallows a
    ("abcdef", StringDiff(3, 3, "XX"), StringDiff(1, 7, "Q")),
    ("abcdef", StringDiff(3, 3, "XX"), StringDiff(2, 4, "")),
]


class TestMerge:

    def test_two_inserts(self):
        merged = merge_string_diffs("abc", StringDiff(1, 1, "X"), StringDiff(2, 2, "Y"))
        assert merged == StringDiff(1, 1, "XY")
        assert apply_string_diff("abc", merged) == "aXYbc"

    def test_boundary_overlap(self):
        merged = merge_string_diffs("hello", StringDiff(1, 3, "ABC"), StringDiff(3, 5, "Z"))
        assert merged == StringDiff(1, 4, "ABZ")

    def test_typing_then_backspacing_is_noop(self):
        assert merge_string_diffs("abc", StringDiff(1, 1, "X"), StringDiff(1, 2, "")) is None

    @pytest.mark.parametrize("text,a,b", MERGE_CASES)
    def test_merge_equals_sequential_apply(self, text, a, b):
        merged = merge_string_diffs(text, a, b)
        expected = apply_string_diff(text, a, b)
        if merged is None:
            assert expected == text
        else:
            assert apply_string_diff(text, merged) == expected

    @pytest.mark.parametrize("text,a,b", MERGE_CASES)
    def test_merge_is_normalized(self, text, a, b):
        merged = merge_string_diffs(text, a, b)
        if merged is not None:
            assert normalize_string_diff(text, merged) == merged


# ═══════════════════════════════════════════════════════════════════
#  §4  TARGET RANGE
# ═══════════════════════════════════════════════════════════════════

class TestTargetRange:

    def test_spans_replaced_text(self):
        text_diff = TextDiff(3, [0, 2], StringDiff(4, 9, "x"))
        assert target_range(text_diff) == Range(Point((0, 2), 4), Point((0, 2), 9))

    def test_path_is_stored_as_tuple(self):
        assert TextDiff(0, [1, 2], StringDiff(0, 0, "")).path == (1, 2)
