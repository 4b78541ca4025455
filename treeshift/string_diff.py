"""
treeshift.string_diff — String Diff Model
=========================================

A STRING DIFF is one replacement against a leaf's text:

    StringDiff(start, end, text)   replace text[start:end] with `text`

A TEXT DIFF binds a string diff to the leaf it edits and to an id the
host uses to refer to it while it is pending:

    TextDiff(id, path, diff)

Three operations:

    apply_string_diff(t, d₁, d₂, …)   fold diffs left to right; each
                                      diff is in the coordinates left
                                      by the previous ones
    normalize_string_diff(t, d)       shrink d to the minimal edit with
                                      the same effect (None if no-op)
    merge_string_diffs(t, a, b)       one diff against t equivalent to
                                      applying a, then b

LAWS (checked in tests/test_string_diff.py):

    apply(t, normalize(t, d))            == apply(t, d)
    normalize(t, normalize(t, d))        == normalize(t, d)
    apply(t, merge(t, a, b))             == apply(t, a, b)
"""

from dataclasses import dataclass
from typing import Optional

from .path import Path
from .point import Point
from .range import Range


@dataclass(frozen=True, slots=True)
class StringDiff:
    start: int
    end: int
    text: str


@dataclass(frozen=True, slots=True)
class TextDiff:
    id: int
    path: Path
    diff: StringDiff

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", tuple(self.path))


def apply_string_diff(text: str, *diffs: StringDiff) -> str:
    for diff in diffs:
        text = text[:diff.start] + diff.text + text[diff.end:]
    return text


def _common_prefix_length(s: str, t: str) -> int:
    length = min(len(s), len(t))
    for i in range(length):
        if s[i] != t[i]:
            return i
    return length


def _common_suffix_length(s: str, t: str, limit: int) -> int:
    length = min(len(s), len(t), limit)
    for i in range(length):
        if s[len(s) - i - 1] != t[len(t) - i - 1]:
            return i
    return length


def normalize_string_diff(target_text: str, diff: StringDiff) -> Optional[StringDiff]:
    """
    Remove redundant changes so the diff spans the minimal range.

    Characters shared at the front and back of the removed text and the
    replacement are trimmed.  The suffix never overlaps the prefix, so
    a diff replacing "aa" with "aaa" becomes a single inserted "a".
    Returns None if nothing is left.
    """
    start, end, text = diff.start, diff.end, diff.text
    removed = target_text[start:end]

    prefix = _common_prefix_length(removed, text)
    limit = min(len(removed) - prefix, len(text) - prefix)
    suffix = _common_suffix_length(removed, text, limit)

    normalized = StringDiff(
        start=start + prefix,
        end=end - suffix,
        text=text[prefix:len(text) - suffix],
    )
    if normalized.start == normalized.end and not normalized.text:
        return None
    return normalized


def merge_string_diffs(
    target_text: str, a: StringDiff, b: StringDiff
) -> Optional[StringDiff]:
    """
    Merge two sequential diffs into one.

    `a` is against `target_text`; `b` is against the text `a` produced.
    The result is against `target_text` and spans the union of both
    changes, normalized.  Returns None if together they change nothing.
    """
    start = min(a.start, b.start)
    a_inserted_end = a.start + len(a.text)

    # how much of b's removed span falls inside a's inserted text
    overlap = max(0, min(a_inserted_end, b.end) - b.start)

    applied = apply_string_diff(target_text, a, b)
    slice_end = max(
        b.start + len(b.text),
        a_inserted_end + (len(b.text) if a_inserted_end > b.start else 0) - overlap,
    )
    text = applied[start:slice_end]

    # b.end mapped back into target_text coordinates
    end = max(a.end, b.end - len(a.text) + (a.end - a.start))
    return normalize_string_diff(target_text, StringDiff(start, end, text))


def target_range(text_diff: TextDiff) -> Range:
    """The range of the leaf text a pending diff replaces."""
    path, diff = text_diff.path, text_diff.diff
    return Range(anchor=Point(path, diff.start), focus=Point(path, diff.end))
