"""
treeshift.range — Range Algebra
===============================

A RANGE is a pair of points.  The ANCHOR is where a selection started,
the FOCUS where it currently ends; the anchor may come after the focus
(a "backward" selection).  A range whose two points are equal is
COLLAPSED, i.e. a caret.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from . import path as paths
from . import point as points
from .operations import Affinity, Operation
from .path import Path
from .point import Point


@dataclass(frozen=True, slots=True)
class Range:
    anchor: Point
    focus: Point

    def __repr__(self) -> str:
        return f"Range(anchor={self.anchor!r}, focus={self.focus!r})"


def is_range(value: Any) -> bool:
    return (
        isinstance(value, Range)
        and points.is_point(value.anchor)
        and points.is_point(value.focus)
    )


def is_collapsed(range: Range) -> bool:
    return points.equals(range.anchor, range.focus)


def is_backward(range: Range) -> bool:
    return points.is_after(range.anchor, range.focus)


def is_forward(range: Range) -> bool:
    return not is_backward(range)


def edges(range: Range, reverse: bool = False) -> tuple[Point, Point]:
    """The range's points in document order (or reversed)."""
    anchor, focus = range.anchor, range.focus
    if is_backward(range) == reverse:
        return anchor, focus
    return focus, anchor


def start(range: Range) -> Point:
    return edges(range)[0]


def end(range: Range) -> Point:
    return edges(range)[1]


def equals(range: Range, another: Range) -> bool:
    return (points.equals(range.anchor, another.anchor)
            and points.equals(range.focus, another.focus))


def includes(range: Range, target: Union[Path, Point, Range]) -> bool:
    """
    Check whether a path, point or other range touches `range`.

    For a path, an ancestor of either edge counts as included.
    """
    if isinstance(target, Range):
        return (includes(range, target.anchor) or includes(range, target.focus)
                or includes(target, range.anchor))

    first, last = edges(range)
    if isinstance(target, Point):
        return points.compare(target, first) >= 0 and points.compare(target, last) <= 0
    return (paths.compare(target, first.path) >= 0
            and paths.compare(target, last.path) <= 0)


def transform(
    range: Range,
    op: Operation,
    affinity: Optional[Affinity] = Affinity.FORWARD,
) -> Optional[Range]:
    """
    Rebase both points of `range` through `op`.

    A collapsed range stays collapsed: its focus is a copy of the
    rebased anchor, never rebased on its own.  If either point is
    destroyed the whole range is.
    """
    anchor = points.transform(range.anchor, op, affinity=affinity)
    if anchor is None:
        return None

    if is_collapsed(range):
        return Range(anchor, anchor)

    focus = points.transform(range.focus, op, affinity=affinity)
    if focus is None:
        return None

    return Range(anchor, focus)
