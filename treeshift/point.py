"""
treeshift.point — Point Algebra
===============================

A POINT is a path to a text leaf plus a character offset into that
leaf's text.  Offsets sit BETWEEN characters: 0 is before the first
character, len(text) after the last.

Text operations on the point's own leaf move the offset; split and
merge on the point's own leaf move both the path and the offset.
Everything else is delegated to `path.transform`.
"""

from dataclasses import dataclass
from typing import Any, Optional

from . import path as paths
from .operations import Affinity, InsertText, MergeNode, Operation, RemoveText, SplitNode
from .path import Path


@dataclass(frozen=True, slots=True)
class Point:
    path: Path
    offset: int

    def __post_init__(self) -> None:
        # accept lists from callers but always store a tuple
        object.__setattr__(self, "path", tuple(self.path))

    def __repr__(self) -> str:
        return f"Point({list(self.path)}, {self.offset})"


def is_point(value: Any) -> bool:
    return (
        isinstance(value, Point)
        and isinstance(value.offset, int)
        and paths.is_path(value.path)
    )


def compare(point: Point, another: Point) -> int:
    """Compare two points in document order, returning -1, 0 or 1."""
    result = paths.compare(point.path, another.path)
    if result == 0:
        if point.offset < another.offset:
            return -1
        if point.offset > another.offset:
            return 1
        return 0
    return result


def is_before(point: Point, another: Point) -> bool:
    return compare(point, another) == -1


def is_after(point: Point, another: Point) -> bool:
    return compare(point, another) == 1


def equals(point: Point, another: Point) -> bool:
    return point.offset == another.offset and paths.equals(point.path, another.path)


def transform(
    point: Point,
    op: Operation,
    affinity: Optional[Affinity] = Affinity.FORWARD,
) -> Optional[Point]:
    """
    Rebase `point` through `op`.

    Returns None when the point's leaf was removed, or when a split
    lands exactly on the point and `affinity` is None.
    """
    path, offset = point.path, point.offset
    op_path = getattr(op, "path", None)

    if op_path is not None and paths.equals(op_path, path):
        if isinstance(op, InsertText):
            if op.offset < offset or (op.offset == offset and affinity == Affinity.FORWARD):
                return Point(path, offset + len(op.text))
            return point

        if isinstance(op, RemoveText):
            if op.offset < offset:
                return Point(path, max(op.offset, offset - len(op.text)))
            return point

        if isinstance(op, MergeNode):
            return Point(paths.previous(path), offset + op.position)

        if isinstance(op, SplitNode):
            if op.position == offset and affinity is None:
                return None
            if op.position < offset or (op.position == offset and affinity == Affinity.FORWARD):
                return Point(paths.next(path), offset - op.position)
            return point

    if not paths.operation_can_transform_path(op):
        return point

    new_path = paths.transform(path, op, affinity=affinity)
    if new_path is None:
        return None
    if new_path == path:
        return point
    return Point(new_path, offset)
