"""
treeshift.path — Path Algebra
=============================

A PATH is a tuple of child indexes locating a node from the document
root.  `()` is the root itself, `(0,)` its first child, `(0, 2)` the
third child of that child, and so on.

Paths are plain values: nothing here looks at a live tree.  The central
function is `transform`, which rebases a path through one operation so
it keeps pointing at the same logical node:

    transform((0, 1), InsertNode((0, 0)))   → (0, 2)
    transform((0, 1), RemoveNode((0, 1)))   → None   (node is gone)
    transform((1, 0), MergeNode((1,), 3))   → (0, 3)

TERMINOLOGY used in `transform`, for a path P and an operation at O:

    depth  = len(O) - 1              the children array O edits
    cd     = common_depth(P, O)
    O at/above P       cd == len(O)   O is P or one of P's ancestors
    O equal P          cd == len(P)
    O ends before P    cd == depth and O[cd] < P[cd]
                       O is an earlier sibling of P or of one of P's
                       ancestors ("uncle", "great-uncle", ...)
"""

from typing import Any, Optional

from .errors import InvalidPathError
from .operations import (
    Affinity,
    InsertNode, MergeNode, MoveNode, RemoveNode, SplitNode,
    Operation, PATH_TRANSFORMING_TYPES,
)

Path = tuple[int, ...]


# ═══════════════════════════════════════════════════════════════════
#  COMPARISON AND ANCESTRY
# ═══════════════════════════════════════════════════════════════════

def is_path(value: Any) -> bool:
    """Check whether a value looks like a path (a tuple/list of ints)."""
    if not isinstance(value, (tuple, list)):
        return False
    return all(isinstance(i, int) and not isinstance(i, bool) for i in value)


def equals(path: Path, another: Path) -> bool:
    return tuple(path) == tuple(another)


def common_depth(path: Path, another: Path) -> int:
    """Number of leading indexes the two paths share."""
    limit = min(len(path), len(another))
    i = 0
    while i < limit and path[i] == another[i]:
        i += 1
    return i


def common(path: Path, another: Path) -> Path:
    """The deepest path that is an ancestor-or-equal of both."""
    return tuple(path[:common_depth(path, another)])


def compare(path: Path, another: Path) -> int:
    """
    Compare two paths in document order, returning -1, 0 or 1.

    Only the shared length is compared, so a path and any of its
    ancestors compare as 0.  Use `equals` for exact matching.
    """
    for a, b in zip(path, another):
        if a < b:
            return -1
        if a > b:
            return 1
    return 0


def is_before(path: Path, another: Path) -> bool:
    return compare(path, another) == -1


def is_after(path: Path, another: Path) -> bool:
    return compare(path, another) == 1


def is_ancestor(path: Path, another: Path) -> bool:
    return len(path) < len(another) and compare(path, another) == 0


def is_descendant(path: Path, another: Path) -> bool:
    return len(path) > len(another) and compare(path, another) == 0


def is_common(path: Path, another: Path) -> bool:
    """Check if `path` is equal to or an ancestor of `another`."""
    return len(path) <= len(another) and compare(path, another) == 0


def is_parent(path: Path, another: Path) -> bool:
    return len(path) + 1 == len(another) and compare(path, another) == 0


def is_child(path: Path, another: Path) -> bool:
    return len(path) == len(another) + 1 and compare(path, another) == 0


def is_sibling(path: Path, another: Path) -> bool:
    return (len(path) == len(another) and len(path) > 0
            and common_depth(path, another) == len(path) - 1)


def ends_before(path: Path, another: Path) -> bool:
    """Check if `path` ends at an index before one of `another`'s indexes."""
    i = len(path) - 1
    return (i >= 0 and i < len(another)
            and common_depth(path, another) == i and path[i] < another[i])


def ends_at(path: Path, another: Path) -> bool:
    return common_depth(path, another) == len(path)


def ends_after(path: Path, another: Path) -> bool:
    i = len(path) - 1
    return (i >= 0 and i < len(another)
            and common_depth(path, another) == i and path[i] > another[i])


def has_previous(path: Path) -> bool:
    return len(path) > 0 and path[-1] > 0


# ═══════════════════════════════════════════════════════════════════
#  NAVIGATION
# ═══════════════════════════════════════════════════════════════════

def next(path: Path) -> Path:  # noqa: A001
    """Path of the next sibling."""
    if not path:
        raise InvalidPathError(
            "Cannot get the next path of the root path, because it has no next index",
            path,
        )
    return tuple(path[:-1]) + (path[-1] + 1,)


def previous(path: Path) -> Path:
    """Path of the previous sibling."""
    if not path:
        raise InvalidPathError(
            "Cannot get the previous path of the root path, because it has no previous index",
            path,
        )
    last = path[-1]
    if last <= 0:
        raise InvalidPathError(
            "Cannot get the previous path of a first child path, "
            "because it would result in a negative index",
            path,
        )
    return tuple(path[:-1]) + (last - 1,)


def parent(path: Path) -> Path:
    if not path:
        raise InvalidPathError("Cannot get the parent path of the root path", path)
    return tuple(path[:-1])


def relative(path: Path, ancestor: Path) -> Path:
    """`path` expressed relative to `ancestor` (which must be at or above it)."""
    if not is_common(ancestor, path):
        raise InvalidPathError(
            "Cannot get the relative path inside an ancestor that is not above or equal to the path",
            path, ancestor=list(ancestor),
        )
    return tuple(path[len(ancestor):])


def levels(path: Path, reverse: bool = False) -> list[Path]:
    """Every path from the root down to `path`, inclusive."""
    out = [tuple(path[:i]) for i in range(len(path) + 1)]
    if reverse:
        out.reverse()
    return out


def ancestors(path: Path, reverse: bool = False) -> list[Path]:
    """Like `levels`, but without `path` itself."""
    if not path:
        return []
    return levels(parent(path), reverse=reverse)


# ═══════════════════════════════════════════════════════════════════
#  TRANSFORM
# ═══════════════════════════════════════════════════════════════════

def operation_can_transform_path(operation: Operation) -> bool:
    """
    Whether `operation` can move any path at all.

    Callers use this to skip `transform` for text and property
    operations.  Must stay in sync with the dispatch in `transform`.
    """
    return isinstance(operation, PATH_TRANSFORMING_TYPES)


def transform(
    path: Optional[Path],
    operation: Operation,
    affinity: Optional[Affinity] = Affinity.FORWARD,
) -> Optional[Path]:
    """
    Rebase `path` through `operation`.

    Returns the new path, or None when the node `path` pointed at no
    longer exists.  `affinity` only matters when a split_node happens
    exactly at `path`: FORWARD follows the new right-hand node,
    BACKWARD stays on the left-hand one, None gives up (returns None).

    Operations that cannot transform paths return `path` unchanged.
    """
    if path is None or not operation_can_transform_path(operation):
        return path

    path = tuple(path)
    op = tuple(operation.path)

    # Changes strictly below `path` never reach it.
    if len(op) > len(path) and (
        not isinstance(operation, MoveNode) or len(operation.new_path) > len(path)
    ):
        return path

    cd = common_depth(path, op)
    depth = len(op) - 1
    op_at_or_above = cd == len(op)
    op_equal = cd == len(path)
    op_ends_before = cd == depth and cd < len(path) and op[cd] < path[cd]

    out = list(path)

    if isinstance(operation, InsertNode):
        if op_at_or_above or op_ends_before:
            out[depth] += 1
        return tuple(out)

    if isinstance(operation, RemoveNode):
        if op_at_or_above:
            return None
        if op_ends_before:
            out[depth] -= 1
        return tuple(out)

    if isinstance(operation, MergeNode):
        if (op_at_or_above and op_equal) or op_ends_before:
            out[depth] -= 1
        elif op_at_or_above:
            # inside the merged-away node: re-parent under the previous
            # sibling, shifted past its existing content
            out[depth] -= 1
            out[len(op)] += operation.position
        return tuple(out)

    if isinstance(operation, SplitNode):
        if op_at_or_above and op_equal:
            if affinity == Affinity.FORWARD:
                out[depth] += 1
            elif affinity == Affinity.BACKWARD:
                return path
            else:
                return None
        elif op_at_or_above:
            if path[len(op)] >= operation.position:
                out[depth] += 1
                out[len(op)] -= operation.position
        elif op_ends_before:
            out[depth] += 1
        return tuple(out)

    if isinstance(operation, MoveNode):
        return _transform_move(path, op, tuple(operation.new_path), cd, op_ends_before)

    return path


def _transform_move(
    path: Path, op: Path, new_op: Path, cd: int, op_ends_before: bool
) -> Path:
    """
    move_node is a removal at `op` followed by an insertion at `new_op`,
    where `new_op` addresses the tree AFTER the removal.
    """
    depth = len(op) - 1

    if cd == len(op):
        # `path` is the moved node or inside it
        cd_between = common_depth(op, new_op)
        if cd_between == len(op):
            # no-op (same path), or an invalid move into its own subtree
            return path

        out = list(new_op) + list(path[len(op):])
        new_op_ends_after_op = (
            cd_between == depth and cd_between < len(new_op)
            and op[cd_between] < new_op[cd_between]
        )
        if new_op_ends_after_op and len(op) < len(new_op):
            # the destination lives inside a later sibling of the moved
            # node, whose index drops by one once the node is removed
            out[depth] -= 1
        return tuple(out)

    new_cd = common_depth(path, new_op)
    new_depth = len(new_op) - 1
    new_op_at_or_above = new_cd == len(new_op)
    new_op_ends_before = (
        new_cd == new_depth and new_cd < len(path) and new_op[new_cd] < path[new_cd]
    )

    out = list(path)
    if new_op_at_or_above or new_op_ends_before:
        if op_ends_before:
            if depth == new_depth and new_op_ends_before:
                # removal and insertion both before `path` in the same
                # children array: they cancel out
                return path
            out[depth] -= 1
            if depth == new_depth:
                # removed from before, inserted at `path`'s own index
                # (which is now one further along): only the removal counts
                return tuple(out)
        out[new_depth] += 1
    elif op_ends_before:
        out[depth] -= 1
    return tuple(out)
