"""
treeshift.pending — Pending Diff Reconciliation
===============================================

An input surface often changes a leaf's text BEFORE the matching
insert_text / remove_text reaches the operation log.  Until it does, the
change is a PENDING DIFF: a TextDiff recorded against the leaf.

While diffs are pending, two coordinate spaces coexist for a leaf:

    committed   the text the document tree holds
    pending     the text the user sees (committed + pending diff)

Positions taken from the input surface (a caret, a selection) are in
PENDING coordinates.  When an operation is committed, those positions
and the pending diffs themselves must be rebased through it:

    transform_text_diff(diff, op)               rebase a pending diff
    transform_pending_point(diffs, point, op)   rebase a pending-space point
    transform_pending_range(diffs, range, op)   … and a range

Before a pending diff is acted on, `verify_diff_state` checks it still
matches the tree, and `normalize_point` / `normalize_range` walk a
pending-space position onto the leaf that actually holds it.

`PendingDiffStore` owns the per-document lists of pending diffs.  The
module-level functions only read diffs and return new values; the store
is the one place diffs are added, merged, rebased and dropped.
"""

from typing import Hashable, Iterable, Optional

import structlog

from . import path as paths
from . import point as points
from . import range as ranges
from . import tree
from .operations import Affinity, InsertText, MergeNode, Operation, RemoveText, SplitNode
from .path import Path
from .point import Point
from .range import Range
from .string_diff import StringDiff, TextDiff, merge_string_diffs, normalize_string_diff

logger = structlog.get_logger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  VALIDATION AGAINST THE TREE
# ═══════════════════════════════════════════════════════════════════

def verify_diff_state(root: tree.Node, text_diff: TextDiff) -> bool:
    """
    Check whether a pending diff still matches the tree.

    Usually this means the leaf already holds the diff's text at
    `start`.  A non-empty diff at the very end of its leaf may instead
    have been split off into the next leaf, in which case that leaf must
    begin with the diff's text.
    """
    path, diff = text_diff.path, text_diff.diff
    if not tree.has_path(root, path):
        return False

    node = tree.get_node(root, path)
    if not tree.is_text(node):
        return False

    if diff.start != len(node.text) or not diff.text:
        return node.text[diff.start:diff.start + len(diff.text)] == diff.text

    next_path = paths.next(path)
    if not tree.has_path(root, next_path):
        return False

    next_node = tree.get_node(root, next_path)
    return tree.is_text(next_node) and next_node.text.startswith(diff.text)


def normalize_point(root: tree.Node, point: Point) -> Optional[Point]:
    """
    Walk a pending-space point onto the leaf that holds its offset.

    Pending text may have landed in a differently formatted leaf than
    the one the point names, so an offset past the end of its leaf
    carries over into the following text leaves of the same block.
    Returns None if the walk leaves the block or the point is invalid.
    """
    path, offset = point.path, point.offset
    if not tree.has_path(root, path):
        return None

    leaf = tree.get_node(root, path)
    if not tree.is_text(leaf):
        return None

    block = tree.above_block(root, path)
    if block is None:
        return None
    block_path = block[1]

    following = (entry for entry in tree.texts(root) if paths.is_after(entry[1], point.path))
    while offset > len(leaf.text):
        entry = next(following, None)
        if entry is None or not paths.is_descendant(entry[1], block_path):
            return None
        offset -= len(leaf.text)
        leaf, path = entry

    return Point(path, offset)


def normalize_range(root: tree.Node, range: Range) -> Optional[Range]:
    anchor = normalize_point(root, range.anchor)
    if anchor is None:
        return None

    if ranges.is_collapsed(range):
        return Range(anchor, anchor)

    focus = normalize_point(root, range.focus)
    if focus is None:
        return None

    return Range(anchor, focus)


# ═══════════════════════════════════════════════════════════════════
#  REBASING
# ═══════════════════════════════════════════════════════════════════

def _find_diff(pending_diffs: Iterable[TextDiff], path: Path) -> Optional[TextDiff]:
    for text_diff in pending_diffs:
        if paths.equals(text_diff.path, path):
            return text_diff
    return None


def transform_pending_point(
    pending_diffs: Iterable[TextDiff], point: Point, op: Operation
) -> Optional[Point]:
    """
    Rebase a point in pending coordinates through a committed operation.

    A point before the leaf's pending diff is rebased as usual.  A point
    inside the diff's replacement text is rebased from the diff's start,
    keeping its distance into the replacement.  A point after the diff
    is mapped back to committed coordinates, rebased, and mapped forward
    again.
    """
    text_diff = _find_diff(pending_diffs, point.path)
    if text_diff is None or point.offset <= text_diff.diff.start:
        return points.transform(point, op, affinity=Affinity.BACKWARD)

    diff = text_diff.diff
    if point.offset <= diff.start + len(diff.text):
        anchor = Point(point.path, diff.start)
        transformed = points.transform(anchor, op, affinity=Affinity.BACKWARD)
        if transformed is None:
            return None
        return Point(transformed.path, transformed.offset + point.offset - diff.start)

    # committed-space offset of the point
    anchor = Point(point.path, point.offset - len(diff.text) + diff.end - diff.start)
    transformed = points.transform(anchor, op, affinity=Affinity.BACKWARD)
    if transformed is None:
        return None

    if (
        isinstance(op, SplitNode)
        and paths.equals(op.path, point.path)
        and anchor.offset < op.position
        and diff.start < op.position
    ):
        return transformed

    return Point(
        transformed.path,
        transformed.offset + len(diff.text) - diff.end + diff.start,
    )


def transform_pending_range(
    pending_diffs: Iterable[TextDiff], range: Range, op: Operation
) -> Optional[Range]:
    pending_diffs = tuple(pending_diffs)
    anchor = transform_pending_point(pending_diffs, range.anchor, op)
    if anchor is None:
        logger.debug("pending_range_destroyed", edge="anchor", operation=op.type)
        return None

    if ranges.is_collapsed(range):
        return Range(anchor, anchor)

    focus = transform_pending_point(pending_diffs, range.focus, op)
    if focus is None:
        logger.debug("pending_range_destroyed", edge="focus", operation=op.type)
        return None

    return Range(anchor, focus)


def transform_text_diff(text_diff: TextDiff, op: Operation) -> Optional[TextDiff]:
    """
    Rebase a pending diff through a committed operation.

    Returns None when the diff's leaf was removed.

    A split inside the diff's span truncates the diff at the split
    point; the part after the split is dropped.
    """
    path, diff, diff_id = text_diff.path, text_diff.diff, text_diff.id
    start, end, text = diff.start, diff.end, diff.text
    op_path = getattr(op, "path", None)

    if op_path is not None and paths.equals(op_path, path):
        if isinstance(op, InsertText):
            length = len(op.text)
            if op.offset <= start:
                return TextDiff(diff_id, path, StringDiff(start + length, end + length, text))
            if op.offset < end:
                return TextDiff(diff_id, path, StringDiff(start, end + length, text))
            return text_diff

        if isinstance(op, RemoveText):
            length = len(op.text)
            if op.offset + length <= start:
                return TextDiff(diff_id, path, StringDiff(start - length, end - length, text))
            if op.offset < end:
                return TextDiff(diff_id, path, StringDiff(start, max(start, end - length), text))
            return text_diff

        if isinstance(op, SplitNode):
            if op.position <= start:
                return TextDiff(
                    diff_id, paths.next(path),
                    StringDiff(start - op.position, end - op.position, text),
                )
            if op.position < end:
                # TODO: emit a second diff on the new sibling for the part
                # past the split instead of dropping it
                return TextDiff(diff_id, path, StringDiff(start, min(op.position, end), text))
            return text_diff

        if isinstance(op, MergeNode):
            return TextDiff(
                diff_id, paths.transform(path, op),
                StringDiff(start + op.position, end + op.position, text),
            )

    if not paths.operation_can_transform_path(op):
        return text_diff

    new_path = paths.transform(path, op)
    if new_path is None:
        return None
    if new_path == path:
        return text_diff
    return TextDiff(diff_id, new_path, diff)


# ═══════════════════════════════════════════════════════════════════
#  PER-DOCUMENT STORE
# ═══════════════════════════════════════════════════════════════════

class PendingDiffStore:
    """
    Pending diffs for every open document, keyed by a document handle.

    A document's list exists from `open` to `close`.  Ids are assigned
    from one counter per store, so they increase monotonically across
    documents.
    """

    def __init__(self) -> None:
        self._diffs: dict[Hashable, list[TextDiff]] = {}
        self._next_id = 0

    def open(self, document: Hashable) -> None:
        self._diffs.setdefault(document, [])

    def close(self, document: Hashable) -> list[TextDiff]:
        """Forget a document, returning whatever was still pending."""
        return self._diffs.pop(document, [])

    def is_open(self, document: Hashable) -> bool:
        return document in self._diffs

    def diffs(self, document: Hashable) -> tuple[TextDiff, ...]:
        return tuple(self._get(document))

    def _get(self, document: Hashable) -> list[TextDiff]:
        try:
            return self._diffs[document]
        except KeyError:
            raise KeyError(f"Document {document!r} is not open") from None

    def record(
        self, document: Hashable, path: Path, diff: StringDiff, leaf_text: str
    ) -> Optional[TextDiff]:
        """
        Record a raw text change observed on the leaf at `path`.

        `leaf_text` is the leaf's committed text.  A change on a leaf that
        already has a pending diff is merged into it; if the merge cancels
        out, the pending diff is removed and None is returned.
        """
        pending = self._get(document)
        path = tuple(path)

        for i, existing in enumerate(pending):
            if not paths.equals(existing.path, path):
                continue
            merged = merge_string_diffs(leaf_text, existing.diff, diff)
            if merged is None:
                del pending[i]
                logger.debug("pending_diff_cancelled", diff_id=existing.id, path=list(path))
                return None
            updated = TextDiff(existing.id, path, merged)
            pending[i] = updated
            return updated

        normalized = normalize_string_diff(leaf_text, diff)
        if normalized is None:
            return None

        text_diff = TextDiff(self._next_id, path, normalized)
        self._next_id += 1
        pending.append(text_diff)
        return text_diff

    def discard(self, document: Hashable, diff_id: int) -> Optional[TextDiff]:
        pending = self._get(document)
        for i, text_diff in enumerate(pending):
            if text_diff.id == diff_id:
                return pending.pop(i)
        return None

    def rebase(self, document: Hashable, op: Operation) -> tuple[TextDiff, ...]:
        """Rebase every pending diff through a committed operation."""
        pending = self._get(document)
        rebased = []
        for text_diff in pending:
            transformed = transform_text_diff(text_diff, op)
            if transformed is None:
                logger.debug("pending_diff_destroyed", diff_id=text_diff.id,
                             path=list(text_diff.path), operation=op.type)
                continue
            rebased.append(transformed)
        pending[:] = rebased
        return tuple(rebased)

    def prune(self, document: Hashable, root: tree.Node) -> list[TextDiff]:
        """Drop pending diffs that no longer match `root`; return them."""
        pending = self._get(document)
        kept, dropped = [], []
        for text_diff in pending:
            (kept if verify_diff_state(root, text_diff) else dropped).append(text_diff)
        for text_diff in dropped:
            logger.debug("pending_diff_mismatch", diff_id=text_diff.id,
                         path=list(text_diff.path))
        pending[:] = kept
        return dropped
