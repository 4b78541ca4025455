"""
treeshift — Position rebasing for tree-structured text documents
================================================================

A document is a tree whose leaves hold text; it changes through a log
of atomic operations.  Every position someone holds on to (a path, a
point, a selection, a text change not yet committed) has to follow the
document through each operation, or it ends up pointing somewhere else.

    transform_path((0, 1), InsertNode((0, 0)))                 → (0, 2)
    transform_path((0, 1), RemoveNode((0, 1)))                 → None
    transform_point(Point((0,), 5), SplitNode((0,), 3))        → Point([1], 2)
    normalize_string_diff("hello world",
                          StringDiff(0, 11, "hello earth"))    → StringDiff(6, 11, "earth")

None always means "this location no longer exists": drop it, don't
retry.  Exceptions are reserved for caller bugs (see treeshift.errors).
"""

from treeshift.errors import (
    TreeshiftError, InvalidPathError, InvalidNodeError, OperationFormatError,
)
from treeshift.operations import (
    Affinity,
    InsertNode, RemoveNode, MergeNode, SplitNode, MoveNode,
    InsertText, RemoveText, SetNode, SetSelection,
)
from treeshift.path import (
    transform as transform_path,
    operation_can_transform_path,
)
from treeshift.point import Point, transform as transform_point
from treeshift.range import Range, transform as transform_range
from treeshift.string_diff import (
    StringDiff, TextDiff,
    apply_string_diff, normalize_string_diff, merge_string_diffs, target_range,
)
from treeshift.pending import (
    PendingDiffStore,
    verify_diff_state, normalize_point, normalize_range,
    transform_pending_point, transform_pending_range, transform_text_diff,
)
from treeshift.tree import Document, Element, Text, apply_operation
from treeshift.formats import (
    operation_from_python, operation_to_python, from_json, to_json,
)
from treeshift.config import Settings, configure_logging, get_settings

__version__ = "0.1.0"
__all__ = [
    "TreeshiftError", "InvalidPathError", "InvalidNodeError", "OperationFormatError",
    "Affinity",
    "InsertNode", "RemoveNode", "MergeNode", "SplitNode", "MoveNode",
    "InsertText", "RemoveText", "SetNode", "SetSelection",
    "transform_path", "operation_can_transform_path",
    "Point", "transform_point", "Range", "transform_range",
    "StringDiff", "TextDiff",
    "apply_string_diff", "normalize_string_diff", "merge_string_diffs", "target_range",
    "PendingDiffStore",
    "verify_diff_state", "normalize_point", "normalize_range",
    "transform_pending_point", "transform_pending_range", "transform_text_diff",
    "Document", "Element", "Text", "apply_operation",
    "operation_from_python", "operation_to_python", "from_json", "to_json",
    "Settings", "configure_logging", "get_settings",
]
