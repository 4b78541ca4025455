"""
treeshift.operations — The closed set of document operations.

Every edit the host commits to its operation log is one of these frozen
dataclasses.  Five kinds change the SHAPE of the tree and therefore move
paths around:

    insert_node   remove_node   merge_node   split_node   move_node

Two kinds only change the text inside a leaf, so they move offsets but
never paths:

    insert_text   remove_text

The remaining kinds (set_node, set_selection) change properties and are
ignored by every transform in this package.

Dispatch over the union is done with isinstance checks against the
classes below; `Operation` is the union type used in annotations.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class Affinity(str, Enum):
    """
    Tie-break for a position sitting exactly on a split boundary.

    FORWARD keeps the position with the content after the boundary,
    BACKWARD with the content before it.  Passing None instead of an
    Affinity declines to pick a side; transforms then report the
    position as destroyed.
    """
    FORWARD = "forward"
    BACKWARD = "backward"


# ═══════════════════════════════════════════════════════════════════
#  PATH-TRANSFORMING OPERATIONS
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class InsertNode:
    """Insert `node` so that it ends up at `path`."""
    type = "insert_node"
    path: tuple[int, ...]
    node: Any = None


@dataclass(frozen=True, slots=True)
class RemoveNode:
    """Remove the node at `path` (and its whole subtree)."""
    type = "remove_node"
    path: tuple[int, ...]
    node: Any = None


@dataclass(frozen=True, slots=True)
class MergeNode:
    """
    Merge the node at `path` into its previous sibling.

    `position` is the length of the previous sibling before the merge:
    its text length for text leaves, its child count for elements.
    """
    type = "merge_node"
    path: tuple[int, ...]
    position: int
    properties: dict = field(default_factory=dict, compare=False)


@dataclass(frozen=True, slots=True)
class SplitNode:
    """
    Split the node at `path` in two at `position`.

    The content from `position` onwards moves into a new next sibling
    that carries `properties`.
    """
    type = "split_node"
    path: tuple[int, ...]
    position: int
    properties: dict = field(default_factory=dict, compare=False)


@dataclass(frozen=True, slots=True)
class MoveNode:
    """Move the subtree at `path` so that it ends up at `new_path`."""
    type = "move_node"
    path: tuple[int, ...]
    new_path: tuple[int, ...]


# ═══════════════════════════════════════════════════════════════════
#  TEXT OPERATIONS (offsets only)
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class InsertText:
    """Insert `text` into the leaf at `path`, starting at `offset`."""
    type = "insert_text"
    path: tuple[int, ...]
    offset: int
    text: str


@dataclass(frozen=True, slots=True)
class RemoveText:
    """Remove `text` from the leaf at `path`, starting at `offset`."""
    type = "remove_text"
    path: tuple[int, ...]
    offset: int
    text: str


# ═══════════════════════════════════════════════════════════════════
#  PROPERTY OPERATIONS (ignored by the algebra)
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class SetNode:
    type = "set_node"
    path: tuple[int, ...]
    properties: dict = field(default_factory=dict, compare=False)
    new_properties: dict = field(default_factory=dict, compare=False)


@dataclass(frozen=True, slots=True)
class SetSelection:
    type = "set_selection"
    properties: Optional[dict] = field(default=None, compare=False)
    new_properties: Optional[dict] = field(default=None, compare=False)


Operation = Union[
    InsertNode, RemoveNode, MergeNode, SplitNode, MoveNode,
    InsertText, RemoveText, SetNode, SetSelection,
]

PATH_TRANSFORMING_TYPES = (InsertNode, RemoveNode, MergeNode, SplitNode, MoveNode)
OPERATION_TYPES = {
    cls.type: cls
    for cls in (InsertNode, RemoveNode, MergeNode, SplitNode, MoveNode,
                InsertText, RemoveText, SetNode, SetSelection)
}
