"""
treeshift.tree — A minimal immutable document tree.

The algebra in this package never needs a live tree; the pending-diff
layer only asks a handful of questions of one ("does this path exist",
"is this a text leaf", "which text leaf comes next", "which block
encloses this path").  This module answers them for a small node model:

    Document(children)                 the root
    Element(children, kind, inline)    a block (inline=False) or inline
    Text(text, marks)                  a leaf

Nodes are frozen; every mutation helper returns a new root and shares
untouched subtrees with the old one.

`apply_operation` is a reference applier for the operation kinds in
`treeshift.operations`.  It exists so that transforms can be checked
against real tree mutation: for any path P and operation op,

    get_node(apply_operation(root, op), transform(P, op))

is the node that was at P before (or what it was merged into).
"""

import dataclasses
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Union

from . import path as paths
from .errors import InvalidNodeError
from .operations import (
    InsertNode, InsertText, MergeNode, MoveNode, Operation, RemoveNode, RemoveText,
    SetNode, SetSelection, SplitNode,
)
from .path import Path


# ═══════════════════════════════════════════════════════════════════
#  NODES
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class Text:
    text: str
    marks: frozenset = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "marks", frozenset(self.marks))


@dataclass(frozen=True, slots=True)
class Element:
    children: tuple
    kind: str = "paragraph"
    inline: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))


@dataclass(frozen=True, slots=True)
class Document:
    children: tuple

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))


Node = Union[Document, Element, Text]
Ancestor = Union[Document, Element]


def is_text(node: object) -> bool:
    return isinstance(node, Text)


def is_element(node: object) -> bool:
    return isinstance(node, Element)


def is_block(node: object) -> bool:
    return isinstance(node, Element) and not node.inline


# ═══════════════════════════════════════════════════════════════════
#  QUERIES
# ═══════════════════════════════════════════════════════════════════

def has_path(root: Node, path: Path) -> bool:
    node = root
    for index in path:
        children = getattr(node, "children", None)
        if children is None or index < 0 or index >= len(children):
            return False
        node = children[index]
    return True


def get_node(root: Node, path: Path) -> Node:
    node = root
    for depth, index in enumerate(path):
        children = getattr(node, "children", None)
        if children is None or index < 0 or index >= len(children):
            raise InvalidNodeError(
                "Cannot find a descendant at the path", tuple(path[:depth + 1])
            )
        node = children[index]
    return node


def nodes(root: Node, path: Path = ()) -> Iterator[tuple[Node, Path]]:
    """Every node under (and including) `root`, in document order."""
    yield root, path
    for i, child in enumerate(getattr(root, "children", ())):
        yield from nodes(child, path + (i,))


def texts(root: Node) -> Iterator[tuple[Text, Path]]:
    for node, path in nodes(root):
        if isinstance(node, Text):
            yield node, path


def next_text(root: Node, path: Path) -> Optional[tuple[Text, Path]]:
    """The first text leaf after `path` (and outside it) in document order."""
    for node, text_path in texts(root):
        if paths.is_after(text_path, path):
            return node, text_path
    return None


def previous_text(root: Node, path: Path) -> Optional[tuple[Text, Path]]:
    found = None
    for node, text_path in texts(root):
        if not paths.is_before(text_path, path):
            break
        found = node, text_path
    return found


def above_block(root: Node, path: Path) -> Optional[tuple[Element, Path]]:
    """The nearest block element strictly above `path`."""
    for level in paths.ancestors(path, reverse=True):
        node = get_node(root, level)
        if is_block(node):
            return node, level
    return None


# ═══════════════════════════════════════════════════════════════════
#  CHILD SPLICING
# ═══════════════════════════════════════════════════════════════════

def replace_children(children: tuple, index: int, remove_count: int, *new_values) -> tuple:
    out = list(children)
    out[index:index + remove_count] = new_values
    return tuple(out)


def insert_children(children: tuple, index: int, *new_values) -> tuple:
    return replace_children(children, index, 0, *new_values)


def replace_child(children: tuple, index: int, new_value) -> tuple:
    out = list(children)
    out[index] = new_value
    return tuple(out)


remove_children = replace_children


def modify_descendant(root: Ancestor, path: Path, f: Callable[[Node], Node]) -> Ancestor:
    """Replace the node at `path` with f(node), rebuilding every ancestor."""
    if not path:
        raise InvalidNodeError("Cannot modify the root node", path)

    modified = f(get_node(root, path))
    for depth in range(len(path) - 1, -1, -1):
        ancestor = get_node(root, path[:depth])
        modified = dataclasses.replace(
            ancestor, children=replace_child(ancestor.children, path[depth], modified)
        )
    return modified


def modify_children(root: Ancestor, path: Path, f: Callable[[tuple], tuple]) -> Ancestor:
    """Replace the children of the node at `path` with f(children)."""
    if not path:
        return dataclasses.replace(root, children=f(root.children))

    def _modify(node: Node) -> Node:
        if isinstance(node, Text):
            raise InvalidNodeError(
                "Cannot get the element at the path because it refers to a leaf node", path
            )
        return dataclasses.replace(node, children=f(node.children))

    return modify_descendant(root, path, _modify)


def modify_leaf(root: Ancestor, path: Path, f: Callable[[Text], Text]) -> Ancestor:
    def _modify(node: Node) -> Node:
        if not isinstance(node, Text):
            raise InvalidNodeError(
                "Cannot get the leaf node at the path because it refers to a non-leaf node", path
            )
        return f(node)

    return modify_descendant(root, path, _modify)


# ═══════════════════════════════════════════════════════════════════
#  REFERENCE APPLIER
# ═══════════════════════════════════════════════════════════════════

def with_properties(node: Node, properties: dict, path: Path = ()) -> Node:
    """Copy `node` with some of its fields replaced.  Content fields are off limits."""
    allowed = {f.name for f in dataclasses.fields(node)} - {"text", "children"}
    for name in properties:
        if name not in allowed:
            raise InvalidNodeError(
                f"{type(node).__name__} has no property {name!r}", path
            )
    return dataclasses.replace(node, **properties)


def apply_operation(root: Document, op: Operation) -> Document:
    """Apply one operation to `root`, returning the new root."""
    if isinstance(op, InsertNode):
        index = op.path[-1]
        return modify_children(root, paths.parent(op.path),
                               lambda ch: insert_children(ch, index, op.node))

    if isinstance(op, RemoveNode):
        index = op.path[-1]
        return modify_children(root, paths.parent(op.path),
                               lambda ch: remove_children(ch, index, 1))

    if isinstance(op, InsertText):
        def _insert(leaf: Text) -> Text:
            text = leaf.text[:op.offset] + op.text + leaf.text[op.offset:]
            return dataclasses.replace(leaf, text=text)
        return modify_leaf(root, op.path, _insert)

    if isinstance(op, RemoveText):
        def _remove(leaf: Text) -> Text:
            text = leaf.text[:op.offset] + leaf.text[op.offset + len(op.text):]
            return dataclasses.replace(leaf, text=text)
        return modify_leaf(root, op.path, _remove)

    if isinstance(op, MergeNode):
        node = get_node(root, op.path)
        prev_path = paths.previous(op.path)
        prev = get_node(root, prev_path)
        if isinstance(node, Text) and isinstance(prev, Text):
            merged = dataclasses.replace(prev, text=prev.text + node.text)
        elif isinstance(node, Element) and isinstance(prev, Element):
            merged = dataclasses.replace(prev, children=prev.children + node.children)
        else:
            raise InvalidNodeError(
                "Cannot merge nodes of different kinds", op.path
            )
        index = op.path[-1]
        return modify_children(root, paths.parent(op.path),
                               lambda ch: replace_children(ch, index - 1, 2, merged))

    if isinstance(op, SplitNode):
        node = get_node(root, op.path)
        if isinstance(node, Text):
            before = dataclasses.replace(node, text=node.text[:op.position])
            after = with_properties(
                dataclasses.replace(node, text=node.text[op.position:]), op.properties, op.path
            )
        elif isinstance(node, Element):
            before = dataclasses.replace(node, children=node.children[:op.position])
            after = with_properties(
                dataclasses.replace(node, children=node.children[op.position:]),
                op.properties, op.path,
            )
        else:
            raise InvalidNodeError("Cannot split the root node", op.path)
        index = op.path[-1]
        return modify_children(root, paths.parent(op.path),
                               lambda ch: replace_children(ch, index, 1, before, after))

    if isinstance(op, MoveNode):
        if paths.equals(op.path, op.new_path):
            return root
        if paths.is_ancestor(op.path, op.new_path):
            raise InvalidNodeError("Cannot move a path into itself", op.path)
        node = get_node(root, op.path)
        index = op.path[-1]
        root = modify_children(root, paths.parent(op.path),
                               lambda ch: remove_children(ch, index, 1))
        # where the node lands, in the coordinates of the tree without it
        true_path = paths.transform(op.path, op)
        new_index = true_path[-1]
        return modify_children(root, paths.parent(true_path),
                               lambda ch: insert_children(ch, new_index, node))

    if isinstance(op, SetNode):
        return modify_descendant(root, op.path,
                                 lambda node: with_properties(node, op.new_properties, op.path))

    if isinstance(op, SetSelection):
        return root

    raise TypeError(f"Unknown operation type: {type(op)}")
