"""
treeshift.formats — Convert between plain data and treeshift values.

Supported conversions:
    • Operation    ↔ dict  (wire names: type, path, newPath, position, …)
    • Properties   ↔ dict  (node wire names: type, inline, marks)
    • Point/Range  ↔ dict  ({"path": [...], "offset": n} / anchor+focus)
    • TextDiff     ↔ dict
    • Node         ↔ dict  ({"text": ...} leaves, {"children": [...]} elements)
    • Operation    ↔ JSON string
"""

import dataclasses
import json
from typing import Any

from .errors import OperationFormatError
from .operations import OPERATION_TYPES, Operation, SetSelection
from .point import Point
from .range import Range
from .string_diff import StringDiff, TextDiff
from .tree import Document, Element, Text


# ═══════════════════════════════════════════════════════════════════
#  NODES
# ═══════════════════════════════════════════════════════════════════

def node_from_python(obj: Any):
    """
    Convert a plain dict into a node.

    Mapping:
        {"text": str, "marks": [...]}               → Text
        {"children": [...], "type": str, "inline"}  → Element
    """
    if not isinstance(obj, dict):
        raise OperationFormatError("Node must be a mapping", obj)
    if "text" in obj:
        return Text(obj["text"], frozenset(obj.get("marks", ())))
    if "children" in obj:
        return Element(
            tuple(node_from_python(child) for child in obj["children"]),
            kind=obj.get("type", "paragraph"),
            inline=bool(obj.get("inline", False)),
        )
    raise OperationFormatError("Node has neither text nor children", obj)


def node_to_python(node) -> Any:
    if isinstance(node, Text):
        out: dict[str, Any] = {"text": node.text}
        if node.marks:
            out["marks"] = sorted(node.marks)
        return out
    if isinstance(node, Element):
        out = {"type": node.kind, "children": [node_to_python(c) for c in node.children]}
        if node.inline:
            out["inline"] = True
        return out
    if isinstance(node, Document):
        return {"children": [node_to_python(c) for c in node.children]}
    if node is None:
        return None
    raise TypeError(f"Unknown node type: {type(node)}")


def document_from_python(obj: Any) -> Document:
    return Document(tuple(node_from_python(child) for child in obj["children"]))


# ═══════════════════════════════════════════════════════════════════
#  POSITIONS AND DIFFS
# ═══════════════════════════════════════════════════════════════════

def point_from_python(obj: Any) -> Point:
    return Point(tuple(obj["path"]), obj["offset"])


def point_to_python(point: Point) -> dict:
    return {"path": list(point.path), "offset": point.offset}


def range_from_python(obj: Any) -> Range:
    return Range(point_from_python(obj["anchor"]), point_from_python(obj["focus"]))


def range_to_python(range: Range) -> dict:
    return {"anchor": point_to_python(range.anchor), "focus": point_to_python(range.focus)}


def text_diff_from_python(obj: Any) -> TextDiff:
    diff = obj["diff"]
    return TextDiff(obj["id"], tuple(obj["path"]),
                    StringDiff(diff["start"], diff["end"], diff["text"]))


def text_diff_to_python(text_diff: TextDiff) -> dict:
    diff = text_diff.diff
    return {
        "id": text_diff.id,
        "path": list(text_diff.path),
        "diff": {"start": diff.start, "end": diff.end, "text": diff.text},
    }


# ═══════════════════════════════════════════════════════════════════
#  OPERATIONS
# ═══════════════════════════════════════════════════════════════════

# node property wire name → node field
_PROPERTY_FIELDS = {"type": "kind", "inline": "inline", "marks": "marks"}


def properties_from_python(obj: Any) -> dict:
    """
    Convert a wire property dict into node field values.

    {"type": "quote", "marks": ["bold"]}  →  {"kind": "quote", "marks": frozenset({"bold"})}
    """
    if not isinstance(obj, dict):
        raise OperationFormatError("Properties must be a mapping", obj)
    out = {}
    for key, value in obj.items():
        name = _PROPERTY_FIELDS.get(key)
        if name is None:
            raise OperationFormatError(f"Unknown node property {key!r}", obj)
        out[name] = frozenset(value) if name == "marks" else value
    return out


def properties_to_python(properties: dict) -> dict:
    wire = {name: key for key, name in _PROPERTY_FIELDS.items()}
    out = {}
    for name, value in properties.items():
        if name == "marks":
            value = sorted(value)
        out[wire.get(name, name)] = value
    return out


def _wire_name(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _optional_node(obj: Any):
    return node_from_python(obj) if obj is not None else None


_FIELD_DECODERS = {
    "path": tuple,
    "new_path": tuple,
    "node": _optional_node,
    "properties": properties_from_python,
    "new_properties": properties_from_python,
}

_FIELD_ENCODERS = {
    "path": list,
    "new_path": list,
    "node": node_to_python,
    "properties": properties_to_python,
    "new_properties": properties_to_python,
}


def operation_from_python(obj: Any) -> Operation:
    """Decode an operation dict.  Unknown types raise OperationFormatError."""
    if not isinstance(obj, dict) or "type" not in obj:
        raise OperationFormatError("Operation must be a mapping with a type", obj)

    op_type = obj["type"]
    cls = OPERATION_TYPES.get(op_type)
    if cls is None:
        raise OperationFormatError(f"Unknown operation type {op_type!r}", obj)

    kwargs = {}
    for f in dataclasses.fields(cls):
        key = _wire_name(f.name)
        if key not in obj:
            if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                raise OperationFormatError(
                    f"Operation {op_type!r} is missing field {key!r}", obj
                )
            continue
        value = obj[key]
        # selection properties are ranges, not node properties
        if cls is not SetSelection and f.name in _FIELD_DECODERS:
            try:
                value = _FIELD_DECODERS[f.name](value)
            except TypeError as e:
                raise OperationFormatError(
                    f"Operation {op_type!r} has a malformed field {key!r}", obj
                ) from e
        kwargs[f.name] = value
    return cls(**kwargs)


def operation_to_python(op: Operation) -> dict:
    if OPERATION_TYPES.get(getattr(op, "type", None)) is not type(op):
        raise TypeError(f"Unknown operation type: {type(op)}")

    out: dict[str, Any] = {"type": op.type}
    for f in dataclasses.fields(op):
        value = getattr(op, f.name)
        if not isinstance(op, SetSelection) and f.name in _FIELD_ENCODERS:
            value = _FIELD_ENCODERS[f.name](value)
        out[_wire_name(f.name)] = value
    return out


def from_json(text: str) -> Operation:
    """Parse a JSON string into an operation."""
    return operation_from_python(json.loads(text))


def to_json(op: Operation, **kwargs) -> str:
    """Convert an operation to a JSON string."""
    return json.dumps(operation_to_python(op), **kwargs)
