"""Geometry node tree JSON serialization/deserialization helpers.

The document handed to a geometry kernel is a nested mapping per node:
``{"kind": ..., "params": {...}, "children": [...]}`` under a schema id.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from csgeval.nodes import CsgNode, GeometryNode, PrimitiveNode, TransformNode
from csgeval.xform import Matrix

SCHEMA_ID = "csgeval-node-tree-v0.1"

CSG_KINDS = ("union", "difference", "intersection")
PRIMITIVE_KINDS = ("cube", "sphere", "cylinder")


def node_tree_to_json(root: GeometryNode) -> Dict[str, Any]:
    """Convert a node tree into a JSON-serializable document."""

    return {
        "schema": SCHEMA_ID,
        "nodeCount": root.count(),
        "root": root.to_dict(),
    }


def _deserialize_node(data: Dict[str, Any]) -> GeometryNode:
    kind = data.get("kind")
    params = data.get("params", {}) or {}
    children: List[GeometryNode] = [_deserialize_node(child) for child in data.get("children", [])]
    if kind == "group":
        return GeometryNode(children=children)
    if kind in CSG_KINDS:
        return CsgNode(children=children, operation=kind)
    if kind == "multmatrix":
        return TransformNode(children=children, matrix=Matrix(params["matrix"]))
    if kind in PRIMITIVE_KINDS:
        return PrimitiveNode(children=children, name=kind, values=dict(params))
    raise ValueError(f"unsupported node kind: {kind!r}")


def node_tree_from_json(doc: Dict[str, Any]) -> GeometryNode:
    """Rebuild a node tree from a document produced by :func:`node_tree_to_json`."""

    if doc.get("schema") != SCHEMA_ID:
        raise ValueError(f"unsupported node tree schema: {doc.get('schema')!r}")
    root = doc.get("root")
    if not isinstance(root, dict):
        raise ValueError("node tree document has no root node")
    return _deserialize_node(root)


def dumps(root: GeometryNode, indent: int = 2) -> str:
    """Serialize a node tree to a JSON string."""

    return json.dumps(node_tree_to_json(root), indent=indent)


def loads(text: str) -> GeometryNode:
    """Parse a JSON string produced by :func:`dumps`."""

    return node_tree_from_json(json.loads(text))
