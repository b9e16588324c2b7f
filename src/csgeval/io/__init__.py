"""I/O utilities for csgeval."""

from .tree_json import node_tree_to_json, node_tree_from_json

__all__ = ['node_tree_to_json', 'node_tree_from_json']
