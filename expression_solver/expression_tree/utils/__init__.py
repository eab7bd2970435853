"""Utilities for expression trees."""

from .sympy_utils import SymPySimplifier
from .validator import ExpressionValidator
from .tree_utils import (
    get_all_nodes, calculate_tree_depth, find_nodes_by_operator,
    get_constants, get_variables, find_root, get_node_path,
    replace_child_node, replace_node_in_tree, validate_tree_structure
)

__all__ = [
    'SymPySimplifier', 'ExpressionValidator',
    'get_all_nodes', 'calculate_tree_depth', 'find_nodes_by_operator',
    'get_constants', 'get_variables', 'find_root', 'get_node_path',
    'replace_child_node', 'replace_node_in_tree', 'validate_tree_structure'
]
