"""
Tree Utility Functions

Traversal, lookup and splice helpers shared by the parser, the optimizer
and the validator.
"""

from typing import List, Optional, Set

from ..core.node import Node, BinaryOpNode, UnaryOpNode, ConstantNode, VariableNode


def get_all_nodes(node: Node, traversal_order: str = 'breadth_first') -> List[Node]:
    """
    Get all nodes in the tree using specified traversal order.

    Args:
        node: Root node of the tree
        traversal_order: 'breadth_first' (default) or 'depth_first'

    Returns:
        List of all nodes in the tree
    """
    if traversal_order == 'breadth_first':
        return _breadth_first_traversal(node)
    elif traversal_order == 'depth_first':
        return _depth_first_traversal(node)
    else:
        raise ValueError(f"Invalid traversal_order: {traversal_order}")


def _breadth_first_traversal(node: Node) -> List[Node]:
    """Breadth-first traversal (iterative)"""
    nodes_to_visit = [node]
    all_nodes = []
    position = 0

    while position < len(nodes_to_visit):
        current_node = nodes_to_visit[position]
        position += 1
        all_nodes.append(current_node)
        nodes_to_visit.extend(current_node.children())

    return all_nodes


def _depth_first_traversal(node: Node) -> List[Node]:
    """Depth-first pre-order traversal (iterative)"""
    stack = [node]
    all_nodes = []

    while stack:
        current_node = stack.pop()
        all_nodes.append(current_node)
        stack.extend(reversed(current_node.children()))

    return all_nodes


def calculate_tree_depth(node: Node) -> int:
    """
    Calculate the maximum depth of the tree.

    Args:
        node: Root node of the tree

    Returns:
        Maximum depth (a single leaf has depth 1)
    """
    children = node.children()
    if not children:
        return 1
    return 1 + max(calculate_tree_depth(child) for child in children)


def find_nodes_by_operator(node: Node, operator: str) -> List[Node]:
    """
    Find all operator nodes with a given operator symbol.

    Args:
        node: Root node of the tree
        operator: Operator symbol such as '+', 'neg' or 'log'

    Returns:
        Matching nodes in breadth-first order
    """
    return [n for n in get_all_nodes(node)
            if isinstance(n, (BinaryOpNode, UnaryOpNode)) and n.operator == operator]


def get_constants(node: Node) -> List[float]:
    """Constant values in depth-first order"""
    return [n.value for n in get_all_nodes(node, 'depth_first') if isinstance(n, ConstantNode)]


def get_variables(node: Node) -> Set[str]:
    """Names of all variables referenced in the tree"""
    return {n.name for n in get_all_nodes(node) if isinstance(n, VariableNode)}


def find_root(node: Node) -> Node:
    """Follow parent links up to the topmost node"""
    while node.parent is not None:
        node = node.parent
    return node


def get_node_path(root: Node, target: Node) -> Optional[List[str]]:
    """
    Slot names leading from root to target.

    Args:
        root: Root node of the tree
        target: Node to locate (matched by identity)

    Returns:
        List of slot names ('left', 'right', 'operand'), or None if target
        is not in the tree
    """
    path: List[str] = []
    node = target
    while node is not root:
        parent = node.parent
        if parent is None:
            return None
        for slot, child in parent.slots():
            if child is node:
                path.append(slot)
                break
        node = parent
    path.reverse()
    return path


def replace_child_node(parent: Node, old_child: Node, new_child: Node):
    """
    Put new_child into the slot of parent that holds old_child.

    Args:
        parent: Operator node owning old_child
        old_child: Current occupant of the slot (matched by identity)
        new_child: Node to install; its parent link is updated
    """
    parent.replace_child(old_child, new_child)


def replace_node_in_tree(root: Node, target: Node, replacement: Node) -> Node:
    """
    Replace target with replacement somewhere under root.

    Args:
        root: Root of the tree being edited
        target: Node to replace (matched by identity)
        replacement: Node taking target's place

    Returns:
        The root of the edited tree; this is replacement when target is root
    """
    if target is root:
        return replacement
    replace_child_node(target.parent, target, replacement)
    return root


def validate_tree_structure(node: Node) -> bool:
    """
    Check that a tree is well-formed.

    Every operator slot must be filled, every child's parent link must point
    at the node holding it, and no node may appear twice.

    Args:
        node: Root node of the tree

    Returns:
        True if the tree is well-formed
    """
    seen: Set[int] = set()
    stack = [node]
    while stack:
        current = stack.pop()
        if id(current) in seen:
            return False
        seen.add(id(current))
        if not current.usable():
            return False
        for _, child in current.slots():
            if child.parent is not current:
                return False
            stack.append(child)
    return True
