"""Managed-directory hierarchy: root → repository → project."""

from diffcommit.hierarchy.guard import (
    create_node,
    find_nearest_marked_ancestor,
    get_hierarchy_info,
    get_node_type,
    is_inside_hierarchy_node,
    validate_create,
    validate_name,
)
from diffcommit.hierarchy.locks import PathLocks
from diffcommit.hierarchy.paths import assert_inside, assert_typed, is_inside
from diffcommit.hierarchy.types import NodeType, ValidationResult

__all__ = [
    "NodeType",
    "PathLocks",
    "ValidationResult",
    "assert_inside",
    "assert_typed",
    "create_node",
    "find_nearest_marked_ancestor",
    "get_hierarchy_info",
    "get_node_type",
    "is_inside",
    "is_inside_hierarchy_node",
    "validate_create",
    "validate_name",
]
