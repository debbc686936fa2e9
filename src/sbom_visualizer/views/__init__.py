"""
Derived views over the merged model: filtering, table sorting, graph and tree projections.
"""

from .filters import FilterState, DependencyTypeFilter, filter_components, matches
from .table import SortState, sort_components, toggle_sort, table_rows
from .graph import GraphNode, GraphData, build_graph, ROOT_NODE_ID
from .tree import TreeNode, build_tree, iter_tree
from .severity import count_by_severity, remediation_advice, severity_label

__all__ = [
    "FilterState",
    "DependencyTypeFilter",
    "filter_components",
    "matches",
    "SortState",
    "sort_components",
    "toggle_sort",
    "table_rows",
    "GraphNode",
    "GraphData",
    "build_graph",
    "ROOT_NODE_ID",
    "TreeNode",
    "build_tree",
    "iter_tree",
    "count_by_severity",
    "remediation_advice",
    "severity_label"
]
