"""
Tree view projection: a hierarchy grown from the model's root components.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Set

from ..models import Component, ParsedSBOM, Severity
from .graph import ROOT_NODE_ID


@dataclass
class TreeNode:
    id: str
    component: Optional[Component] = None
    level: int = 0
    is_collapsed: bool = False
    child_count: int = 0
    max_severity: Optional[Severity] = None
    children: List['TreeNode'] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.id == ROOT_NODE_ID


def build_tree(
    model: ParsedSBOM,
    filtered: Sequence[Component],
    collapsed: Iterable[str] = (),
    max_depth: int = 6
) -> TreeNode:
    """
    Build the dependency tree for a filtered component list.

    The synthetic root's children are the filtered root components; each node's
    children are its filtered, resolvable dependencies. A component reached
    through several parents appears under each of them. Collapsed nodes keep
    their ``child_count`` but get no children, nothing deeper than
    ``max_depth`` is expanded, and a component is never nested inside itself.

    Args:
        model: The merged model
        filtered: Components that passed the filter
        collapsed: Ids of nodes whose children are hidden
        max_depth: Deepest level (1 = root components) to include

    Returns:
        The synthetic ``__root__`` node
    """
    collapsed_ids: Set[str] = set(collapsed)
    filtered_ids = {comp.id for comp in filtered}

    root = TreeNode(id=ROOT_NODE_ID, is_collapsed=ROOT_NODE_ID in collapsed_ids)
    root_children = [comp_id for comp_id in model.root_components if comp_id in filtered_ids]
    root.child_count = len(root_children)
    if root.is_collapsed:
        return root

    def grow(parent: TreeNode, child_ids: List[str], ancestors: Set[str]) -> None:
        level = parent.level + 1
        if level > max_depth:
            return
        for child_id in child_ids:
            component = model.get_component(child_id)
            if component is None or child_id in ancestors:
                continue
            grandchildren = [dep_id for dep_id in component.dependencies if dep_id in filtered_ids]
            node = TreeNode(
                id=child_id,
                component=component,
                level=level,
                is_collapsed=child_id in collapsed_ids,
                child_count=len(grandchildren),
                max_severity=component.max_severity
            )
            parent.children.append(node)
            if not node.is_collapsed and grandchildren:
                grow(node, grandchildren, ancestors | {child_id})

    grow(root, root_children, set())
    return root


def iter_tree(node: TreeNode) -> Iterator[TreeNode]:
    """Walk a tree depth-first, parents before children."""
    yield node
    for child in node.children:
        yield from iter_tree(child)


def expandable_ids(tree: TreeNode) -> Set[str]:
    """Ids of nodes that have children to hide (the "collapse all" set)."""
    return {node.id for node in iter_tree(tree) if node.child_count > 0}
