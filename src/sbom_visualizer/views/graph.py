"""
Graph view projection: visible nodes and links for a filtered component set.

No layout happens here; a renderer places the nodes.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..models import Component, ParsedSBOM, Severity

ROOT_NODE_ID = "__root__"


@dataclass
class GraphNode:
    id: str
    component: Optional[Component] = None
    is_root: bool = False
    is_collapsed: bool = False
    child_count: int = 0
    max_severity: Optional[Severity] = None


@dataclass
class GraphData:
    nodes: List[GraphNode] = field(default_factory=list)
    links: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def node_ids(self) -> List[str]:
        return [node.id for node in self.nodes]

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


def build_graph(
    model: ParsedSBOM,
    filtered: Sequence[Component],
    collapsed: Iterable[str] = ()
) -> GraphData:
    """
    Build the graph view for a filtered component list.

    A synthetic ``__root__`` node links to every filtered direct component.
    Other components are visible only when reachable from a direct one through
    filtered dependencies without passing through a collapsed node.

    Args:
        model: The merged model
        filtered: Components that passed the filter
        collapsed: Ids of nodes whose dependencies are hidden

    Returns:
        Nodes (root first, then components in filtered order) and links
    """
    collapsed_ids: Set[str] = set(collapsed)
    by_id: Dict[str, Component] = {comp.id: comp for comp in filtered}

    visible = {ROOT_NODE_ID}
    queue = deque()
    for comp in filtered:
        if comp.is_direct:
            visible.add(comp.id)
            queue.append(comp.id)

    while queue:
        current = by_id[queue.popleft()]
        if current.id in collapsed_ids:
            continue
        for dep_id in current.dependencies:
            if dep_id in by_id and dep_id not in visible:
                visible.add(dep_id)
                queue.append(dep_id)

    graph = GraphData()
    graph.nodes.append(GraphNode(
        id=ROOT_NODE_ID,
        is_root=True,
        is_collapsed=ROOT_NODE_ID in collapsed_ids
    ))

    for comp in filtered:
        if comp.id not in visible:
            continue
        graph.nodes.append(GraphNode(
            id=comp.id,
            component=comp,
            is_collapsed=comp.id in collapsed_ids,
            child_count=sum(1 for dep_id in comp.dependencies if dep_id in by_id),
            max_severity=comp.max_severity
        ))

    for comp in filtered:
        if comp.is_direct and comp.id in visible:
            graph.links.append((ROOT_NODE_ID, comp.id))

    for comp in filtered:
        if comp.id not in visible or comp.id in collapsed_ids:
            continue
        for dep_id in comp.dependencies:
            if dep_id in by_id and dep_id in visible:
                graph.links.append((comp.id, dep_id))

    return graph


def expandable_ids(graph: GraphData) -> Set[str]:
    """Ids of nodes with visible children (the "collapse all" set)."""
    return {node.id for node in graph.nodes if node.child_count > 0}
