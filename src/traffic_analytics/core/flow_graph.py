from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Tuple

from ..parsers.base import LogRecord
from ..utils.constants import DEFAULT_FLOW_TYPE_LABEL


@dataclass(frozen=True)
class GraphNode:
    label: str
    index: int


@dataclass
class GraphEdge:
    source: int
    target: int
    weight: int = 1


@dataclass
class FlowGraph:
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Sankey shaped representation"""
        return {
            "nodes": [{"name": node.label, "index": node.index} for node in self.nodes],
            "links": [
                {"source": edge.source, "target": edge.target, "value": edge.weight}
                for edge in self.edges
            ],
        }


class FlowGraphBuilder:
    """Builds the client -> type -> host -> path -> method flow graph.

    Nodes are keyed by label alone, so equal strings from different stages
    (a path that equals a hostname, say) share one node.
    """

    def __init__(self, type_label: str = DEFAULT_FLOW_TYPE_LABEL):
        self.type_label = type_label

    def stages(self, record: LogRecord) -> Tuple[str, ...]:
        """Labels a record passes through, in flow order"""
        return (
            record.client_ip,
            self.type_label,
            record.hostname,
            record.path,
            record.method,
        )

    def build(self, records: Iterable[LogRecord]) -> FlowGraph:
        """Build the graph, with nodes and edges in first-seen order"""
        graph = FlowGraph()
        node_index: Dict[str, int] = {}
        edge_index: Dict[Tuple[int, int], int] = {}

        def node_for(label: str) -> int:
            if label not in node_index:
                node_index[label] = len(graph.nodes)
                graph.nodes.append(GraphNode(label, node_index[label]))
            return node_index[label]

        for record in records:
            path = [node_for(label) for label in self.stages(record)]
            for pair in zip(path, path[1:]):
                if pair in edge_index:
                    graph.edges[edge_index[pair]].weight += 1
                else:
                    edge_index[pair] = len(graph.edges)
                    graph.edges.append(GraphEdge(*pair))

        return graph
