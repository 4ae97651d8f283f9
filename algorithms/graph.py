"""
Resource-Allocation Graph derivation for the OS Concepts Simulator.

Turns a resource-allocation state into a bipartite multigraph of process and
resource nodes for the rendering layer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence

from models.resource import ResourceAllocation
from utils.errors import ValidationError


class NodeType(Enum):
    PROCESS = "process"
    RESOURCE = "resource"


class EdgeType(Enum):
    ALLOCATION = "allocation"  # resource -> process
    REQUEST = "request"        # process -> resource


@dataclass(frozen=True)
class GraphNode:
    node_id: str
    node_type: NodeType


@dataclass(frozen=True)
class GraphEdge:
    """
    Directed edge of the resource-allocation graph.

    Attributes:
        source: Source node id
        target: Target node id
        edge_type: ALLOCATION (R -> P) or REQUEST (P -> R)
        weight: Units held (allocation) or still needed (request)
    """
    source: str
    target: str
    edge_type: EdgeType
    weight: int


@dataclass
class ResourceGraph:
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)

    def edges_of_type(self, edge_type: EdgeType) -> List[GraphEdge]:
        return [e for e in self.edges if e.edge_type == edge_type]

    def neighbors(self, node_id: str) -> List[str]:
        """Targets of the outgoing edges of node_id."""
        return [e.target for e in self.edges if e.source == node_id]


def resource_node_id(index: int) -> str:
    return f"R{index}"


def build_resource_graph(num_resources: int, processes: Sequence[ResourceAllocation]) -> ResourceGraph:
    """
    Build the resource-allocation graph.

    Nodes are R0..R{n-1} followed by the processes in input order. For each
    process, an allocation edge R{i} -> process is emitted for every
    allocation[i] > 0 and a request edge process -> R{i} for every need[i] > 0.

    Args:
        num_resources: Number of resource types n
        processes: Resource state of each process

    Returns:
        ResourceGraph

    Raises:
        ValidationError: If a process vector length differs from num_resources
    """
    graph = ResourceGraph()
    graph.nodes.extend(GraphNode(resource_node_id(i), NodeType.RESOURCE) for i in range(num_resources))

    for process in processes:
        if process.num_resources != num_resources:
            raise ValidationError(
                f"{process.process_id} has {process.num_resources} resource types, expected {num_resources}"
            )
        graph.nodes.append(GraphNode(process.process_id, NodeType.PROCESS))

        for i, amount in enumerate(process.allocation):
            if amount > 0:
                graph.edges.append(
                    GraphEdge(resource_node_id(i), process.process_id, EdgeType.ALLOCATION, amount)
                )
        for i, amount in enumerate(process.need):
            if amount > 0:
                graph.edges.append(
                    GraphEdge(process.process_id, resource_node_id(i), EdgeType.REQUEST, amount)
                )

    return graph
