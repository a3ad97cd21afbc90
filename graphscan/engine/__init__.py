from graphscan.engine.adjacency import AdjacencyIndex, Edge, Node, NodeId
from graphscan.engine.assignments import ClusterAssignments, NodeStatus, ScanResult
from graphscan.engine.driver import scan, scan_index, validate_parameters
from graphscan.engine.persistence import graph_from_dict, graph_from_hif, load_graph, save_result
from graphscan.engine.predicates import (
    direct_structure_reachable,
    is_core,
    is_direct_structure_reachable,
    is_hub,
)
from graphscan.engine.similarity import SimilarityEngine

__all__ = [
    "AdjacencyIndex",
    "ClusterAssignments",
    "Edge",
    "Node",
    "NodeId",
    "NodeStatus",
    "ScanResult",
    "SimilarityEngine",
    "direct_structure_reachable",
    "graph_from_dict",
    "graph_from_hif",
    "is_core",
    "is_direct_structure_reachable",
    "is_hub",
    "load_graph",
    "save_result",
    "scan",
    "scan_index",
    "validate_parameters",
]
