"""graphscan — SCAN structural clustering of graphs into clusters, hubs and outliers."""

__version__ = "0.1.0"

from graphscan.client import GraphScan, cluster
from graphscan.exceptions import (
    DoubleClassificationError,
    InvalidParameterError,
    ScanError,
    UnknownNodeError,
)
from graphscan.models import (
    ClusteringResult,
    ClusteringStats,
    Graph,
    GraphEdge,
    GraphNode,
    ScanSettings,
)

__all__ = [
    "ClusteringResult",
    "ClusteringStats",
    "DoubleClassificationError",
    "Graph",
    "GraphEdge",
    "GraphNode",
    "GraphScan",
    "InvalidParameterError",
    "ScanError",
    "ScanSettings",
    "UnknownNodeError",
    "__version__",
    "cluster",
]
