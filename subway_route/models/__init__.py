"""데이터 모델"""

from .catalog import Line, LineBranch, Station, StationCatalog
from .graph import GraphEdge, GraphNode, SubwayGraph
from .route import (
    RouteKind,
    RouteResult,
    SearchFailure,
    SearchOutcome,
    SearchState,
    Segment,
)
from .schemas import RouteSearchOptions

__all__ = [
    # catalog
    "Station",
    "Line",
    "LineBranch",
    "StationCatalog",
    # graph
    "GraphEdge",
    "GraphNode",
    "SubwayGraph",
    # route
    "RouteKind",
    "RouteResult",
    "SearchFailure",
    "SearchOutcome",
    "SearchState",
    "Segment",
    # schemas
    "RouteSearchOptions",
]
