"""경로 탐색 서비스 모듈"""
from .catalog import load_catalog, parse_catalog
from .congestion import (
    CongestionLookup,
    NeutralCongestionProvider,
    SeoulCongestionProvider,
    StaticCongestionProvider,
)
from .edge_cost import EdgeCostModel
from .graph_builder import GraphBuilder, GraphProvider, check_connectivity
from .path_finder import PathFinder
from .route_builder import RouteResultBuilder, calculate_fare
from .route_search import (
    AlternativeRouteSearch,
    RouteService,
    check_route_service,
    find_routes,
    route_service,
)
from .route_summary import summarize_route

__all__ = [
    "load_catalog",
    "parse_catalog",
    "CongestionLookup",
    "NeutralCongestionProvider",
    "SeoulCongestionProvider",
    "StaticCongestionProvider",
    "EdgeCostModel",
    "GraphBuilder",
    "GraphProvider",
    "check_connectivity",
    "PathFinder",
    "RouteResultBuilder",
    "calculate_fare",
    "AlternativeRouteSearch",
    "RouteService",
    "check_route_service",
    "find_routes",
    "route_service",
    "summarize_route",
]
