"""
지하철 경로 탐색 CLI

사용법:
    python -m subway_route route 0222 0150 --routes 3
    python -m subway_route route 0222 0150 --time 2026-03-02T08:30 --json
    python -m subway_route validate --catalog data/stations.json
    python -m subway_route stats
"""

import argparse
import json
import sys
from datetime import datetime
from typing import List, Optional

from pydantic import ValidationError

from subway_route.exceptions import RouteEngineError
from subway_route.logging_config import setup_logger
from subway_route.models.schemas import RouteSearchOptions
from subway_route.services.catalog import load_catalog
from subway_route.services.graph_builder import GraphBuilder, GraphProvider, check_connectivity
from subway_route.services.route_search import RouteService
from subway_route.services.route_summary import summarize_route


def _provider(catalog_path: Optional[str]) -> GraphProvider:
    return GraphProvider(lambda: load_catalog(catalog_path))


def _parse_time(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"ISO 형식 시각이 아님: {value}")


def cmd_route(args: argparse.Namespace) -> int:
    service = RouteService(_provider(args.catalog))
    options = RouteSearchOptions(max_transfers=args.max_transfers, max_routes=args.routes)
    routes = service.find_routes(args.start, args.end, departure_time=args.time, options=options)

    if args.json:
        payload = [
            {**route.to_dict(), "summary": summarize_route(route, i).to_dict()}
            for i, route in enumerate(routes)
        ]
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    if not routes:
        print(f"경로 없음: {args.start} -> {args.end}")
        return 0

    for i, route in enumerate(routes):
        summary = summarize_route(route, i)
        tag = "대체" if route.is_alternative else route.kind.value
        print(f"\n[{i + 1}] {tag}{' (추천)' if summary.is_best else ''}")
        print(
            f"  {route.total_travel_minutes}분 | 환승 {route.transfers}회 | "
            f"{route.fare_amount:,}원 | 혼잡도 {route.congestion_score}"
        )
        print("  " + " → ".join(summary.key_stations))
        print("  " + ", ".join(
            f"{leg.label} {leg.minutes}분" + (f" ({leg.station_count}개 역)" if leg.station_count else "")
            for leg in summary.legs
        ))
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    graph = GraphBuilder().build(load_catalog(args.catalog))
    report = check_connectivity(graph)

    print("\n=== 그래프 검증 ===")
    print(f"연결된 역: {report.connected}/{report.total} ({report.coverage:.1f}%)")
    if report.disconnected_sample:
        print(f"연결 안 된 역 (샘플): {report.disconnected_sample}")

    print("\n호선별 역 수:")
    for line, count in report.stations_per_line.items():
        print(f"  {line}호선: {count}개")

    if not report.is_healthy():
        print("\n경고: 그래프 연결성이 낮습니다. 데이터를 확인하세요.")
        return 1
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    stats = _provider(args.catalog).get().get_stats()
    print(
        f"역 {stats['stations']}개, 엣지 {stats['edges']}개 "
        f"(환승 {stats['transfer_edges']}개), 노선 {stats['lines']}개"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="subway_route",
        description="지하철 다중 기준 경로 탐색",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
예시:
  python -m subway_route route 0222 0150           # 최단/최소환승/혼잡도 경로
  python -m subway_route route 0222 0150 --json    # JSON 출력
  python -m subway_route validate                  # 그래프 연결성 검증
        """
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    route = subparsers.add_parser("route", help="경로 탐색")
    route.add_argument("start", help="출발역 ID")
    route.add_argument("end", help="도착역 ID")
    route.add_argument("--time", type=_parse_time, default=None, help="출발 시각 (ISO 형식)")
    route.add_argument("--max-transfers", type=int, default=None, help="최대 환승 횟수")
    route.add_argument("--routes", type=int, default=None, help="최대 경로 수")
    route.add_argument("--json", action="store_true", help="JSON으로 출력")
    route.set_defaults(func=cmd_route)

    validate = subparsers.add_parser("validate", help="그래프 연결성 검증")
    validate.set_defaults(func=cmd_validate)

    stats = subparsers.add_parser("stats", help="그래프 통계")
    stats.set_defaults(func=cmd_stats)

    for sub in (route, validate, stats):
        sub.add_argument("--catalog", default=None, help="카탈로그 JSON 경로 (기본: 내장 샘플)")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI 진입점"""
    args = build_parser().parse_args(argv)
    setup_logger()

    try:
        return args.func(args)
    except RouteEngineError as e:
        print(f"오류: {e}", file=sys.stderr)
        return 2
    except ValidationError as e:
        print(f"잘못된 옵션: {e.errors()[0]['msg']}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
