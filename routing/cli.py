"""
Command line entry point: resolve one route and print it.

    resolve-route 23.1828 75.7689 23.1769 75.7889
    resolve-route 23.1828 75.7689 23.1769 75.7889 --straight-line-fallback --json

Exit code 0 when a route (or the requested straight line) was produced, 1 when
no provider found one.
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from routing.config import RoutingSettings
from routing.coordinates import LatLng
from routing.logging_setup import setup_logging
from routing.models import RouteResult
from routing.route_service import RouteResolver
from routing.summary import describe_route


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resolve-route",
        description="Resolve a walking/driving route between two points using the configured providers.",
    )
    parser.add_argument("origin_lat", type=float)
    parser.add_argument("origin_lng", type=float)
    parser.add_argument("dest_lat", type=float)
    parser.add_argument("dest_lng", type=float)
    parser.add_argument(
        "--straight-line-fallback",
        action="store_true",
        help="Print a straight line instead of failing when no provider finds a route.",
    )
    parser.add_argument("--json", action="store_true", help="Print the route as JSON.")
    return parser


def route_to_dict(route: RouteResult) -> dict:
    return {
        "provider": route.provider.value,
        "distance_m": route.distance_m,
        "duration_s": route.duration_s,
        "coordinates": [[point.lat, point.lng] for point in route.coordinates],
    }


async def _resolve(settings: RoutingSettings, origin: LatLng, destination: LatLng, straight_line: bool):
    async with RouteResolver(settings) as resolver:
        if straight_line:
            return await resolver.resolve_route_or_straight_line(origin, destination)
        return await resolver.resolve_route(origin, destination)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings = RoutingSettings.from_env()
    setup_logging(settings.log_level)

    origin = LatLng(args.origin_lat, args.origin_lng)
    destination = LatLng(args.dest_lat, args.dest_lng)
    route = asyncio.run(_resolve(settings, origin, destination, args.straight_line_fallback))

    if route is None:
        print("No route found.", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(route_to_dict(route), indent=2))
    else:
        print(describe_route(route))
    return 0


if __name__ == "__main__":
    sys.exit(main())
