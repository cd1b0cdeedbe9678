"""
Command-line reachability check.

Runs a single probe from the local machine and prints the result as JSON. The
result is not persisted. With --mode opaque the probe behaves like a browser
no-CORS request: the HTTP status is ignored and any response counts as
reachable, which shows whether only the client network is blocked.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, List, Optional

import aiohttp

from reachability_monitor.config.constants import DEFAULT_PROBE_TIMEOUT_MS, DEFAULT_USER_AGENT
from reachability_monitor.domain import HttpMethod, ProbeMode, ProbeResult, ProbeTarget
from reachability_monitor.probe.aiohttp_probe import AiohttpProbe

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reachability-check",
        description="Probe a URL once and report whether it is reachable or blocked.",
    )
    parser.add_argument("url", help="URL to probe. https:// is assumed when no scheme is given.")
    parser.add_argument(
        "-m",
        "--method",
        type=str.upper,
        choices=[method.value for method in HttpMethod],
        default=HttpMethod.GET.value,
        help="HTTP method of the request (default: GET).",
    )
    parser.add_argument("-d", "--payload", default=None, help="Request body to send.")
    parser.add_argument(
        "-ct",
        "--content-type",
        default=None,
        help="Content-Type of the payload (default: text/plain).",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in ProbeMode],
        default=ProbeMode.FULL.value,
        help="'full' classifies by HTTP status, 'opaque' treats any response as reachable.",
    )
    parser.add_argument(
        "-t",
        "--timeout-ms",
        type=positive_int,
        default=DEFAULT_PROBE_TIMEOUT_MS,
        help=f"Total timeout of the probe in milliseconds (default: {DEFAULT_PROBE_TIMEOUT_MS}).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log probe details.")
    return parser


def result_to_json(result: ProbeResult) -> str:
    payload: dict = {
        "status": result.status.value,
        "httpStatus": result.http_status,
        "latencyMs": round(result.latency_ms, 2),
        "error": result.error,
        "url": result.final_url,
    }
    return json.dumps({key: value for key, value in payload.items() if value is not None})


async def run_check(args: Any) -> ProbeResult:
    async with aiohttp.ClientSession(headers={"User-Agent": DEFAULT_USER_AGENT}) as session:
        probe = AiohttpProbe(session=session, mode=ProbeMode(args.mode), timeout_ms=args.timeout_ms)
        return await probe.probe(
            ProbeTarget(
                url=args.url,
                method=args.method,
                payload=args.payload,
                content_type=args.content_type,
            )
        )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Runs the check and returns the exit code: 0 when reachable, 1 when blocked.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    result = asyncio.run(run_check(args))
    print(result_to_json(result))
    return 0 if result.is_reachable else 1


if __name__ == "__main__":
    sys.exit(main())
