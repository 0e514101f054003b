"""
Command-line interface for the rtmetrics runtime metrics collector.

Subcommands:
- run: watch an already-running game server until interrupted or idle
- summary: print the windowed performance summary from the state file
- chart: print the chart series of one thread from the state file
"""

import argparse
import asyncio
import json
import logging
import signal
import sys
import time
from pathlib import Path
from typing import List, Optional

from ..collectors.players import HttpPlayerSource
from ..config import get_config, set_config_path
from ..host.standalone import StandaloneHostControl, StandaloneProcess
from ..models.config import AppConfig
from ..models.perf import THREAD_NAMES
from ..monitoring.service import RuntimeMetricsService
from ..stats.log_optimizer import optimize_stats_log
from ..stats.queries import ChartFailure, build_chart_data, build_perf_summary
from ..storage.persistence import LoadedState, StatsPersistence
from ..validation import ValidationError, handle_cli_error, validate_positive_integer

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rtmetrics",
        description="Collect and query runtime performance metrics of a game server.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to config.toml. Defaults to conf/config.toml.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Collect metrics from a running server.")
    run_parser.add_argument("--pid", required=True, help="PID of the server process.")
    run_parser.add_argument("--endpoint", required=True, help="host:port of the server.")

    subparsers.add_parser("summary", help="Print the performance summary as JSON.")

    chart_parser = subparsers.add_parser("chart", help="Print the chart data of a thread as JSON.")
    chart_parser.add_argument("thread", help=f"One of {', '.join(THREAD_NAMES)}.")

    return parser


def _load_state(config: AppConfig) -> LoadedState:
    state = asyncio.run(StatsPersistence(config.storage).load())
    state.entries = optimize_stats_log(state.entries, int(time.time() * 1000), config.optimizer)
    return state


def cmd_summary(config: AppConfig) -> int:
    state = _load_state(config)
    summary = build_perf_summary(
        state.entries,
        int(time.time() * 1000),
        config.collection.min_ticks,
        config.summary,
    )
    if summary is None:
        print("insufficient data")
        return 0
    print(json.dumps(summary.to_dict(), indent=2))
    return 0


def cmd_chart(config: AppConfig, thread_name: str) -> int:
    state = _load_state(config)
    result = build_chart_data(thread_name, state.entries, state.boundaries)
    print(json.dumps(result.to_dict(), indent=2))
    return 2 if isinstance(result, ChartFailure) else 0


async def run_service(config: AppConfig, pid: int, endpoint: str) -> int:
    """
    Run the collector against a server process until shutdown.

    Returns:
        The exit code requested by the idle monitor, 0 otherwise
    """
    process = StandaloneProcess(pid, endpoint)
    service: Optional[RuntimeMetricsService] = None

    def on_quit() -> None:
        if service is not None:
            service.request_shutdown()

    host = StandaloneHostControl(on_quit=on_quit)
    service = RuntimeMetricsService(
        config=config,
        process=process,
        host=host,
        player_source=HttpPlayerSource(endpoint),
    )

    loop = asyncio.get_running_loop()

    def signal_handler(signum, frame):
        if service.shutdown_requested:
            logger.warning("Shutdown already in progress. Please be patient.")
            return
        logger.info(f"Signal {signal.strsignal(signum)} received. Initiating graceful shutdown...")
        loop.call_soon_threadsafe(service.request_shutdown)

    original_sigint = signal.signal(signal.SIGINT, signal_handler)
    original_sigterm = signal.signal(signal.SIGTERM, signal_handler)
    try:
        async with service:
            await service.wait()
    finally:
        signal.signal(signal.SIGINT, original_sigint)
        signal.signal(signal.SIGTERM, original_sigterm)

    return host.exit_code or 0


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line interface for the rtmetrics application.

    Raises:
        SystemExit: With the command's exit code, or 1 on configuration errors
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    if args.config:
        set_config_path(args.config)

    try:
        config = get_config()
    except (FileNotFoundError, ValueError, ValidationError) as e:
        handle_cli_error(
            error=e,
            context="configuration loading",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )

    if args.command == "summary":
        sys.exit(cmd_summary(config))
    if args.command == "chart":
        sys.exit(cmd_chart(config, args.thread))

    try:
        pid = validate_positive_integer(args.pid, min_value=1, field_name="--pid")
    except ValidationError as e:
        handle_cli_error(
            error=e,
            context="pid validation",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )

    logger.info(f"Starting rtmetrics for PID {pid} at {args.endpoint}")
    sys.exit(asyncio.run(run_service(config, pid, args.endpoint)))


if __name__ == "__main__":
    main_cli()
