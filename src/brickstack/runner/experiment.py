"""Snapshot runner: settle a brick snapshot, analyze it, export and report."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Sequence

from brickstack.core.errors import BrickStackError
from brickstack.core.models import Brick
from brickstack.core.parser import load_snapshot, parse_snapshot
from brickstack.logging_config import setup_logging
from brickstack.monitoring.metrics import (
    RunMetrics,
    export_to_csv,
    export_to_json,
    print_summary,
)
from brickstack.monitoring.telegram_notifier import (
    format_error,
    format_run_start,
    format_run_summary,
    send_telegram,
)
from brickstack.pipeline import StackAnalysis, analyze_bricks
from brickstack.runner.config import RunConfig, load_config
from brickstack.runner.dataset import ORDERING_STRATEGIES, format_snapshot, generate_snapshot
from brickstack.simulation.settling import SettlingEngine

logger = logging.getLogger(__name__)


class StackRunner:
    """
    Orchestrates one snapshot run.

    Parses the snapshot, settles and analyzes it, optionally re-settles it
    under alternative input orderings, saves results and sends progress
    updates.
    """

    def __init__(self, config: RunConfig | None = None):
        """
        Initialize the runner.

        Args:
            config: Run configuration (default: RunConfig())
        """
        self.config = config or RunConfig()

    async def run(
        self,
        lines: Iterable[str],
        source: str = "<lines>",
        check_orderings: bool = False,
    ) -> RunMetrics:
        """
        Run the full pipeline over snapshot lines.

        Args:
            lines: Snapshot text lines
            source: Label recorded in the metrics (e.g. file path)
            check_orderings: Re-settle under every ordering strategy and
                record whether all results match

        Returns:
            RunMetrics for the run

        Raises:
            BrickStackError: On any parse, geometry or settling failure.
                Nothing is exported in that case.
        """
        try:
            bricks = parse_snapshot(lines)
        except BrickStackError as exc:
            await self._report_failure(exc, source)
            raise
        return await self.run_bricks(bricks, source=source, check_orderings=check_orderings)

    async def run_file(self, path: Path | str, check_orderings: bool = False) -> RunMetrics:
        """Run the pipeline over a snapshot file."""
        source = str(path)
        try:
            _, bricks = load_snapshot(path)
        except BrickStackError as exc:
            await self._report_failure(exc, source)
            raise
        return await self.run_bricks(bricks, source=source, check_orderings=check_orderings)

    async def run_bricks(
        self,
        bricks: list[Brick],
        source: str = "<bricks>",
        check_orderings: bool = False,
    ) -> RunMetrics:
        """Settle, analyze and export already-parsed bricks."""
        run_id = f"run_{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}"
        metrics = RunMetrics(run_id=run_id, source=source)
        logger.info("Analyzing %d bricks from %s", len(bricks), source)

        try:
            await self._notify(format_run_start(source, len(bricks)))

            analysis = analyze_bricks(
                bricks,
                max_iterations=self.config.max_settle_iterations,
                verify=self.config.verify_settled,
            )
            metrics.record_analysis(analysis)

            if check_orderings:
                metrics.order_independent = self._check_orderings(bricks, analysis)
        except BrickStackError as exc:
            await self._report_failure(exc, source, run_id)
            raise

        metrics.mark_complete()
        logger.info(
            "Run %s: %d safe, %d total falls in %.3fs",
            run_id, metrics.safe_count, metrics.total_fall_count, metrics.runtime_seconds,
        )

        self._save_results(metrics)

        await self._notify(format_run_summary(
            brick_count=metrics.brick_count,
            safe_count=metrics.safe_count,
            total_fall_count=metrics.total_fall_count,
            runtime_seconds=metrics.runtime_seconds,
        ))
        return metrics

    def _check_orderings(self, bricks: list[Brick], analysis: StackAnalysis) -> bool:
        """
        Settle *bricks* under every ordering strategy and compare.

        Returns:
            True if every ordering produced the same positions and supporters
        """
        engine = SettlingEngine(
            max_iterations=self.config.max_settle_iterations,
            verify=self.config.verify_settled,
        )
        reference = analysis.stack
        identical = True
        for name, strategy_fn in ORDERING_STRATEGIES.items():
            other = engine.settle(strategy_fn(bricks))
            if dict(other.bricks) != dict(reference.bricks) or dict(other.supporters) != dict(reference.supporters):
                logger.warning("Ordering '%s' settled differently from input order", name)
                identical = False
        return identical

    def _save_results(self, metrics: RunMetrics) -> list[Path]:
        """
        Save metrics to JSON and CSV files as configured.

        Args:
            metrics: RunMetrics to save

        Returns:
            Paths written
        """
        written: list[Path] = []
        results_dir = Path(self.config.results_dir)

        if self.config.export_json:
            json_path = results_dir / f"{metrics.run_id}.json"
            export_to_json(metrics, json_path)
            written.append(json_path)

        if self.config.export_csv:
            csv_path = results_dir / f"{metrics.run_id}_bricks.csv"
            export_to_csv(metrics, csv_path)
            written.append(csv_path)

        for path in written:
            logger.info("Saved results to %s", path)
        return written

    async def _report_failure(self, exc: BrickStackError, source: str, run_id: str | None = None) -> None:
        logger.error("Run %s failed: %s", run_id or source, exc)
        await self._notify(format_error(type(exc).__name__, str(exc), {"source": source}))

    async def _notify(self, message: str) -> None:
        if not self.config.send_telegram_updates:
            return
        sent = await send_telegram(message, chat_id=self.config.telegram_chat_id)
        if not sent:
            logger.debug("Telegram notification not sent")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="brickstack-run",
        description="Settle a brick snapshot and analyze its support structure",
    )
    parser.add_argument(
        "snapshot",
        nargs="?",
        help="Snapshot file, one 'x1,y1,z1~x2,y2,z2' brick per line",
    )
    parser.add_argument(
        "--generate",
        type=int,
        metavar="COUNT",
        help="Analyze a random snapshot of COUNT bricks instead of a file",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for --generate (default: None)",
    )
    parser.add_argument("--config", help="YAML run configuration")
    parser.add_argument("--results-dir", help="Directory to save results (overrides config)")
    parser.add_argument(
        "--no-export",
        action="store_true",
        help="Do not write JSON/CSV results",
    )
    parser.add_argument(
        "--check-orderings",
        action="store_true",
        help="Re-settle under alternative input orderings and compare",
    )
    parser.add_argument(
        "--telegram",
        action="store_true",
        help="Send Telegram notifications (needs TELEGRAM_BOT_TOKEN)",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


async def main(args: argparse.Namespace, config: RunConfig) -> RunMetrics:
    """
    Run the snapshot described by parsed command-line arguments.

    Args:
        args: Parsed arguments from build_parser()
        config: Effective run configuration
    """
    runner = StackRunner(config)
    if args.generate is not None:
        bricks = generate_snapshot(count=args.generate, seed=args.seed)
        source = f"generated(count={args.generate}, seed={args.seed})"
        return await runner.run(
            format_snapshot(bricks), source=source, check_orderings=args.check_orderings,
        )
    return await runner.run_file(args.snapshot, check_orderings=args.check_orderings)


def cli(argv: Sequence[str] | None = None) -> int:
    """Console entry point. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.snapshot is None and args.generate is None:
        parser.error("either a snapshot file or --generate COUNT is required")

    try:
        config = load_config(args.config) if args.config else RunConfig()
    except BrickStackError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    updates: dict = {}
    if args.results_dir:
        updates["results_dir"] = Path(args.results_dir)
    if args.no_export:
        updates["export_json"] = False
        updates["export_csv"] = False
    if args.telegram:
        updates["send_telegram_updates"] = True
    if args.verbose:
        updates["log_level"] = "DEBUG"
    if updates:
        config = config.model_copy(update=updates)

    setup_logging(level=config.logging_level, log_file=config.log_file)

    try:
        metrics = asyncio.run(main(args, config))
    except BrickStackError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(print_summary(metrics))
    return 0


if __name__ == "__main__":
    sys.exit(cli())
