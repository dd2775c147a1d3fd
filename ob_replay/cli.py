from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from ob_core.errors import LevelParseError
from ob_core.reconstructor import OrderBookReconstructor, ReconstructOptions
from ob_core.types import Snapshot, TickData
from ob_replay.config import ReplayConfig
from ob_replay.loader import TickDataError, load_checkpoint, load_deltas, load_tick_data
from ob_replay.logging_config import setup_logging
from ob_replay.report import rows_to_frame, summarize, top_of_book_row, write_report_csv
from ob_replay.writer import write_snapshots_ndjson


log = logging.getLogger("replay")


def _load_inputs(args: argparse.Namespace) -> TickData:
    if args.tick_file:
        return load_tick_data(Path(args.tick_file))
    if not args.checkpoint or not args.deltas:
        raise SystemExit("either --tick-file or both --checkpoint and --deltas are required")
    checkpoint = load_checkpoint(Path(args.checkpoint))
    deltas = load_deltas(Path(p) for p in args.deltas)
    return TickData(checkpoint=checkpoint, deltas=deltas)


def _resolve_config(args: argparse.Namespace) -> ReplayConfig:
    cfg = ReplayConfig.from_file(args.config) if args.config else ReplayConfig.from_mapping()
    depth = cfg.depth if args.depth is None else args.depth
    if depth is not None and depth < 0:
        raise SystemExit(f"--depth must be non-negative (got {depth})")
    emit_all = cfg.emit_all and not args.final_only
    return ReplayConfig(
        depth=depth,
        emit_all=emit_all,
        log_level=args.log_level or cfg.log_level,
        log_dir=cfg.log_dir,
        out_dir=cfg.out_dir,
    )


def _collect_rows(snapshots: Iterable[Snapshot], rows: List[dict]) -> Iterator[Snapshot]:
    for snap in snapshots:
        rows.append(top_of_book_row(snap))
        yield snap


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rebuild order-book snapshots from a checkpoint plus deltas")
    parser.add_argument("--tick-file", default=None, help="JSON document with `checkpoint` and `deltas`")
    parser.add_argument("--checkpoint", default=None, help="Checkpoint JSON (use with --deltas)")
    parser.add_argument("--deltas", nargs="+", default=None, help="One or more delta NDJSON(.gz) files")
    parser.add_argument("--config", default=None, help="YAML config (depth, emit_all, log_level, ...)")
    parser.add_argument("--depth", type=int, default=None, help="Max levels per side in each snapshot")
    parser.add_argument("--final-only", action="store_true", help="Emit only the final snapshot")
    parser.add_argument("--out", default=None, help="Write snapshots as NDJSON (.gz to compress)")
    parser.add_argument("--report", default=None, help="Write a top-of-book CSV report")
    parser.add_argument("--fail-on-gaps", action="store_true", help="Exit 1 when sequence gaps are found")
    parser.add_argument("--log-level", default=None)
    parser.add_argument("--no-log-file", action="store_true", help="Log to console only")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = _resolve_config(args)

    if args.no_log_file:
        logging.basicConfig(level=cfg.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    else:
        setup_logging(cfg.log_level, component="replay", base_dir=cfg.log_dir)

    try:
        tick_data = _load_inputs(args)
    except (OSError, TickDataError) as exc:
        raise SystemExit(f"failed to load tick data: {exc}") from exc

    gaps = OrderBookReconstructor.detect_gaps(tick_data.deltas)
    for gap in gaps:
        log.warning("sequence gap expected=%d actual=%d", gap.expected, gap.actual)

    reconstructor = OrderBookReconstructor()
    options: ReconstructOptions = cfg.options()
    rows: List[dict] = []
    try:
        if options.emit_all:
            snapshots: Iterable[Snapshot] = reconstructor.iterate(tick_data.checkpoint, tick_data.deltas, options)
        else:
            snapshots = reconstructor.reconstruct_all(tick_data.checkpoint, tick_data.deltas, options)
    except LevelParseError as exc:
        raise SystemExit(f"invalid checkpoint: {exc}") from exc

    snapshots = _collect_rows(snapshots, rows)
    if args.out:
        written = write_snapshots_ndjson(Path(args.out), snapshots)
        log.info("wrote %d snapshots to %s", written, args.out)
    else:
        for _ in snapshots:
            pass

    frame = rows_to_frame(rows)
    if args.report:
        write_report_csv(Path(args.report), frame)
        log.info("wrote report to %s", args.report)

    summary = summarize(frame, gaps)
    print(f"snapshots={summary.n_snapshots} gaps={summary.n_gaps} crossed={summary.n_crossed}")
    if args.fail_on_gaps and gaps:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
