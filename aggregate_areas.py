"""Aggregate feature areas per administrative city and write a sorted report.

The input is a vector dataset (GeoJSON, or anything geopandas can read) such
as the MLIT "行政区域データ" (N03) administrative boundaries. The planar area of
every polygon is summed per value of the grouping attribute (``N03_004``, the
city name, by default) using a pool of worker threads, and the totals are
written as a two-column ``City,Area`` table ordered by area, largest first.

Usage::

    python aggregate_areas.py N03-20240101_11.geojson --output output.csv \
        [--key-attribute N03_004] [--workers 8] [--unsupported-geometry reject]

Areas are computed on the raw coordinates without projection, so values in
degrees are only meaningful relative to each other.
"""
from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from time import monotonic
from typing import List, Optional, Sequence

from aggregation.aggregator import AGGREGATOR_KINDS, make_aggregator
from aggregation.ordering import REPORT_HEADER, ResultRow, order
from aggregation.pipeline import ParallelPipeline, PipelineStats
from config import AggregationConfig
from data.features import RawFeature, UnsupportedGeometryPolicy, load_features
from utils.io import write_report
from utils.logging_setup import setup_logger

LOGGER = logging.getLogger(__name__)


@dataclass
class AggregationReport:
    rows: List[ResultRow]
    stats: PipelineStats
    elapsed: float = 0.0
    header: Sequence[str] = field(default=REPORT_HEADER)

    @property
    def errors(self) -> int:
        return self.stats.errors


def aggregate(features: Sequence[RawFeature], config: Optional[AggregationConfig] = None) -> AggregationReport:
    """Run the aggregation over already loaded *features*."""
    config = config or AggregationConfig(show_progress=False)
    started = monotonic()
    aggregator = make_aggregator(config.aggregator, config.shards)
    pipeline = ParallelPipeline(
        key_attribute=config.key_attribute,
        workers=config.workers,
        unsupported_geometry=config.unsupported_geometry,
        show_progress=config.show_progress,
    )
    pipeline.run(features, aggregator)
    rows = order(aggregator)
    return AggregationReport(rows=rows, stats=pipeline.stats, elapsed=monotonic() - started)


def process(input_path: Path, output_path: Path, config: Optional[AggregationConfig] = None) -> AggregationReport:
    """Load *input_path*, aggregate it and write the report to *output_path*."""
    started = monotonic()
    features = load_features(input_path)
    report = aggregate(features, config)
    write_report(report.rows, output_path, header=report.header)
    report.elapsed = monotonic() - started
    LOGGER.info("Wrote %d rows to %s", len(report.rows), output_path)
    LOGGER.info("Processing time: %.3f s", report.elapsed)
    return report


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Aggregate polygon areas per city from a vector dataset.")
    parser.add_argument("input", type=Path, help="Path to the input GeoJSON (or other vector) file")
    parser.add_argument("--output", type=Path, default=Path("output.csv"),
                        help="Report path; .csv (default) or .parquet")
    parser.add_argument("--config", type=Path, default=None, help="Optional JSON file with aggregation settings")
    parser.add_argument("--key-attribute", default=None, help="Property holding the group key (default: N03_004)")
    parser.add_argument("--workers", type=int, default=None,
                        help="Number of worker threads (default: number of CPUs)")
    parser.add_argument("--unsupported-geometry", choices=[policy.value for policy in UnsupportedGeometryPolicy],
                        default=None, help="Count non-polygon geometries as errors (reject) or as zero area (zero)")
    parser.add_argument("--aggregator", choices=AGGREGATOR_KINDS, default=None,
                        help="Accumulator locking scheme (default: locked)")
    parser.add_argument("--shards", type=int, default=None, help="Shard count for the sharded accumulator")
    parser.add_argument("--no-progress", action="store_true", help="Disable the tqdm progress bar")
    parser.add_argument("--log-level", default="INFO", help="Logging level: DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--log-file", default=None, help="Optional path to write logs")
    return parser


def resolve_config(args: argparse.Namespace) -> AggregationConfig:
    config = AggregationConfig.from_json(args.config) if args.config else AggregationConfig()
    return config.with_overrides(
        key_attribute=args.key_attribute,
        workers=args.workers,
        unsupported_geometry=args.unsupported_geometry,
        aggregator=args.aggregator,
        shards=args.shards,
        show_progress=False if args.no_progress else None,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    setup_logger(args.log_level, args.log_file)

    try:
        config = resolve_config(args)
    except ValueError as exc:
        parser.error(str(exc))

    process(args.input, args.output, config)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
