"""OI Momentum CLI runner.

Reads an open-interest sample window from CSV or JSON, runs the momentum /
acceleration classifier and prints the report.

Input formats:
    CSV   columns ``timestamp,value`` (optional ``symbol``). Timestamps are
          epoch milliseconds or anything ``pandas.to_datetime`` parses.
    JSON  a list of ``{"timestamp", "value"}`` objects, or an object with
          the list under ``"data"``.

Usage:
    python -m oimomentum.runners.oi_momentum_runner --input oi.csv
    python -m oimomentum.runners.oi_momentum_runner --input oi.json --interval 5m --symbol BTCUSDT
    python -m oimomentum.runners.oi_momentum_runner --input oi.csv --format text --env prod

Exit codes:
    0  report printed
    1  unreadable input or invalid configuration
    2  input rejected by the engine (too few samples, invalid sample)
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd

from config.config_manager import ConfigManager
from oimomentum.domain.exceptions import FatalError, RecoverableError
from oimomentum.domain.oi_momentum import (
    CachedAnalyzer,
    MomentumReport,
    OIMomentumAnalyzer,
    OISample,
    create_analysis_cache,
)
from oimomentum.utils.logging_setup import flush_all_loggers, get_logger, setup_logging
from oimomentum.utils.trace_context import new_cycle

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_REJECTED = 2


def _to_epoch_ms(column: pd.Series) -> pd.Series:
    """Normalize a timestamp column to integer epoch milliseconds."""
    if pd.api.types.is_numeric_dtype(column):
        return column.astype("int64")
    parsed = pd.to_datetime(column, utc=True)
    return (parsed - pd.Timestamp(0, tz="UTC")) // pd.Timedelta(milliseconds=1)


def load_samples_csv(path: Path) -> List[OISample]:
    """Load samples from a CSV with ``timestamp`` and ``value`` columns."""
    df = pd.read_csv(path)
    missing = {"timestamp", "value"} - set(df.columns)
    if missing:
        raise ValueError(f"{path}: missing column(s) {sorted(missing)}")

    df = df.assign(timestamp=_to_epoch_ms(df["timestamp"]))
    has_symbol = "symbol" in df.columns

    samples = []
    for row in df.itertuples(index=False):
        samples.append(
            OISample(
                timestamp=int(row.timestamp),
                value=float(row.value),
                symbol=str(row.symbol) if has_symbol and pd.notna(row.symbol) else "",
            )
        )
    return samples


def load_samples_json(path: Path) -> List[OISample]:
    """Load samples from a JSON list (or ``{"data": [...]}``)."""
    data = json.loads(path.read_text())
    if isinstance(data, dict):
        data = data.get("data")
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of samples or an object with a 'data' list")
    try:
        return [OISample.from_dict(item) for item in data]
    except (KeyError, TypeError) as e:
        raise ValueError(f"{path}: malformed sample ({e})") from e


def load_samples(path: Path) -> List[OISample]:
    """Load samples, choosing the parser by file extension."""
    if path.suffix.lower() == ".json":
        samples = load_samples_json(path)
    else:
        samples = load_samples_csv(path)
    logger.info(f"Loaded {len(samples)} OI samples from {path}")
    return samples


def format_text(report: MomentumReport) -> str:
    """Human-readable report for terminals."""
    analysis = report.analysis
    current = analysis.current
    stats = report.statistics
    title = f"OI Momentum: {report.symbol}" if report.symbol else "OI Momentum"

    lines = [
        title,
        "=" * 60,
        f"Signal:        {current.signal.value} ({current.strength.value})",
        f"Score:         {report.score}",
        f"Momentum:      {current.momentum:+.3f} %/hr",
        f"Acceleration:  {current.acceleration:+.3f}",
        f"Trend:         {analysis.trend.value}",
        f"Regime:        {stats.regime.value} "
        f"({stats.trend_bars}/{stats.total} trend bars, {stats.trend_ratio:.0f}%)",
        f"Risk mode:     {report.risk_mode.label}",
        f"Lookback:      {report.metadata.lookback_display} ({report.metadata.interval})",
        "-" * 60,
        report.interpretation.action,
        f"Risk: {report.interpretation.risk.value}",
        report.strategy,
    ]

    if analysis.alerts:
        lines.append("-" * 60)
        for alert in analysis.alerts:
            lines.append(f"[{alert.severity.value}] {alert.message} ({alert.confidence}%)")

    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="OI momentum / acceleration classifier"
    )
    parser.add_argument("--input", "-i", required=True, help="CSV or JSON file of OI samples")
    parser.add_argument(
        "--interval", default="1h", help="Bar interval label for lookback metadata (default: 1h)"
    )
    parser.add_argument("--symbol", default=None, help="Instrument symbol for the report")
    parser.add_argument(
        "--format", choices=["json", "text"], default="json", help="Output format (default: json)"
    )
    parser.add_argument("--env", default="dev", help="Config environment (default: dev)")
    parser.add_argument(
        "--config-dir",
        default=str(PROJECT_ROOT / "config"),
        help="Directory holding base.yaml and {env}.yaml",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging")
    return parser


def run(args: argparse.Namespace) -> MomentumReport:
    """Load config and input, then build the report."""
    app_config = ConfigManager(config_dir=args.config_dir, env=args.env).load()

    setup_logging(app_config.logging, env=args.env, verbose=args.verbose)

    samples = load_samples(Path(args.input))
    symbol = args.symbol or (samples[0].symbol if samples and samples[0].symbol else None)

    analyzer = OIMomentumAnalyzer(app_config.analysis)
    cache = create_analysis_cache(app_config.cache)

    with new_cycle(label=symbol):
        if cache is not None:
            return CachedAnalyzer(analyzer, cache).build_report(samples, args.interval, symbol)
        return analyzer.build_report(samples, args.interval, symbol)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        report = run(args)
    except RecoverableError as e:
        logger.error(f"Input rejected: {e}")
        print(f"error: {e}", file=sys.stderr)
        return EXIT_REJECTED
    except (FatalError, OSError, ValueError) as e:
        logger.error(f"Failed to run OI momentum analysis: {e}")
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    finally:
        flush_all_loggers()

    if args.format == "json":
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(format_text(report))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
