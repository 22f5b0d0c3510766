"""Forecaster — CLI entry point.

Loads a price series (CSV or synthetic), runs one full analysis and prints
the report or its JSON form.

Usage:
    python -m forecaster.main --csv prices.csv --strategy trend --forecast-seconds 604800
"""

import json
import logging
import time

from forecaster.config import Settings, load_config
from forecaster.simulation.random_source import make_random_source

logger = logging.getLogger("forecaster")


def _run_cli(argv=None) -> int:
    """Parse CLI arguments, run the analysis and print the result."""
    import argparse

    from forecaster.analysis.summary import default_summary
    from forecaster.cli.report import print_report
    from forecaster.history import load_price_csv, trim_to_window
    from forecaster.simulation.engine import generate_synthetic_history
    from forecaster.state import ForecastController
    from forecaster.strategy.registry import STRATEGY_REGISTRY

    config = load_config()

    parser = argparse.ArgumentParser(description="Price analysis and forecast")
    parser.add_argument("--csv", help="CSV file with timestamp,price[,volume] columns")
    parser.add_argument(
        "--synthetic-days",
        type=int,
        default=None,
        help="Generate this many days of synthetic history instead of reading a CSV",
    )
    parser.add_argument(
        "--strategy",
        default=config.strategy_key,
        help=f"Strategy key (available: {', '.join(STRATEGY_REGISTRY)})",
    )
    parser.add_argument("--history-seconds", type=int, default=config.historical_window_seconds)
    parser.add_argument("--forecast-seconds", type=int, default=config.forecast_window_seconds)
    seed_group = parser.add_mutually_exclusive_group()
    seed_group.add_argument("--seed", type=int, default=config.simulation_seed)
    seed_group.add_argument(
        "--no-seed",
        action="store_true",
        help="Use entropy-backed randomness (non-reproducible forecast)",
    )
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    random_source = make_random_source(None if args.no_seed else args.seed)
    settings = Settings(
        historical_window_seconds=args.history_seconds,
        forecast_window_seconds=args.forecast_seconds,
        strategy_key=args.strategy,
    )

    if args.csv:
        points = trim_to_window(load_price_csv(args.csv), args.history_seconds)
    else:
        days = args.synthetic_days if args.synthetic_days is not None else settings.historical_days
        logger.warning("No CSV given, generating %d day(s) of synthetic history", days)
        points = generate_synthetic_history(
            days,
            default_summary(config.cycle_length_days),
            random_source,
            end_timestamp=int(time.time() * 1000),
            price_floor=config.price_floor,
        )

    if not points:
        logger.error("No price data to analyse.")
        return 1

    controller = ForecastController(
        random_source=random_source,
        settings=settings,
        cycle_length=config.cycle_length_days,
        price_floor=config.price_floor,
    )
    report = controller.load_history(points)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, allow_nan=False))
    else:
        print_report(report, settings.strategy_key)
    return 0


if __name__ == "__main__":
    raise SystemExit(_run_cli())
