from __future__ import annotations

import argparse
import json
import logging
import time
from datetime import date
from pathlib import Path

import matplotlib.pyplot as plt

from recall.config import FSRSConfig, load_config, normalize_config
from recall.dates import parse_date
from recall.scheduler import FSRSScheduler
from recall.simulation import SimulationStats, simulate
from recall.weights import VERSION_LABEL


def _format_float(value: float | None) -> str:
    if value is None:
        return "none"
    text = f"{value:.2f}"
    return text.rstrip("0").rstrip(".")


def _resolve_config(args: argparse.Namespace) -> FSRSConfig:
    base: dict = {}
    if args.config is not None:
        base = load_config(args.config, key=args.config_key).to_dict()
    overrides = {
        "version": args.version,
        "requestedRetention": args.desired_retention,
        "lapseMinIntervalDays": args.lapse_min_interval,
        "maxIntervalDays": args.max_interval,
    }
    base.update({key: value for key, value in overrides.items() if value is not None})
    return normalize_config(base)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Simulate a learner reviewing topics with the FSRS scheduler."
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=Path("logs"),
        help="Directory to store simulation logs.",
    )
    parser.add_argument(
        "--no-log",
        action="store_true",
        help="Disable writing simulation logs (meta + totals) to disk.",
    )
    parser.add_argument(
        "--log-reviews",
        action="store_true",
        help="Include per-review history entries in the JSONL output.",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the simulation progress bar.",
    )
    parser.add_argument(
        "--no-plot",
        action="store_true",
        help="Disable plotting the dashboard.",
    )
    parser.add_argument(
        "--fuzz",
        action="store_true",
        help="Apply interval fuzz to scheduled reviews.",
    )
    parser.add_argument(
        "--days", type=int, default=365, help="Number of simulated days."
    )
    parser.add_argument("--topics", type=int, default=500, help="Number of topics.")
    parser.add_argument(
        "--learn-limit",
        type=int,
        default=10,
        help="Max new topics per day.",
    )
    parser.add_argument(
        "--review-limit",
        type=int,
        default=None,
        help="Max reviews per day (unlimited by default).",
    )
    parser.add_argument(
        "--start",
        default=None,
        help="First simulated day (YYYY-MM-DD); defaults to today.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON file holding a scheduler configuration.",
    )
    parser.add_argument(
        "--config-key",
        default=None,
        help="Key of the scheduler block inside --config, e.g. fsrs.",
    )
    parser.add_argument(
        "--version",
        choices=["fsrs5", "fsrs6"],
        default=None,
        help="Algorithm version (overrides --config).",
    )
    parser.add_argument(
        "--desired-retention",
        type=float,
        default=None,
        help="Requested retention (overrides --config).",
    )
    parser.add_argument(
        "--lapse-min-interval",
        type=int,
        default=None,
        help="Days until a forgotten topic comes back (overrides --config).",
    )
    parser.add_argument(
        "--max-interval",
        type=int,
        default=None,
        help="Maximum interval in days (overrides --config).",
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    if args.days <= 0:
        raise SystemExit("--days must be > 0.")
    if args.topics <= 0:
        raise SystemExit("--topics must be > 0.")
    try:
        start = parse_date(args.start) or date.today()
    except ValueError as exc:
        raise SystemExit(f"Invalid --start date '{args.start}'.") from exc

    config = _resolve_config(args)
    scheduler = FSRSScheduler(config)
    logging.info(
        "Simulating %d topics over %d days with %s (retention=%s).",
        args.topics,
        args.days,
        VERSION_LABEL[config.version],
        _format_float(config.requested_retention),
    )

    started = time.perf_counter()
    stats = simulate(
        days=args.days,
        topic_count=args.topics,
        scheduler=scheduler,
        start=start,
        learn_limit=args.learn_limit,
        review_limit=args.review_limit,
        fuzz=args.fuzz,
        seed=args.seed,
        progress=not args.no_progress,
    )
    print(f"Simulation time: {time.perf_counter() - started:.2f}s")
    print(
        f"Reviews: {stats.total_reviews} | Lapses: {stats.total_lapses} | "
        f"Mean retention: {stats.mean_retention:.3f}"
    )

    if not args.no_log:
        _write_log(args, config, start, stats)

    if args.no_plot:
        return

    plot_simulation(stats)


def plot_simulation(stats: SimulationStats) -> None:
    days = list(range(len(stats.daily_reviews)))

    fig, ax = plt.subplots(3, 1, figsize=(12, 9), sharex=True)

    ax[0].plot(days, stats.daily_reviews, label="Reviews/day", color="tab:blue")
    ax[0].plot(days, stats.daily_new, label="New/day", color="tab:green")
    ax[0].set_ylabel("Count")
    ax[0].legend()
    ax[0].set_title("Workload")

    mean_ret = stats.mean_retention
    ax[1].plot(days, stats.daily_retention, label="Daily retention", color="tab:purple")
    ax[1].axhline(
        mean_ret,
        color="tab:gray",
        linestyle="--",
        label=f"Mean retention={mean_ret:.3f}",
    )
    ax[1].set_ylabel("Retention")
    ax[1].set_ylim(0, 1.05)
    ax[1].legend()
    ax[1].set_title("Observed retention (1 - lapses/reviews)")

    ax[2].plot(days, stats.daily_memorized, label="Memorized", color="tab:red")
    ax[2].set_xlabel("Day")
    ax[2].set_ylabel("Sum of retrievability")
    ax[2].legend()
    ax[2].set_title("Expected topics memorized")

    plt.tight_layout()
    plt.show()


def _write_log(
    args: argparse.Namespace,
    config: FSRSConfig,
    start: date,
    stats: SimulationStats,
) -> None:
    args.log_dir.mkdir(parents=True, exist_ok=True)
    parts = [f"ver={config.version.value}"]
    if args.fuzz:
        parts.append("fuzz=1")
    parts.extend(
        [
            f"days={args.days}",
            f"topics={args.topics}",
            f"learn={args.learn_limit}",
            f"review={args.review_limit if args.review_limit is not None else 'none'}",
            f"ret={_format_float(config.requested_retention)}",
            f"lapse={config.lapse_min_interval_days}",
            f"maxivl={config.max_interval_days}",
            f"seed={args.seed}",
        ]
    )
    filename = args.log_dir / f"log_{'_'.join(parts)}.jsonl"
    meta = {
        "start": start.isoformat(),
        "days": args.days,
        "topics": args.topics,
        "learn_limit": args.learn_limit,
        "review_limit": args.review_limit,
        "fuzz": bool(args.fuzz),
        "seed": args.seed,
        "config": config.to_dict(),
    }
    reviews_average = (
        sum(stats.daily_reviews) / len(stats.daily_reviews)
        if stats.daily_reviews
        else 0.0
    )
    memorized_average = (
        sum(stats.daily_memorized) / len(stats.daily_memorized)
        if stats.daily_memorized
        else 0.0
    )
    totals = {
        "total_reviews": stats.total_reviews,
        "total_lapses": stats.total_lapses,
        "mean_retention": round(stats.mean_retention, 4),
        "reviews_average": round(reviews_average, 2),
        "memorized_average": round(memorized_average, 2),
    }
    with filename.open("w", encoding="utf-8") as fh:
        fh.write(json.dumps({"type": "meta", "data": meta}) + "\n")
        fh.write(json.dumps({"type": "totals", "data": totals}) + "\n")
        if args.log_reviews:
            for record in stats.records:
                entry = {"type": "review", "data": record.to_dict()}
                fh.write(json.dumps(entry) + "\n")
    logging.info("Wrote simulation log to %s", filename)


if __name__ == "__main__":
    main()
