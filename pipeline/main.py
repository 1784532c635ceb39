"""
AQI Reconcile — Pipeline Command-Line Runner

One-shot mode:
    python -m pipeline.main --city delhi [--iot 180 | --simulate-iot]
Fetches every source for the city, reconciles them and prints the result
as JSON on stdout.

Watch mode (--watch):
    An APScheduler BackgroundScheduler re-runs the reconciliation every
    POLL_INTERVAL seconds until SIGINT/SIGTERM.
"""

import argparse
import json
import logging
import os
import signal
import sys
import time
from datetime import datetime, timezone
from typing import List, Optional

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [PIPELINE] %(levelname)s %(name)s — %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("pipeline.main")

# ── Configuration ──────────────────────────────────────────────────────────────
POLL_INTERVAL = int(os.environ.get("POLL_INTERVAL_SECONDS", "300"))

# ── Graceful shutdown flag ─────────────────────────────────────────────────────
_running = True


def _shutdown(sig, frame):
    global _running
    logger.info("Shutdown signal (%s) — stopping scheduler.", sig)
    _running = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aqi-reconcile",
        description="Reconcile AQI readings from several sources for an Indian city.",
    )
    parser.add_argument("--city", required=True, help="City id, e.g. 'delhi'")
    iot = parser.add_mutually_exclusive_group()
    iot.add_argument("--iot", type=int, metavar="AQI", help="Manual IoT sensor AQI (0-500)")
    iot.add_argument("--simulate-iot", action="store_true", help="Add a simulated IoT reading")
    parser.add_argument(
        "--city-type", default="metro", choices=["metro", "tier2", "industrial"],
        help="Location type for the IoT reading",
    )
    parser.add_argument("--watch", action="store_true", help="Re-run every POLL_INTERVAL_SECONDS")
    return parser


def _reconcile_job(args) -> Optional[dict]:
    """Run one reconciliation cycle and print the result as JSON."""
    from pipeline.clock import utc_now
    from pipeline.ingestion.iot_connector import build_iot_reading, simulate_iot_reading
    from pipeline.reconciler import reconcile_city

    iot_reading = None
    if args.iot is not None:
        iot_reading = build_iot_reading(args.iot, args.city_type, clock=utc_now)
    elif args.simulate_iot:
        iot_reading = simulate_iot_reading(args.city_type, clock=utc_now)

    result = reconcile_city(args.city, clock=utc_now, iot_reading=iot_reading)
    output = result.to_dict()
    output["city"] = args.city
    output["generated_at"] = utc_now().isoformat()
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return output


def _watch_job(args) -> None:
    logger.info("── Reconciliation cycle starting — city=%s ──", args.city)
    try:
        _reconcile_job(args)
    except Exception as exc:
        logger.error("Reconciliation cycle failed for %s: %s", args.city, exc)
    logger.info("── Reconciliation cycle complete ──")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if not args.watch:
        try:
            _reconcile_job(args)
        except (KeyError, ValueError) as exc:
            logger.error("%s", exc)
            return 2
        return 0

    from apscheduler.schedulers.background import BackgroundScheduler

    signal.signal(signal.SIGINT,  _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        func=_watch_job,
        args=[args],
        trigger="interval",
        seconds=POLL_INTERVAL,
        next_run_time=datetime.now(timezone.utc),  # run immediately on start
        id="aqi_reconcile",
        name="AQI Reconcile",
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info("Scheduler started — reconciling %s every %ds", args.city, POLL_INTERVAL)

    try:
        while _running:
            time.sleep(1)
    finally:
        logger.info("Stopping scheduler…")
        scheduler.shutdown(wait=False)
        logger.info("Pipeline stopped cleanly.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
