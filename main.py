"""Timed log sink demo: concurrent workers logging through the console/rotating-file sink."""

import argparse
import logging
import random
import signal
import sys
import threading
import time
import uuid

from logsink.config import load_config, load_yaml_config
from logsink.errors import ConfigError
from logsink.logger import build_logger, close_sink, fatal

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [log-sink] %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

_running = True


def _signal_handler(sig, _frame):
    global _running
    logger.info("Shutdown signal received (signal %d), stopping...", sig)
    _running = False


LEVELS = [logging.INFO, logging.INFO, logging.INFO, logging.DEBUG, logging.WARNING, logging.ERROR]
SERVICES = ["auth-api", "order-svc", "payment-gw", "user-svc", "catalog-api"]
MESSAGES = {
    logging.INFO: [
        "Request processed successfully",
        "Health check passed",
        "Cache hit for user session",
    ],
    logging.DEBUG: [
        "Entering request handler",
        "Token validation started",
    ],
    logging.WARNING: [
        "Slow query detected (>500ms)",
        "Connection pool nearing capacity",
    ],
    logging.ERROR: [
        "Failed to connect to database",
        "Timeout waiting for upstream response",
    ],
}


def generate_entry() -> tuple[int, str]:
    level = random.choice(LEVELS)
    service = random.choice(SERVICES)
    req_id = uuid.uuid4().hex[:8]
    return level, f"[{service}] [{req_id}] {random.choice(MESSAGES[level])}"


def worker(app_logger: logging.Logger, worker_id: int, delay: float, counts: list[int]):
    while _running:
        level, message = generate_entry()
        app_logger.log(level, "worker-%d %s", worker_id, message)
        counts[worker_id] += 1
        time.sleep(delay)


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Timed log sink demo")
    parser.add_argument("--config", default=None, help="Path to YAML config file")
    parser.add_argument("--threads", type=int, default=4, help="Number of logging threads (default: 4)")
    parser.add_argument("--delay", type=float, default=0.05,
                        help="Seconds between entries per thread (default: 0.05)")
    parser.add_argument("--duration", type=float, default=0.0,
                        help="Stop after this many seconds (default: run until interrupted)")
    return parser


def main():
    global _running
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    args = build_cli_parser().parse_args()
    try:
        config = load_config(load_yaml_config(args.config))
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        sys.exit(2)

    logger.info(
        "Config: file=%s, dual=%s, rotate=%s, interval=%ss, level=%s, max_size=%d bytes",
        config.log_file_path or "<stderr only>", config.enable_dual_sink, config.enable_rotation,
        config.rotation_interval_seconds, config.min_log_level, config.max_file_size_bytes,
    )

    try:
        app_logger = build_logger(config, name="demo")
    except OSError as exc:
        logger.error("Could not open log target: %s", exc)
        sys.exit(1)

    counts = [0] * args.threads
    threads = [
        threading.Thread(target=worker, args=(app_logger, i, args.delay, counts), daemon=True)
        for i in range(args.threads)
    ]
    for t in threads:
        t.start()

    deadline = time.monotonic() + args.duration if args.duration > 0 else None
    while _running:
        if deadline is not None and time.monotonic() >= deadline:
            break
        time.sleep(0.1)
    _running = False

    for t in threads:
        t.join(timeout=5)
    if any(t.is_alive() for t in threads):
        fatal(app_logger, "Workers did not stop within 5s")

    close_sink(app_logger)
    logger.info("Shut down cleanly. Total entries logged: %d", sum(counts))


if __name__ == "__main__":
    main()
