"""
Run a simulated UPI session through the detectors.

Usage::

    python -m upi_guard --count 50 --seed 7 --spam-every 10 --metrics
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from upi_guard import __version__
from upi_guard.alerting import AlertDispatcher
from upi_guard.anomaly import AnomalyDetector
from upi_guard.config import Settings
from upi_guard.observability import init_observability, render_metrics, shutdown_tracing
from upi_guard.simulator import TransactionSimulator
from upi_guard.spam import SpamDetector
from upi_guard.stats import compute_stats

logger = logging.getLogger("upi-guard")

# Banks and services the demo user already trusts
DEFAULT_TRUSTED_SENDERS = ("HDFC-Bank", "SBI-Alerts")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="upi-guard",
        description="Stream simulated UPI transactions and messages through the fraud and spam detectors.",
    )
    parser.add_argument("--count", type=int, default=50, help="Transactions to simulate")
    parser.add_argument("--seed", type=int, default=None, help="Simulator seed (default: UPI_GUARD_SIMULATOR_SEED or 42)")
    parser.add_argument(
        "--spam-every",
        type=int,
        default=10,
        help="Inject a spam message every N transactions (0 disables)",
    )
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Print the session's Prometheus metrics to stdout when done",
    )
    return parser


def run(
    count: int,
    seed: int,
    spam_every: int,
    settings: Settings,
) -> dict:
    """Simulate a session and return the dashboard summary."""
    simulator = TransactionSimulator(seed=seed)
    anomaly_detector = AnomalyDetector()
    spam_detector = SpamDetector(DEFAULT_TRUSTED_SENDERS)
    dispatcher = AlertDispatcher(cooldown_seconds=settings.alert_cooldown_seconds)
    dispatcher.notify_info(
        "Welcome to UPI Fraud Detector",
        "Your account is now protected against fraud and spam",
    )

    recent_spam = []
    transactions = []
    suspicious_links = 0

    for i in range(count):
        if spam_every > 0 and i % spam_every == 0:
            message = simulator.generate_spam_message()
            verdict = spam_detector.classify_message(message)
            dispatcher.dispatch_spam(message, verdict)
            if verdict.is_spam:
                recent_spam.append(message)

        transaction = simulator.generate_transaction()
        transactions.append(transaction)
        anomaly_detector.add_transaction(transaction)

        result = anomaly_detector.classify(transaction)
        dispatcher.dispatch_transaction(transaction, result)
        if spam_detector.is_transaction_suspicious(transaction, recent_spam):
            suspicious_links += 1

    stats = compute_stats(transactions, anomaly_detector)
    summary = stats.to_dict()
    summary["blocked_spam"] = dispatcher.blocked_spam_count
    summary["spam_linked_transactions"] = suspicious_links
    summary["notifications"] = len(dispatcher.notifications)
    summary["recent_fraudulent"] = len(anomaly_detector.get_recent_fraudulent_transactions())
    logger.info("Session summary", extra={"summary": summary})
    return summary


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.count < 0:
        raise SystemExit("--count must be non-negative")

    settings = Settings.from_env()
    init_observability("upi-guard", __version__, settings)
    seed = settings.simulator_seed if args.seed is None else args.seed

    try:
        run(args.count, seed, args.spam_every, settings)
        if args.metrics:
            sys.stdout.write(render_metrics())
    finally:
        shutdown_tracing()
    return 0
