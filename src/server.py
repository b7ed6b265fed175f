"""Protean Engine runner for the shipping domain.

With ``PROTEAN_ENV=production`` events are processed asynchronously, so the
Engine is what keeps the progress, warehouse, active-shipment and tracking
read models up to date.

Usage:
    PROTEAN_ENV=production python src/server.py
    python src/server.py --test-mode    # drain pending work and exit
"""

import argparse

from protean.server.engine import Engine

from shipping.utils.logging import get_logger

logger = get_logger(__name__)


def _load_domain():
    from shipping.domain import shipping

    shipping.init()
    return shipping


def run(test_mode: bool = False):
    domain = _load_domain()
    logger.info("Starting shipping engine", domain=domain.name, test_mode=test_mode)
    with domain.domain_context():
        Engine(domain, test_mode=test_mode).run()


def main():
    parser = argparse.ArgumentParser(description="FreightDesk Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and stop",
    )
    args = parser.parse_args()

    run(test_mode=args.test_mode)


if __name__ == "__main__":
    main()
