"""Protean Engine runner for the warehouse domain.

Runs the Engine that processes events asynchronously, keeping the operation
board projection current when ``event_processing`` is ``async``.

Usage:
    python src/server.py
    python src/server.py --test-mode   # drain pending messages and exit
"""

import argparse

from protean.server.engine import Engine


def _get_domain():
    """Import and initialize the warehouse domain."""
    from warehouse.domain import warehouse

    warehouse.init()
    return warehouse


def run(test_mode: bool = False):
    engine = Engine(_get_domain(), test_mode=test_mode)
    engine.run()


def main():
    parser = argparse.ArgumentParser(description="Warehouse Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and exit",
    )
    args = parser.parse_args()

    run(test_mode=args.test_mode)


if __name__ == "__main__":
    main()
