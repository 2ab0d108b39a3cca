"""Standalone bestseller recomputation.

Rebuilds bestseller.json and the menu's bestseller tags from completed orders
without starting the API server:

    python src/update_bestsellers.py --data-dir ./data
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from restaurant_ordering_service.dependencies import create_bestseller_service, get_data_dir
from restaurant_ordering_service.errors import StorageError
from restaurant_ordering_service.observability import configure_logging

logger = logging.getLogger(__name__)


def run(data_dir: Path) -> int:
    """Recompute bestsellers in ``data_dir``.

    Returns:
        Process exit code (0 on success, 1 on storage failure)
    """
    service = create_bestseller_service(get_data_dir(data_dir))
    try:
        result = service.recompute(trigger="script")
    except StorageError as e:
        logger.error(f"Bestseller update failed: {e}")
        return 1

    logger.info(result.message)
    for entry in result.top_items:
        logger.info(f"Tagged bestseller: {entry.name} ({entry.quantity} sold)")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Recompute bestseller ranking and menu tags")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=Path(os.getenv("DATA_DIR", "data")),
        help="Directory holding menu.json and the order files (default: $DATA_DIR or ./data)",
    )
    args = parser.parse_args(argv)

    configure_logging(os.getenv("LOG_LEVEL", "INFO"))
    return run(args.data_dir)


if __name__ == "__main__":
    sys.exit(main())
