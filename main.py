"""
PocketCal — Entry Point.

Single entry point: `python main.py <command>` runs the calendar CLI.
"""

import logging

from pocketcal.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from pocketcal.cli import main

if __name__ == "__main__":
    main()
