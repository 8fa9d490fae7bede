"""Command that loads the tasks file and keeps the scheduler running."""

from __future__ import annotations

import argparse
import sys
import time
from datetime import datetime

from crontask.adapters import DEFAULT_LOG_PATH, NativeAdapter
from crontask.engine import Config, CronTaskEngine

__all__ = ["main"]


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crontask", description="Run the commands listed in a tasks file on cron schedules."
    )
    parser.add_argument(
        "--tasks", default="", help="tasks file to load (default: crontasks.yml)"
    )
    parser.add_argument(
        "--log", default=DEFAULT_LOG_PATH, help=f"log file (default: {DEFAULT_LOG_PATH})"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Start the scheduler and run until interrupted."""
    options = _parser().parse_args(argv)
    adapter = NativeAdapter(log_path=options.log)
    CronTaskEngine(Config(tasks_path=options.tasks), adapter)

    print(f"Cron server started {datetime.now():%Y-%m-%d %H:%M:%S}")
    print("Press Ctrl+C to stop")
    try:
        while True:
            time.sleep(3600)
    except KeyboardInterrupt:
        pass
    finally:
        adapter.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())