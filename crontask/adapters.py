"""Adapters that load task files, run commands and keep the cron table."""

from __future__ import annotations

import logging
import os
import re
import subprocess
import sys
import threading
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Protocol

import yaml

from crontask.crontab import Crontab
from crontask.errors import CronTaskError
from crontask.task import Task

__all__ = ["CronAdapter", "NativeAdapter", "split_args", "DEFAULT_LOG_PATH"]

DEFAULT_LOG_PATH = "log.txt"

_ENV_VAR = re.compile(r"\$(?:\{([^}]*)\}|([A-Za-z0-9_]+))")


class CronAdapter(Protocol):
    """What the engine needs from its environment."""

    def log(self, *args: Any) -> None: ...

    def add_program_task(self, schedule: str, fn: Callable[..., Any], *args: Any) -> None: ...

    def get_tasks_from_path(self, tasks_path: str) -> list[Task]: ...

    def execute_cmd(self, task: Task) -> str: ...

    def get_base_path(self) -> str: ...

    def run_all_adapter_tasks(self) -> list[threading.Thread]: ...

    def shutdown(self) -> None: ...


def split_args(text: str) -> list[str]:
    """Split an argument string on spaces, keeping quoted parts together.

    Single and double quotes both toggle quoting and are dropped from the
    result; empty arguments are discarded.
    """
    args: list[str] = []
    current = ""
    quoted = False
    for char in text:
        if char in "\"'":
            quoted = not quoted
            continue
        if char == " " and not quoted:
            if current:
                args.append(current)
                current = ""
            continue
        current += char
    if current:
        args.append(current)
    return args


def _expand_env(text: str) -> str:
    """Replace $VAR and ${VAR} with their values; unset variables become empty."""

    def lookup(match: re.Match[str]) -> str:
        name = match[1] if match[1] is not None else match[2]
        return os.environ.get(name, "")

    return _ENV_VAR.sub(lookup, text)


class NativeAdapter:
    """Runs tasks as local processes and logs to stdout and a log file."""

    def __init__(self, log_path: str | os.PathLike[str] | None = DEFAULT_LOG_PATH) -> None:
        self._crontab = Crontab()
        self._logger = logging.Logger(f"crontask.adapter.{id(self)}", logging.INFO)
        self._logger.propagate = False
        formatter = logging.Formatter(
            "CRONTASK: %(asctime)s %(message)s", datefmt="%Y/%m/%d %H:%M:%S"
        )
        handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
        if log_path is not None:
            try:
                handlers.append(logging.FileHandler(log_path, mode="a", encoding="utf-8"))
            except OSError:
                pass
        for handler in handlers:
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    def __enter__(self) -> "NativeAdapter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def log(self, *args: Any) -> None:
        """Log the arguments joined by spaces."""
        self._logger.info(" ".join(str(arg) for arg in args))

    def add_program_task(self, schedule: str, fn: Callable[..., Any], *args: Any) -> None:
        """Add a callable to the cron table under ``schedule``."""
        if not callable(fn):
            raise CronTaskError("invalid function type")
        self._crontab.add_job(schedule, fn, *args)

    def run_all_adapter_tasks(self) -> list[threading.Thread]:
        """Start every job in the cron table now; return the started threads."""
        return self._crontab.run_all()

    def get_base_path(self) -> str:
        """Return the current working directory, or an empty string if unknown."""
        try:
            return os.getcwd()
        except OSError:
            return ""

    def get_tasks_from_path(self, tasks_path: str | os.PathLike[str]) -> list[Task]:
        """Read tasks from a YAML file holding a list or a ``tasks:`` mapping."""
        text = Path(tasks_path).read_text(encoding="utf-8")
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise CronTaskError("invalid YAML in", str(tasks_path), exc) from exc

        if data is None:
            return []
        if isinstance(data, list):
            return [Task.from_mapping(entry) for entry in data]
        if isinstance(data, Mapping):
            entries = data.get("tasks")
            if isinstance(entries, list) and entries:
                return [Task.from_mapping(entry) for entry in entries]
        raise CronTaskError("expected a list of tasks in", str(tasks_path))

    def execute_cmd(self, task: Task) -> str:
        """Run the task's command and return its combined output."""
        command = _expand_env(task.command)
        args = [_expand_env(arg) for arg in split_args(task.args)]
        try:
            completed = subprocess.run(
                [command, *args],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=False,
            )
        except OSError as exc:
            self.log("Command execution failed:", exc, "Output:", "")
            raise

        output = completed.stdout.decode("utf-8", errors="replace")
        if completed.returncode != 0:
            self.log(
                "Command execution failed:",
                f"exit status {completed.returncode}",
                "Output:",
                output,
            )
            raise CronTaskError(
                "command", command, "failed with exit status", completed.returncode
            )

        stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        print(f"*- [{stamp}] {task.name} completed.\n{output}")
        return output

    def shutdown(self) -> None:
        """Stop the cron table and close the log file."""
        self._crontab.shutdown()
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            if isinstance(handler, logging.FileHandler):
                handler.close()