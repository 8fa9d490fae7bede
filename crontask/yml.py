"""Lightweight extraction of tasks from YAML text."""

from __future__ import annotations

import re

from crontask.errors import CronTaskError
from crontask.task import Task

__all__ = ["parse_yaml"]

_TASK = re.compile(
    r"""- *name: *["']?([^"'\n]+)["']?\n"""
    r""" *schedule: *["']?([^"'\n]+)["']?\n"""
    r""" *command: *["']?([^"'\n]+)["']?\n"""
    r""" *(?:args: *["']?([^"'\n]*)["']?)?"""
)
_SECTION = re.compile(r"tasks:(.*)", re.DOTALL)


def parse_yaml(data: bytes | str) -> list[Task]:
    """Extract the tasks listed in YAML content, either bare or under ``tasks:``."""
    if isinstance(data, (bytes, bytearray)):
        text = bytes(data).decode("utf-8", errors="replace")
    else:
        text = data
    if not text.strip():
        raise CronTaskError("empty YAML content")

    matches = list(_TASK.finditer(text))
    if not matches:
        section = _SECTION.search(text)
        if section is not None:
            matches = list(_TASK.finditer(section.group(1)))

    tasks = [
        Task(name=m[1], schedule=m[2], command=m[3], args=m[4] or "")
        for m in matches
    ]
    if not tasks:
        raise CronTaskError("no valid tasks found in YAML")
    return tasks