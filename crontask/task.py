"""The task record loaded from a tasks file."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from crontask.errors import CronTaskError

__all__ = ["Task"]


def _scalar(key: str, value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise CronTaskError("field", key, "must be a scalar value")


@dataclass(frozen=True)
class Task:
    """A named command run on a cron schedule."""

    name: str = ""
    schedule: str = ""
    command: str = ""
    args: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Task":
        """Build a task from a mapping with name/schedule/command/args keys."""
        if not isinstance(data, Mapping):
            raise CronTaskError("task entry must be a mapping")
        return cls(
            name=_scalar("name", data.get("name")),
            schedule=_scalar("schedule", data.get("schedule")),
            command=_scalar("command", data.get("command")),
            args=_scalar("args", data.get("args")),
        )