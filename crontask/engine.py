"""The engine that loads tasks from a file and schedules them."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from typing import Any, Callable

from crontask.adapters import CronAdapter, NativeAdapter
from crontask.errors import CronTaskError
from crontask.task import Task

__all__ = ["Config", "CronTaskEngine", "DEFAULT_TASKS_PATH"]

DEFAULT_TASKS_PATH = "crontasks.yml"


@dataclass(frozen=True)
class Config:
    """Engine options.

    ``tasks_path`` defaults to ``crontasks.yml``; ``folder`` is placed between
    the adapter's base path and the tasks file.
    """

    tasks_path: str = ""
    no_auto_schedule: bool = False
    folder: str = ""


class CronTaskEngine:
    """Loads tasks on creation and schedules them unless told not to."""

    def __init__(self, config: Config | None = None, adapter: CronAdapter | None = None) -> None:
        config = config or Config()
        self._adapter: CronAdapter = adapter if adapter is not None else NativeAdapter()
        self._tasks: list[Task] = []
        self.log: Callable[..., None] = self._adapter.log

        tasks_path = config.tasks_path or DEFAULT_TASKS_PATH
        full_path = os.path.join(self._adapter.get_base_path(), config.folder, tasks_path)
        self.log("Loading tasks from", full_path)

        try:
            loaded = self._adapter.get_tasks_from_path(full_path)
        except (OSError, CronTaskError) as exc:
            self.log("No tasks loaded from path:", full_path, "Error:", exc)
        else:
            self._tasks.extend(loaded)
            for number, task in enumerate(self._tasks, start=1):
                self.log(f"Task {number}: {task.name} (Schedule: {task.schedule})")

        if not config.no_auto_schedule:
            try:
                self.schedule_all_tasks()
            except CronTaskError as exc:
                self.log("Error scheduling tasks:", exc)
            else:
                self.log("All tasks scheduled successfully")

    def __enter__(self) -> "CronTaskEngine":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._adapter.shutdown()

    @property
    def tasks(self) -> list[Task]:
        """A copy of the loaded tasks."""
        return list(self._tasks)

    def add_task_schedule(self, schedule: str, fn: Callable[..., Any], *args: Any) -> None:
        """Schedule a callable of one's own."""
        self.log("Adding job with schedule:", schedule)
        self._adapter.add_program_task(schedule, fn, *args)

    def _command_job(self, task: Task) -> Callable[[], None]:
        def job() -> None:
            self.log("Executing scheduled task:", task.name)
            try:
                self._adapter.execute_cmd(task)
            except (OSError, CronTaskError):
                pass  # the adapter has already logged the failure

        return job

    def schedule_all_tasks(self) -> None:
        """Schedule every loaded task; raise CronTaskError if there are none."""
        if not self._tasks:
            raise CronTaskError("no tasks to schedule")
        self.log("Scheduling", len(self._tasks), "tasks")
        for task in self._tasks:
            self.log("Scheduling task:", task.name, "with schedule:", task.schedule)
            try:
                self._adapter.add_program_task(task.schedule, self._command_job(task))
            except CronTaskError as exc:
                self.log("Error scheduling task:", task.name, "Error:", exc)
                raise

    def run_all_tasks(self) -> list[threading.Thread]:
        """Start every scheduled job now; return the started threads."""
        self.log("Running all scheduled tasks")
        return self._adapter.run_all_adapter_tasks()

    def execute_task(self, task_name: str) -> str:
        """Run the loaded task with this name and return its output."""
        self.log("Executing task:", task_name)
        for task in self._tasks:
            if task.name == task_name:
                return self._adapter.execute_cmd(task)
        raise CronTaskError("task not found: " + task_name)