"""Cron table: schedule parsing and a periodic job runner."""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable

from crontask.errors import CronTaskError

__all__ = [
    "Crontab",
    "Job",
    "Tick",
    "get_tick",
    "parse_part",
    "parse_schedule",
]

_log = logging.getLogger(__name__)

_SPACES = re.compile(r"[\t\n\f\r ]+")
_STEP = re.compile(r"(.*)/([0-9]+)")
_RANGE = re.compile(r"([0-9]+)-([0-9]+)")
_INT = re.compile(r"[+-]?[0-9]+")

_CO_VARARGS = 0x04


@dataclass(frozen=True)
class Tick:
    """The calendar fields of one moment; ``day_of_week`` is 0 for Sunday."""

    minute: int
    hour: int
    day: int
    month: int
    day_of_week: int


@dataclass(frozen=True)
class Job:
    """A parsed schedule together with the callable it launches."""

    minutes: frozenset[int]
    hours: frozenset[int]
    days: frozenset[int]
    months: frozenset[int]
    days_of_week: frozenset[int]
    fn: Callable[..., Any] | None = None
    args: tuple[Any, ...] = ()

    def matches(self, tick: Tick) -> bool:
        """Tell whether the job is due at ``tick``; day and weekday are combined."""
        if tick.minute not in self.minutes or tick.hour not in self.hours:
            return False
        if tick.day not in self.days and tick.day_of_week not in self.days_of_week:
            return False
        return tick.month in self.months

    def run(self) -> None:
        """Call the job, logging rather than propagating any failure."""
        try:
            self.fn(*self.args)
        except Exception as exc:  # a job must never bring the scheduler down
            _log.error("crontab error %s", exc)


def get_tick(when: datetime) -> Tick:
    """Return the tick for a moment in time."""
    return Tick(
        minute=when.minute,
        hour=when.hour,
        day=when.day,
        month=when.month,
        day_of_week=when.isoweekday() % 7,
    )


def parse_part(text: str, low: int, high: int) -> frozenset[int]:
    """Parse one schedule field into the set of values it selects."""
    if text == "*":
        return frozenset(range(low, high + 1))

    step = _STEP.search(text)
    if step is not None:
        prefix = step.group(1)
        start, stop = low, high
        if prefix not in ("", "*"):
            rng = _RANGE.fullmatch(prefix)
            if rng is None:
                raise CronTaskError("Unable to parse", prefix, "part in", text)
            start, stop = int(rng[1]), int(rng[2])
            if start < low or stop > high:
                raise CronTaskError(
                    "Out of range for", rng[1], "in", text, rng[1],
                    "must be in range", low, "-", high,
                )
        every = int(step.group(2))
        if every == 0:
            raise CronTaskError("Step must be greater than zero in", text)
        return frozenset(range(start, stop + 1, every))

    values: set[int] = set()
    for item in text.split(","):
        rng = _RANGE.fullmatch(item)
        if rng is not None:
            start, stop = int(rng[1]), int(rng[2])
            if start < low or stop > high:
                raise CronTaskError(
                    "Out of range for", item, "in", text, item,
                    "must be in range", low, "-", high,
                )
            values.update(range(start, stop + 1))
        elif _INT.fullmatch(item):
            value = int(item)
            if value < low or value > high:
                raise CronTaskError(
                    "Out of range for", value, "in", text, value,
                    "must be in range", low, "-", high,
                )
            values.add(value)
        else:
            raise CronTaskError("Unable to parse", item, "part in", text)

    if not values:
        raise CronTaskError("Unable to parse", text)
    return frozenset(values)


def parse_schedule(schedule: str) -> Job:
    """Parse a five-field cron expression into a job without a callable."""
    parts = _SPACES.sub(" ", schedule).split(" ")
    if len(parts) != 5:
        raise CronTaskError("Schedule string must have five components like * * * * *")

    minutes = parse_part(parts[0], 0, 59)
    hours = parse_part(parts[1], 0, 23)
    days = parse_part(parts[2], 1, 31)
    months = parse_part(parts[3], 1, 12)
    days_of_week = parse_part(parts[4], 0, 6)

    if len(days) < 31 and len(days_of_week) == 7:
        days_of_week = frozenset()
    elif len(days_of_week) < 7 and len(days) == 31:
        days = frozenset()

    return Job(minutes, hours, days, months, days_of_week)


def _check_arguments(fn: Callable[..., Any], args: tuple[Any, ...]) -> None:
    """Check argument count and annotated types against a plain Python callable."""
    func = getattr(fn, "__func__", fn)
    code = getattr(func, "__code__", None)
    if code is None:
        return
    offset = 1 if getattr(fn, "__self__", None) is not None and func is not fn else 0

    positional = code.co_argcount - offset
    defaults = getattr(func, "__defaults__", None) or ()
    required = max(positional - len(defaults), 0)
    kw_defaults = getattr(func, "__kwdefaults__", None) or {}
    kw_names = code.co_varnames[code.co_argcount:code.co_argcount + code.co_kwonlyargcount]
    missing_keywords = any(name not in kw_defaults for name in kw_names)
    takes_varargs = bool(code.co_flags & _CO_VARARGS)

    if (
        missing_keywords
        or len(args) < required
        or (len(args) > positional and not takes_varargs)
    ):
        raise CronTaskError(
            "number of func() params and number of provided params doesn't match"
        )

    annotations = getattr(func, "__annotations__", None) or {}
    names = code.co_varnames[offset:code.co_argcount]
    for index, (name, value) in enumerate(zip(names, args)):
        hint = annotations.get(name)
        if not isinstance(hint, type):
            continue
        try:
            accepted = isinstance(value, hint)
        except TypeError:
            continue
        if not accepted:
            raise CronTaskError(
                "Param with index", index, "should be", hint.__name__,
                "not", type(value).__name__,
            )


def _start(jobs: list[Job]) -> list[threading.Thread]:
    threads = [threading.Thread(target=job.run, daemon=True) for job in jobs]
    for thread in threads:
        thread.start()
    return threads


class Crontab:
    """A table of jobs checked every ``interval`` seconds in a background thread."""

    def __init__(self, interval: float = 60.0) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._lock = threading.RLock()
        self._jobs: list[Job] = []
        self._stopped = threading.Event()
        self._ticker = threading.Thread(
            target=self._tick_loop, args=(interval,), name="crontab-ticker", daemon=True
        )
        self._ticker.start()

    def _tick_loop(self, interval: float) -> None:
        while not self._stopped.wait(interval):
            self.run_scheduled(datetime.now())

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def __enter__(self) -> "Crontab":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def add_job(self, schedule: str, fn: Callable[..., Any], *args: Any) -> None:
        """Add a job; raise CronTaskError on a bad schedule, callable or arguments."""
        job = parse_schedule(schedule)
        if fn is None or not callable(fn):
            raise CronTaskError("cron job must be func()")
        _check_arguments(fn, args)
        with self._lock:
            self._jobs.append(replace(job, fn=fn, args=args))

    def shutdown(self) -> None:
        """Stop the periodic checks; the table cannot be restarted."""
        self._stopped.set()

    def clear(self) -> None:
        """Remove every job."""
        with self._lock:
            self._jobs = []

    def run_all(self) -> list[threading.Thread]:
        """Start every job now, due or not; return the started threads."""
        with self._lock:
            jobs = list(self._jobs)
        return _start(jobs)

    def run_scheduled(self, when: datetime) -> list[threading.Thread]:
        """Start the jobs due at ``when``; return the started threads."""
        tick = get_tick(when)
        with self._lock:
            due = [job for job in self._jobs if job.matches(tick)]
        return _start(due)