"""Error type and message formatting used throughout the package."""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any

__all__ = ["CronTaskError", "format_message"]


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_message(*args: Any) -> str:
    """Join the arguments into one space-separated message.

    Empty strings are skipped, sequences of strings are spread out, and a
    lone ``":"`` is attached to the previous word without a space.
    Unsupported argument types are reported by their position.
    """
    result = ""
    space = ""
    for position, arg in enumerate(args):
        if isinstance(arg, str):
            if arg == "":
                continue
            if arg == ":":
                result += ":"
                continue
            result += space + arg
        elif isinstance(arg, (list, tuple)) and all(isinstance(s, str) for s in arg):
            for item in arg:
                if item == "":
                    continue
                result += space + item
                space = " "
        elif isinstance(arg, bool):
            result += space + ("true" if arg else "false")
        elif isinstance(arg, int):
            result += space + str(arg)
        elif isinstance(arg, float):
            result += space + _format_float(arg)
        elif isinstance(arg, BaseException):
            result += space + str(arg)
        else:
            result += space + f"error not supported arg number: {position}"
        space = " "
    return result


class CronTaskError(Exception):
    """Raised for invalid schedules, jobs, task files and task lookups."""

    def __init__(self, *args: Any) -> None:
        self.message = format_message(*args)
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message