"""Schedule and run commands from a YAML task file using cron syntax."""

__version__ = "0.1.0"