[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "crontask"
version = "0.1.0"
description = "Run commands from a YAML task file on cron-style schedules"
requires-python = ">=3.10"
keywords = ["cron", "scheduler", "tasks", "yaml", "crontab"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
crontask = "crontask.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["crontask"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
