# crontask

Run commands on cron-style schedules, with the tasks described in a YAML file.

## Installing

```
pip install .
```

## The task file

By default tasks are read from `crontasks.yml` in the current directory. The
file is either a plain list of tasks or a mapping with a `tasks` key:

```yaml
- name: "backup"
  schedule: "0 7 * * 1,4"
  command: "/usr/bin/rsync"
  args: "-a /home/data /mnt/backup"
- name: "cleanup"
  schedule: "*/15 * * * *"
  command: "rm"
  args: "-f /tmp/scratch.log"
```

Each task has a `name`, a five-field `schedule` (minute, hour, day of month,
month, day of week with 0 for Sunday), a `command` and optional `args`.
Arguments are split on spaces; single or double quotes keep spaces together
and are removed. `$VAR` and `${VAR}` are expanded in the command and its
arguments; unset variables become empty.

Schedule fields accept `*`, single numbers, lists (`1,2,5`), ranges (`10-15`)
and steps (`*/5`, `1-30/2`). When both day of month and day of week are
restricted, a task runs when either one matches. The schedule is checked once
a minute.

## Running the scheduler

```
crontask
crontask --tasks other.yml --log scheduler.log
```

This loads the task file, schedules every task and keeps running until
interrupted with Ctrl+C. Activity is logged to standard output and appended to
the log file (`log.txt` unless `--log` says otherwise). A task whose command
exits with a non-zero status has its output written to the log.

## Using it from Python

```python
from crontask.engine import Config, CronTaskEngine

engine = CronTaskEngine(Config(tasks_path="crontasks.yml"))

for task in engine.tasks:
    print(task.name, task.schedule)

output = engine.execute_task("backup")   # run one task now, returns its output
threads = engine.run_all_tasks()         # start every scheduled job right away
engine.add_task_schedule("*/5 * * * *", print, "five minutes passed")
```

`Config` has `tasks_path` (default `crontasks.yml`), `no_auto_schedule` to
load tasks without scheduling them, and `folder`, a directory placed between
the current directory and the tasks file. A different adapter can be passed as
the second argument to `CronTaskEngine`; the default is
`crontask.adapters.NativeAdapter`, which runs commands as local processes.
Used as a context manager, the engine stops its scheduler on exit.

Lower-level pieces are available on their own:

- `crontask.crontab.Crontab` schedules plain Python callables, checking the
  number of arguments and their annotated types when a job is added.
- `crontask.crontab.parse_schedule` validates a schedule string and returns
  the selected minutes, hours, days, months and weekdays.
- `crontask.yml.parse_yaml` extracts tasks from YAML text with a simple
  pattern match, without a full YAML parser.
- `crontask.adapters.split_args` splits an argument string the way task
  arguments are split.

Problems such as bad schedules, unreadable task files or unknown task names
are reported with `crontask.errors.CronTaskError`.

## Running the tests

```
pip install .[test]
pytest
```