import os
import sys
import threading
from pathlib import Path

import pytest

from crontask.adapters import NativeAdapter, split_args
from crontask.errors import CronTaskError
from crontask.task import Task

PYTHON = Path(sys.executable).as_posix()


@pytest.fixture
def adapter(tmp_path):
    instance = NativeAdapter(log_path=tmp_path / "log.txt")
    yield instance
    instance.shutdown()


def test_split_args_keeps_quoted_text_together():
    assert split_args('+ some/file "This is content"') == ["+", "some/file", "This is content"]


def test_split_args_collapses_spaces_and_drops_empty():
    assert split_args("a   b") == ["a", "b"]
    assert split_args("") == []
    assert split_args('""') == []


def test_split_args_single_quotes_also_group():
    assert split_args("-c 'echo hello'") == ["-c", "echo hello"]


def test_log_writes_prefixed_line_to_file(tmp_path, capsys):
    log_path = tmp_path / "log.txt"
    logger = NativeAdapter(log_path=log_path)
    try:
        logger.log("hello", 5)
    finally:
        logger.shutdown()
    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert "CRONTASK: " in lines[0]
    assert lines[0].endswith("hello 5")
    assert "hello 5" in capsys.readouterr().out


def test_log_appends_across_adapters(tmp_path):
    first = NativeAdapter(log_path=tmp_path / "log.txt")
    first.log("first")
    first.shutdown()
    second = NativeAdapter(log_path=tmp_path / "log.txt")
    second.log("second")
    second.shutdown()
    lines = (tmp_path / "log.txt").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("first")
    assert lines[1].endswith("second")


def test_get_base_path_is_working_directory(tmp_path, adapter, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert adapter.get_base_path() == os.getcwd()


def test_get_tasks_from_list(tmp_path, adapter):
    path = tmp_path / "crontasks.yml"
    path.write_text(
        '- name: "task1"\n'
        '  schedule: "*/5 * * * *"\n'
        '  command: "echo"\n'
        '  args: "hello world"\n',
        encoding="utf-8",
    )
    assert adapter.get_tasks_from_path(str(path)) == [
        Task(name="task1", schedule="*/5 * * * *", command="echo", args="hello world")
    ]


def test_get_tasks_from_wrapper(tmp_path, adapter):
    path = tmp_path / "crontasks.yml"
    path.write_text(
        "tasks:\n"
        '  - name: "task2"\n'
        '    schedule: "0 12 * * *"\n'
        '    command: "ls"\n'
        '    args: "-la"\n',
        encoding="utf-8",
    )
    tasks = adapter.get_tasks_from_path(path)
    assert [t.name for t in tasks] == ["task2"]
    assert tasks[0].args == "-la"


def test_get_tasks_missing_file_raises(tmp_path, adapter):
    with pytest.raises(FileNotFoundError):
        adapter.get_tasks_from_path(tmp_path / "missing.yml")


def test_get_tasks_mapping_without_tasks_raises(tmp_path, adapter):
    path = tmp_path / "crontasks.yml"
    path.write_text("other: 1\n", encoding="utf-8")
    with pytest.raises(CronTaskError):
        adapter.get_tasks_from_path(path)


def test_get_tasks_invalid_yaml_raises(tmp_path, adapter):
    path = tmp_path / "crontasks.yml"
    path.write_text("- name: [unclosed\n", encoding="utf-8")
    with pytest.raises(CronTaskError):
        adapter.get_tasks_from_path(path)


def test_add_program_task_rejects_non_callable(adapter):
    with pytest.raises(CronTaskError, match="invalid function type"):
        adapter.add_program_task("* * * * *", 10)


def test_add_program_task_rejects_bad_schedule(adapter):
    with pytest.raises(CronTaskError):
        adapter.add_program_task("* * * * * *", lambda: None)


def test_run_all_adapter_tasks_runs_added_jobs(adapter):
    done = threading.Event()
    adapter.add_program_task("* * * * *", done.set)
    threads = adapter.run_all_adapter_tasks()
    for thread in threads:
        thread.join(5)
    assert len(threads) == 1
    assert done.is_set()


def test_execute_cmd_returns_output(adapter, capsys):
    task = Task(name="show", schedule="* * * * *", command=PYTHON, args='-c "print(42)"')
    output = adapter.execute_cmd(task)
    assert output.strip() == "42"
    assert "show completed." in capsys.readouterr().out


def test_execute_cmd_expands_environment(adapter, monkeypatch):
    monkeypatch.setenv("CRONTASK_TEST_VALUE", "xyz")
    task = Task(
        name="env",
        command=PYTHON,
        args='-c "import sys; print(sys.argv[1])" $CRONTASK_TEST_VALUE',
    )
    assert adapter.execute_cmd(task).strip() == "xyz"


def test_execute_cmd_failure_raises_and_logs(tmp_path, adapter):
    task = Task(name="fail", command=PYTHON, args='-c "import sys; sys.exit(3)"')
    with pytest.raises(CronTaskError, match="exit status 3"):
        adapter.execute_cmd(task)
    assert "Command execution failed:" in (tmp_path / "log.txt").read_text(encoding="utf-8")


def test_execute_cmd_missing_program_raises(tmp_path, adapter):
    task = Task(name="missing", command=str(tmp_path / "no-such-program"))
    with pytest.raises(OSError):
        adapter.execute_cmd(task)