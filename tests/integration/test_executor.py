"""
Integration tests for the Executor
"""

import os
import pathlib
import sys
import tempfile

# Add the parent directory to the path
sys.path.insert(
    0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
)

from exome_gatk.dag import DAG  # noqa: E402
from exome_gatk.executor import DryRunExecutor, LocalExecutor  # noqa: E402
from exome_gatk.job import Job  # noqa: E402
from exome_gatk.scheduler import ThreadScheduler  # noqa: E402
from exome_gatk.shell_pipeline import Command  # noqa: E402


def test_local_executor_simple_job():
    """Test LocalExecutor with a single, simple job"""
    with tempfile.TemporaryDirectory() as tmp_dir_str:
        tmp_dir = pathlib.Path(tmp_dir_str)
        cmd_out = tmp_dir / "test_out.txt"
        dag = DAG()
        job = Job(
            Command("echo", "hello executor"),
            "echo-job",
            log=cmd_out,
        )
        dag.add_job(job)

        executor = LocalExecutor(ThreadScheduler(dag, 1))
        executor.execute()

        assert "hello executor" in cmd_out.read_text()
        assert len(executor.jobs_with_errors) == 0
        assert dag.finished_jobs == [job]


def test_local_executor_job_log():
    """stdout and stderr of a job go to its log"""
    with tempfile.TemporaryDirectory() as tmp_dir_str:
        log = pathlib.Path(tmp_dir_str) / "step.gatklog"
        dag = DAG()
        dag.add_chain(
            Job(Command("echo", "first"), "first", log=log),
            Job(
                Command("ls", str(pathlib.Path(tmp_dir_str) / "x")),
                "second",
                log=log,
                fail_ok=True,
            ),
        )

        executor = LocalExecutor(ThreadScheduler(dag, 1))
        executor.execute()

        content = log.read_text()
        assert content.startswith("first\n")
        assert "x" in content.split("\n", 1)[1]
        assert len(executor.jobs_with_errors) == 0


def test_local_executor_chain_stops_on_failure():
    """Test LocalExecutor with a job that fails"""
    with tempfile.TemporaryDirectory() as tmp_dir_str:
        tmp_dir = pathlib.Path(tmp_dir_str)
        marker = tmp_dir / "marker"
        dag = DAG()
        # This command will fail
        failing = Job(
            Command("cat", str(tmp_dir / "missing.txt")),
            "failing-job",
            log=tmp_dir / "log",
        )
        after = Job(Command("touch", str(marker)), "after")
        dag.add_chain(failing, after)

        executor = LocalExecutor(ThreadScheduler(dag, 1))
        executor.execute()

        assert executor.jobs_with_errors == [failing]
        assert not marker.exists()
        assert dag.unexecuted_jobs() == {failing, after}


def test_local_executor_missing_program():
    with tempfile.TemporaryDirectory() as tmp_dir_str:
        dag = DAG()
        job = Job(
            Command("exome-gatk-no-such-program"),
            "missing",
            log=pathlib.Path(tmp_dir_str) / "log",
        )
        dag.add_job(job)

        executor = LocalExecutor(ThreadScheduler(dag, 1))
        executor.execute()

        assert executor.jobs_with_errors == [job]


def test_dry_run_executor(capsys):
    dag = DAG()
    dag.add_chain(
        Job(Command("echo", "a b"), "a"),
        Job(Command("echo", "c"), "c"),
    )
    DryRunExecutor(ThreadScheduler(dag, 1)).execute()
    assert capsys.readouterr().out == "echo 'a b'\necho c\n"
    assert not dag.unexecuted_jobs()
