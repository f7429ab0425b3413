"""Execute jobs"""

import asyncio
import signal
import time
from typing import Any, IO, List, Optional, Tuple

from .job import Job
from .logging import get_logger
from .scheduler import ThreadScheduler
from .shell_pipeline import Context

logger = get_logger(__name__)


class BaseExecutor:
    """Execute jobs"""

    def __init__(self, scheduler: ThreadScheduler):
        self.scheduler = scheduler
        self.jobs_with_errors: List[Job] = []

    def execute(self) -> None:
        """Execute jobs from the DAG"""
        raise NotImplementedError


class DryRunExecutor(BaseExecutor):
    """Dry-run execution"""

    def run_job(self, job: Job) -> None:
        """Dry-run a job"""
        print(job.shell)

    def execute(self) -> None:
        scheduler_gen = self.scheduler.schedule()
        ready_jobs = scheduler_gen.send(None)
        for job in ready_jobs:
            self.run_job(job)

        while ready_jobs:
            finished_jobs = ready_jobs.copy()
            ready_jobs = {
                new_job
                for completed_job in finished_jobs
                for new_job in scheduler_gen.send(completed_job)
            }
            for job in ready_jobs:
                self.run_job(job)


class LocalExecutor(BaseExecutor):
    """Run jobs locally"""

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.start_new_jobs = True
        self.running: List[Tuple[Job, Context, "asyncio.Task[int]", int]] = []
        signal.signal(signal.SIGINT, self.exit_gracefully)
        signal.signal(signal.SIGTERM, self.exit_gracefully)

    def exit_gracefully(self, signum, frame) -> None:
        logger.error("Termination signal detected. Terminating jobs.")
        self.start_new_jobs = False
        for _job, context, _task, _start_time in self.running:
            for command in context.commands:
                if command.proc and command.proc.returncode is None:
                    command.proc.send_signal(signal.SIGTERM)

    async def run_job(self, job: Job) -> None:
        """Start a job"""
        logger.info("Start: %s", job.name)
        logger.info("Running: %s", job.shell)
        start_time = time.monotonic_ns()
        context = Context()
        output: Optional[IO] = None
        if job.log is not None:
            output = open(job.log, "ab")
            context.file_handles.append(output)

        try:
            await job.shell.run(context, stdout=output, stderr=output)
        except OSError as e:
            logger.error("Failed: %s: %s", job.name, e)
            await context.cleanup()
            self.fail(job)
            return

        self.running.append(
            (
                job,
                context,
                asyncio.create_task(job.shell.wait()),
                start_time,
            )
        )

    def fail(self, job: Job) -> None:
        self.jobs_with_errors.append(job)
        self.start_new_jobs = False

    def execute(self) -> None:
        """Execute jobs from the DAG"""
        asyncio.run(self._execute())

    async def _execute(self) -> None:
        """Execute jobs from the DAG"""
        self.jobs_with_errors = []
        scheduler_gen = self.scheduler.schedule()
        ready_jobs = scheduler_gen.send(None)
        for job in ready_jobs:
            await self.run_job(job)

        while self.running:
            done, _running = await asyncio.wait(
                [job[2] for job in self.running],
                return_when=asyncio.FIRST_COMPLETED,
            )

            finished_jobs = [
                self.running.pop(i)
                for i in reversed(range(len(self.running)))
                if self.running[i][2] in done
            ]

            completed: List[Job] = []
            for job, context, task, start_time in finished_jobs:
                await context.cleanup()
                total_seconds = (time.monotonic_ns() - start_time) / 1e9
                returncode = task.result()
                if returncode != 0 and not job.fail_ok:
                    logger.error(
                        "Failed: %s with status %s after %.2f seconds",
                        job.name,
                        returncode,
                        total_seconds,
                    )
                    self.fail(job)
                else:
                    logger.info(
                        "Finished: %s with status %s in %.2f seconds",
                        job.name,
                        returncode,
                        total_seconds,
                    )
                    completed.append(job)

            if not self.start_new_jobs:
                # Don't start new jobs
                continue

            ready_jobs = {
                new_job
                for completed_job in completed
                for new_job in scheduler_gen.send(completed_job)
            }

            for job in ready_jobs:
                await self.run_job(job)
