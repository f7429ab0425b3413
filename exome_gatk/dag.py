"""
A directed acyclic graph of jobs to execute
"""

from __future__ import annotations

from typing import Dict, Generator, List, Optional, Set

from .exceptions import DagExecutionError
from .job import Job
from .logging import get_logger

logger = get_logger(__name__)


class DAG:
    """A directed acyclic graph of jobs"""

    def __init__(self) -> None:
        # waiting_jobs = {job: {dependencies}}
        self.waiting_jobs: Dict[Job, Set[Job]] = {}
        # planned_jobs = {dependency: [downstream_jobs]}
        self.planned_jobs: Dict[Job, List[Job]] = {}
        self.ready_jobs: Set[Job] = set()
        self.finished_jobs: List[Job] = []

    def __len__(self) -> int:
        return (
            len(self.waiting_jobs)
            + len(self.ready_jobs)
            + len(self.finished_jobs)
        )

    def add_job(self, job: Job, dependencies: Optional[Set[Job]] = None):
        """Add a job to the DAG"""
        if dependencies:
            for dependency in dependencies:
                if not (
                    dependency in self.waiting_jobs
                    or dependency in self.ready_jobs
                ):
                    raise DagExecutionError(
                        f"Dependency '{dependency}' of '{job}' is not in "
                        "the DAG"
                    )
            self.waiting_jobs[job] = set(dependencies)
            for dependency in dependencies:
                downstream = self.planned_jobs.setdefault(dependency, [])
                downstream.append(job)
        else:
            self.ready_jobs.add(job)

    def add_chain(self, *jobs: Job, after: Optional[Job] = None) -> Job:
        """Add jobs that run one after another. Returns the last job"""
        previous = after
        for job in jobs:
            self.add_job(job, {previous} if previous else None)
            previous = job
        assert previous
        return previous

    def unexecuted_jobs(self) -> Set[Job]:
        return set(self.waiting_jobs) | self.ready_jobs

    def update_dag(
        self,
    ) -> Generator[Set[Job], Optional[Job], None]:
        """Update the DAG with a finished job"""
        finished_job = yield self.ready_jobs.copy()

        while True:
            logger.debug("Waiting jobs: %s", self.waiting_jobs)
            logger.debug("Ready jobs: %s", self.ready_jobs)
            logger.debug("Newly finished: %s", finished_job)

            new_ready_jobs: Set[Job] = set()
            if isinstance(finished_job, Job):
                if finished_job not in self.ready_jobs:
                    raise DagExecutionError(
                        f"Finished job '{finished_job}' was not ready for "
                        "execution"
                    )

                self.ready_jobs.remove(finished_job)
                self.finished_jobs.append(finished_job)
                for downstream in self.planned_jobs.get(finished_job, []):
                    upstream = self.waiting_jobs[downstream]
                    upstream.remove(finished_job)
                    if len(upstream) < 1:
                        self.ready_jobs.add(downstream)
                        new_ready_jobs.add(downstream)
                        del self.waiting_jobs[downstream]
            finished_job = yield new_ready_jobs
