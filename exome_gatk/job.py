"""
Job objects
"""

import pathlib
from typing import Optional

from .shell_pipeline import Command


class Job:
    """A named step for execution"""

    def __init__(
        self,
        command: Command,
        name: str,
        threads: int = 1,
        fail_ok: Optional[bool] = None,
        log: Optional[pathlib.Path] = None,
    ):
        self.shell = command
        self.name = name
        self.threads = threads
        self.fail_ok = command.fail_ok if fail_ok is None else fail_ok
        # stdout and stderr of the step go here when set
        self.log = log

    def __hash__(self):
        return hash(self.shell)

    def __eq__(self, other: object):
        if isinstance(other, Job):
            return self.shell == other.shell
        return False

    def __ne__(self, other: object):
        return not self == other

    def __repr__(self):
        return f"Job({self.name})"

    def __str__(self):
        return f"Job({self.name})"
