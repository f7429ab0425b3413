"""Argument-vector commands, run without a shell"""

from __future__ import annotations
import asyncio
import io
import shlex
from typing import IO, List, Union

from .logging import get_logger

logger = get_logger(__name__)


class Context:
    """Holds resources opened while running a command."""

    def __init__(self) -> None:
        # Hold the commands run in this context
        self.commands: List[Command] = []
        self.file_handles: List[io.IOBase] = []

    async def cleanup(self) -> None:
        for fh in self.file_handles:
            fh.close()
        self.file_handles = []


class Command:
    """Represents a single command (e.g., 'bgzip', 'java')."""

    def __init__(
        self,
        executable: str,
        *args: str,
        fail_ok=False,
    ) -> None:
        self.executable = executable
        self.args = [str(x) for x in args]
        self.fail_ok = fail_ok
        self.proc: Union[asyncio.subprocess.Process, None] = None

    @property
    def argv(self) -> List[str]:
        return [self.executable] + self.args

    async def run(
        self,
        context: Context,
        stdin: Union[IO, int, None] = None,
        stdout: Union[IO, int, None] = None,
        stderr: Union[IO, int, None] = None,
    ) -> asyncio.subprocess.Process:
        self.proc = await asyncio.create_subprocess_exec(
            *self.argv,
            stdin=stdin,
            stdout=stdout,
            stderr=stderr,
        )
        context.commands.append(self)
        return self.proc

    async def wait(self) -> int:
        """Wait for the process; a failure of a fail_ok command is 0"""
        assert self.proc
        ret = await self.proc.wait()
        if ret != 0:
            logger.debug("Command failed with code %s: %s", ret, self)
            if self.fail_ok:
                return 0
        return ret

    def __str__(self) -> str:
        return shlex.join(self.argv)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({self.executable}, "
            + ", ".join([repr(x) for x in self.args])
            + f", fail_ok={self.fail_ok})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Command):
            return NotImplemented
        return (
            self.executable == other.executable
            and self.args == other.args
            and self.fail_ok == other.fail_ok
        )

    def __hash__(self) -> int:
        return hash(tuple([self.executable, self.fail_ok] + self.args))
