"""Blocking process execution with streamed output."""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Protocol

from .errors import ExecutionError

logger = logging.getLogger('jvmbuild')


class LineSink(Protocol):
    def write(self, line: str) -> None: ...


class CommandExecutor:
    """Runs external commands, streaming their output line by line."""

    def execute(
        self,
        command: str,
        args: List[str],
        cwd: Path,
        stdout: LineSink,
        stderr: Optional[LineSink] = None
    ) -> None:
        """Run command to completion.

        Args:
            command: Executable to run
            args: Arguments passed to the executable
            cwd: Working directory
            stdout: Sink receiving each line of standard output
            stderr: Sink receiving standard error; merged into stdout when
                None or the same sink

        Raises:
            ExecutionError: If the process cannot be started or exits non-zero
        """
        merged = stderr is None or stderr is stdout
        logger.debug(f"Executing {command} {' '.join(args)} in {cwd}")

        try:
            process = subprocess.Popen(
                [str(command)] + list(args),
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merged else subprocess.PIPE,
                text=True,
                errors='replace'
            )
        except OSError as e:
            raise ExecutionError("unable to start", str(command), e) from e

        if merged:
            with process.stdout:
                for line in process.stdout:
                    stdout.write(line)
            return_code = process.wait()
        else:
            out, err = process.communicate()
            for line in out.splitlines():
                stdout.write(line)
            for line in err.splitlines():
                stderr.write(line)
            return_code = process.returncode

        if return_code != 0:
            raise ExecutionError(
                "error running build",
                f"{command} (exit code {return_code})",
                exit_code=return_code
            )
