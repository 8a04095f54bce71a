"""External command execution.

Commands are run without a shell; once they finish, their output is handed
line by line to a line processor. Anything written to the error stream, or a
non-zero exit code, is turned into a ``RunCommandError`` for the operator to read.
"""

import os
import shlex
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from cmdtool.shared import ProcessConfig, get_logger

from .line_processors import LineProcessor

LineCallback = Callable[[str, int], None]


def _command_extensions() -> List[str]:
    # Windows lists executable extensions in PATHEXT (.COM;.EXE;.BAT;.CMD;...)
    extensions = [ext for ext in os.environ.get("PATHEXT", "").split(";") if ext]
    extensions.extend(["", ".sh"])
    return extensions


CMD_EXTENSIONS = _command_extensions()


class RunCommandError(RuntimeError):
    """An external command failed to start, wrote errors, or exited non-zero."""

    def __init__(self, message: str, exit_value: Optional[int] = None,
                 command: Optional[str] = None) -> None:
        super().__init__(message)
        self.exit_value = exit_value
        self.command = command


def _split_lines(text: Optional[str]) -> List[str]:
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.rstrip("\r") for line in lines]


def _as_callback(processor: Union[LineProcessor, LineCallback]) -> LineCallback:
    if isinstance(processor, LineProcessor):
        return processor.process
    return processor


class CommandRunner:
    """Runs operating system commands and feeds their output to processors."""

    def __init__(self, config: Optional[ProcessConfig] = None) -> None:
        self.config = config or ProcessConfig()
        self.logger = get_logger(__name__, "command_runner")

    def run(
        self,
        cmd: Union[str, Path],
        cmd_args: str,
        processor: Union[LineProcessor, LineCallback],
        read_from_error_out: bool = False,
    ) -> None:
        """Run the executable ``cmd`` with an argument string."""
        if os.name == "nt":
            executable = subprocess.list2cmdline([str(cmd)])
        else:
            executable = shlex.quote(str(cmd))
        self.run_command(f"{executable} {cmd_args}".strip(), processor, read_from_error_out)

    def run_command(
        self,
        command: Union[str, Sequence[str]],
        processor: Union[LineProcessor, LineCallback],
        read_from_error_out: bool = False,
    ) -> None:
        """Run a command line and feed its output lines to ``processor``.

        Args:
            command: Command line, split like a shell would (no shell is used),
                or an already split argument list
            processor: Line processor or ``(line, line_idx)`` callable
            read_from_error_out: Read the error stream instead of the output
                stream (some tools, like ``java -version``, report there)

        Raises:
            RunCommandError: if the command cannot be started, writes to the
                error stream, or exits with a non-zero code
        """
        handle_line = _as_callback(processor)
        if isinstance(command, str):
            args = shlex.split(command, posix=os.name != "nt")
        else:
            args = list(command)
            command = subprocess.list2cmdline(args)
        logger = self.logger.bind(command=command)
        logger.debug("Running command", extra={"read_from_error_out": read_from_error_out})

        try:
            proc = subprocess.Popen(
                args,
                stdout=subprocess.DEVNULL if read_from_error_out else subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding=self.config.encoding,
                errors="replace",
            )
        except OSError as e:
            logger.debug("Could not start command", extra={"error": str(e)})
            raise RunCommandError(f"Could not run {command}: {e}", command=command) from e

        with proc:
            # communicate() drains both pipes together; the timeout covers the whole run.
            try:
                out, err = proc.communicate(timeout=self.config.timeout_seconds)
            except subprocess.TimeoutExpired as e:
                proc.kill()
                proc.communicate()
                logger.debug("Command timed out", extra={"timeout_seconds": self.config.timeout_seconds})
                raise RunCommandError(f"Timed out: {command}", command=command) from e
            exit_value = proc.returncode

        if read_from_error_out:
            out, err = err, ""
        for line_idx, line in enumerate(_split_lines(out), start=1):
            handle_line(line, line_idx)

        logger.debug("Command finished", extra={"exit_value": exit_value})
        if err.strip():
            raise RunCommandError(err.strip(), exit_value, command)
        if exit_value != 0:
            raise RunCommandError("Failed", exit_value, command)

    def first_path_of(
        self, home: Union[str, Path], bin_path: str, cmd_base_name: str
    ) -> Optional[Path]:
        """Find a command under ``home/bin_path``, trying the known extensions.

        Returns:
            Absolute path of the first match, or None
        """
        base = Path(home).absolute() / bin_path
        for ext in CMD_EXTENSIONS:
            candidate = base / f"{cmd_base_name}{ext}"
            if candidate.is_file():
                return candidate
        return None
