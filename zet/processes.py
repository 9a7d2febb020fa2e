"""
Zet processes (spawning subprocess actions and helper commands)

- spawn(parts, rest=..., capture=...) expands parts into argv and runs the
  program with asyncio. Streams are inherited by default; with capture=True
  they are piped and collected into a CommandOutput.
- CommandOutput(code, output, stdout, stderr) is the result of a spawn.
  output interleaves both streams in arrival order.

A child killed by a signal reports exit code 1. Failing to start the program
(missing executable, permissions, empty argv) raises SpawnError.
"""
import asyncio
import logging
import subprocess
import sys

from .faults import CommandFailedError, SpawnError
from .parts import expand
from .utils import mirror

logger = logging.getLogger(__name__)


class CommandOutput:
    """
    Exit status and, for captured spawns, decoded output of a subprocess.

    output/stdout/stderr are None when the streams were inherited.
    """
    __introspectable__ = ("code", "output", "stdout", "stderr")

    code = mirror("code")
    output = mirror("output")
    stdout = mirror("stdout")
    stderr = mirror("stderr")

    def __init__(self, code, output=None, stdout=None, stderr=None):
        if not isinstance(code, int):
            raise TypeError("command-output 'code' must be an integer")
        self._code = code
        self._output = output
        self._stdout = stdout
        self._stderr = stderr

    @property
    def success(self):
        return self._code == 0

    @property
    def failed(self):
        return self._code != 0

    def throw(self):
        """
        Raise CommandFailedError when the command failed, otherwise return self
        (so calls can be chained: `(await zet.silent_command(...)).throw().stdout`).
        """
        if self.failed:
            raise CommandFailedError(f"command failed with exit code {self._code}", code=self._code)
        return self

    def __rich_repr__(self):
        for name in self.__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "command-output(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


def _status(returncode):
    # negative return codes mean the child was terminated by a signal
    return returncode if returncode >= 0 else 1


def _decode(chunks):
    return b"".join(chunks).decode("utf-8", errors="replace")


async def spawn(parts, /, *, rest=(), capture=False):
    """
    Expand parts and run the resulting argv as a subprocess.

    Parameters
    - parts: sequence of parts (see zet.parts.normalize for accepted values).
    - rest: tokens substituted for the Rest placeholder.
    - capture: pipe stdout/stderr and collect them instead of inheriting.

    Returns
    - CommandOutput; never raises for a non-zero exit status (see throw()).

    Raises
    - SpawnError: argv is empty or the program could not be started.
    """
    if not (argv := expand(parts, rest)):
        raise SpawnError("cannot spawn an empty command")

    logger.debug("spawning %r (capture=%s)", argv, capture)
    pipe = subprocess.PIPE if capture else None
    try:
        process = await asyncio.create_subprocess_exec(*argv, stdout=pipe, stderr=pipe)
    except OSError as exception:
        raise SpawnError(f"cannot spawn '{argv[0]}': {exception.strerror or exception}", argv=tuple(argv)) from exception

    if not capture:
        code = _status(await process.wait())
        logger.debug("process %r exited with %d", argv[0], code)
        return CommandOutput(code)

    output, stdout, stderr = [], [], []

    async def pump(stream, sink):
        while chunk := await stream.read(65536):
            output.append(chunk)
            sink.append(chunk)

    await asyncio.gather(pump(process.stdout, stdout), pump(process.stderr, stderr))
    code = _status(await process.wait())
    logger.debug("process %r exited with %d", argv[0], code)
    return CommandOutput(code, _decode(output), _decode(stdout), _decode(stderr))


def exit(code=0, /):
    """
    Stop the current invocation with the given exit code.

    Raises SystemExit, which the dispatcher lets through untouched.
    """
    sys.exit(code)


__all__ = (
    "CommandOutput",
    "spawn",
    "exit",
)
