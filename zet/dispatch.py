"""
Zet dispatcher (argv -> command -> action)

Dispatcher(registry, shell=True, colorful=True).dispatch(tokens) runs one
invocation and returns its exit code.

Resolution
- no tokens, or "--help"/"-h" first: global help on stdout, 0.
- first token is a group prefix: the second token names the command;
  "--help"/"-h" there shows the global help as well.
- otherwise the first token names a default-group command.

Matching and execution
- the remaining tokens are matched against the command signature; a help
  request prints the command help, an error is surfaced as a fault.
- on success the result is bound into the registry, then the action runs:
  subprocess (exit code of the child), callback (0, or 1 when it raises)
  or nothing (UndefinedActionError).

Faults
- shell=True: printed on stderr followed by SystemExit(1).
- shell=False: raised to the caller, useful for embedding and tests.
"""
import asyncio
import inspect
import logging

from . import matching
from .commands import Callback, Subprocess
from .console import stderr, stdout
from .faults import (
    MissingCommandError,
    SpawnError,
    UndefinedActionError,
    UnknownCommandError,
    format_traceback,
    trigger,
)
from .processes import spawn
from .rendering import render_command_help, render_global_help

logger = logging.getLogger(__name__)

HELP = ("--help", "-h")


async def _wait(awaitable):
    return await awaitable


class Dispatcher:
    """
    Runs invocations against a registry.

    The registry is frozen on the first dispatch: registration and builder
    calls fail from then on.
    """

    def __init__(self, registry, /, *, shell=True, colorful=True):
        self._registry = registry
        self._shell = bool(shell)
        self._colorful = bool(colorful)

    @property
    def registry(self):
        return self._registry

    @property
    def options(self):
        return {"prog": self._registry.prog, "shell": self._shell, "colorful": self._colorful}

    def dispatch(self, tokens, /):
        """
        Run one invocation and return its exit code (see module docstring).
        """
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("dispatch() tokens must be strings")

        self._registry.freeze()
        logger.debug("dispatching %r", tokens)

        if (resolved := self._resolve(tokens)) is None:
            stdout.print(render_global_help(self._registry, colorful=self._colorful), soft_wrap=True)
            return 0
        command, tail = resolved
        logger.debug("resolved command %r", command.label)

        result = matching.match(tail, command.signature, command)
        if result.help:
            stdout.print(render_command_help(command, prog=self._registry.prog, colorful=self._colorful), soft_wrap=True)
            return 0
        if result.error is not None:
            trigger(result.error, **self.options)

        self._registry.bind(command, result)
        return self._execute(command)

    def _resolve(self, tokens, /):
        """
        Find the command named by the leading tokens.

        Returns (command, remaining tokens), or None when the global help was
        requested. Unknown names are surfaced as faults.
        """
        if not tokens or tokens[0] in HELP:
            return None

        head, *tail = tokens
        if (group := self._registry.groups.get(head)) is not None:
            if not tail:
                trigger(MissingCommandError(f"missing command for group '{head}'", prefix=head), **self.options)
            name, *tail = tail
            if name in HELP:
                return None
            if (command := group.commands.get(name)) is None:
                trigger(UnknownCommandError(f"unknown command '{head} {name}'", name=name, prefix=head), **self.options)
            return command, tail

        if (command := self._registry.default.commands.get(head)) is None:
            trigger(UnknownCommandError(f"unknown command '{head}'", name=head), **self.options)
        return command, tail

    def _execute(self, command, /):
        match command.action:
            case Subprocess(parts=parts):
                logger.debug("running subprocess action of %r", command.label)
                try:
                    output = asyncio.run(spawn(parts, rest=self._registry.rest))
                except SpawnError as fault:
                    trigger(fault, **self.options)
                return output.code

            case Callback(callback=callback):
                logger.debug("running callback action of %r", command.label)
                try:
                    if inspect.isawaitable(outcome := callback()):
                        asyncio.run(_wait(outcome))
                except Exception as exception:
                    stderr.print(
                        format_traceback(exception, prog=self._registry.prog, colorful=self._colorful),
                        soft_wrap=True,
                    )
                    return 1
                return 0

            case _:
                trigger(
                    UndefinedActionError(f"command '{command.name}' has no action defined", name=command.name),
                    **self.options,
                )


__all__ = (
    "Dispatcher",
)
