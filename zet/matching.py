"""
Zet argv matcher (runtime tokens against a compiled signature)

Scope
- match() walks the tokens once, left to right, and binds them to the
  arguments and options of a Signature.
- Failures are values: the result carries a MatchError instead of raising,
  so the caller decides how to surface it (see dispatch and faults.trigger).

Precedence (for each token, first rule wins)
1. "--" switches to positional-only mode (the token itself is dropped).
2. "--help" / "-h" ends matching with a help request.
3. "--name[=value]": long option, case-insensitive, inline value after "=".
   A value option without inline value takes the next token unless it
   starts with "-".
4. "-XY": short alias, exact and case-sensitive. A value option takes the
   next token unconditionally.
5. anything else binds to the next declared argument, then to rest.

Unknown options go to rest when the signature accepts it, otherwise they
are errors. Rules 1 to 4 are disabled once "--" has been seen. A repeated
option overwrites the earlier value.
"""
import logging
from collections import deque
from types import MappingProxyType

from .faults import (
    FlagAssignmentError,
    MatchError,
    MissingArgumentError,
    OptionValueRequiredError,
    UnexpectedArgumentError,
    UnknownOptionError,
)
from .signatures import Signature
from .utils import mirror

logger = logging.getLogger(__name__)


class MatchResult:
    """
    Outcome of one match() call.

    Exactly one of three shapes
    - success: arguments (name -> str), options (long name -> True | str) and
      rest (tuple of str) are set; error is None and help is False.
    - error: a MatchError whose options carry the matched command.
    - help: help is True.

    Results compare structurally; errors compare by type and message.
    """
    __introspectable__ = ("arguments", "options", "rest", "error", "help")

    arguments = mirror("arguments")
    options = mirror("options")
    rest = mirror("rest")
    error = mirror("error")
    help = mirror("help")

    def __init__(self, *, arguments=(), options=(), rest=(), error=None, help=False):
        if not isinstance(error, MatchError | None):
            raise TypeError("match-result 'error' must be a match error or None")
        self._arguments = dict(arguments)
        self._options = dict(options)
        self._rest = tuple(rest)
        self._error = error
        self._help = bool(help)

    @property
    def ok(self):
        return self._error is None and not self._help

    def __eq__(self, other):
        if not isinstance(other, MatchResult):
            return NotImplemented
        return (
            self._arguments == other._arguments and
            self._options == other._options and
            self._rest == other._rest and
            self._help == other._help and
            _fingerprint(self._error) == _fingerprint(other._error)
        )

    def __rich_repr__(self):
        for name in self.__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "match-result(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


def _fingerprint(error):
    return None if error is None else (type(error), str(error))


def match(tokens, signature, /, command=None):
    """
    Match runtime tokens against a compiled signature.

    Parameters
    - tokens: iterable of strings (the argv that follows the command name).
    - signature: the compiled Signature to bind against.
    - command: optional owning command; it is attached to any error so the
      usage line can be echoed when the fault is rendered.

    Returns
    - MatchResult (see its docstring). Never raises for user input.

    Raises
    - TypeError: signature is not a Signature, or a token is not a string.
    """
    if not isinstance(signature, Signature):
        raise TypeError("match() signature must be a signature object")
    tokens = deque(tokens)
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("match() tokens must be strings")

    def failure(cls, message, **context):
        logger.debug("match of %r failed: %s", signature.name, message)
        return MatchResult(error=cls(message, command=command, **context))

    arguments, options, rest = {}, {}, []
    pending = deque(signature.arguments)
    stopped = False

    while tokens:
        token = tokens.popleft()

        if not stopped and token == "--":
            stopped = True
            continue

        if not stopped and token in ("--help", "-h"):
            return MatchResult(help=True)

        if not stopped and token.startswith("--"):
            name, assigned, value = token.partition("=")
            if (option := signature.option("--" + name[2:].lower())) is None:
                if signature.rest:
                    rest.append(token)
                    continue
                return failure(UnknownOptionError, f"unknown option '{name}'", token=token)
            if option.value:
                if assigned:
                    options[option.name] = value
                elif tokens and not tokens[0].startswith("-"):
                    options[option.name] = tokens.popleft()
                else:
                    return failure(OptionValueRequiredError, f"option '{option.name}' requires a value", token=token)
            elif assigned:
                return failure(FlagAssignmentError, f"option '{option.name}' does not accept a value", token=token)
            else:
                options[option.name] = True
            continue

        if not stopped and token.startswith("-") and len(token) > 1:
            if (option := signature.short(token)) is None:
                if signature.rest:
                    rest.append(token)
                    continue
                return failure(UnknownOptionError, f"unknown option '{token}'", token=token)
            if not option.value:
                options[option.name] = True
            elif tokens:
                options[option.name] = tokens.popleft()
            else:
                return failure(OptionValueRequiredError, f"option '{option.name}' requires a value", token=token)
            continue

        if pending:
            arguments[pending.popleft().name] = token
        elif signature.rest:
            rest.append(token)
        else:
            return failure(
                UnexpectedArgumentError,
                f"unexpected argument '{token}' for command '{signature.name}'",
                token=token,
            )

    for argument in signature.arguments:
        if argument.required and argument.name not in arguments:
            return failure(MissingArgumentError, f"missing required argument '{argument.name}'", name=argument.name)

    logger.debug("matched %r: arguments=%r options=%r rest=%r", signature.name, arguments, options, rest)
    return MatchResult(arguments=arguments, options=options, rest=rest)


__all__ = (
    "MatchResult",
    "match",
)
