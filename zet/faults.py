"""
Zet faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (errors and warnings). Codes are grouped by domain to keep copy consistent
  and make logs/searches predictable.
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves as a single, lowercased line.
- trigger(): central entry point to surface any fault (respecting shell/colorful).
- format_traceback(): uncaught-error rendering that only shows user frames.

Families
- SignatureError: malformed signature (fatal at registration).
- RegistrationError: duplicate/reserved/colliding names, frozen registry.
- MatchError: unknown option, missing value, unexpected/missing argument,
  unknown command (fatal for one invocation, echoes the usage line).
- ActionError: no action defined, spawn failure, failed helper command.

Integration
- The matcher returns MatchError instances inside its result; the dispatcher
  calls trigger(fault, **ctx) on them.
- In non-shell mode, exceptions are raised; in shell mode, they are printed
  via rich on stderr and the process exits with status 1.
"""
import copy
import os.path
import sys
import sysconfig
import traceback
import warnings
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .console import stderr as console
from .rendering import render_usage
from .utils import Unset, palette


class FaultCode(IntEnum):
    """
    canonical fault codes used across zet (stable identifiers).

    grouping (by high-level domain)
    - signatures (101xx)
      • MALFORMED_SIGNATURE
    - registration (102xx)
      • DUPLICATE_COMMAND, DUPLICATE_GROUP, RESERVED_PREFIX, NAME_COLLISION,
        FROZEN_REGISTRY
    - routing (1110x)
      • UNKNOWN_COMMAND, MISSING_COMMAND
    - options (1111x)
      • UNKNOWN_OPTION, OPTION_VALUE_REQUIRED, FLAG_ASSIGNMENT
    - positionals (1112x)
      • UNEXPECTED_ARGUMENT, MISSING_ARGUMENT
    - actions (113xx)
      • UNDEFINED_ACTION, SPAWN_FAILURE, COMMAND_FAILED
    - warnings (121xx)
      • ACTION_OVERRIDE

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- signature errors (101xx) ---
    MALFORMED_SIGNATURE         = 10101

    # --- registration errors (102xx) ---
    DUPLICATE_COMMAND           = 10201
    DUPLICATE_GROUP             = 10202
    RESERVED_PREFIX             = 10203
    NAME_COLLISION              = 10204
    FROZEN_REGISTRY             = 10205

    # --- routing errors (1110x) ---
    UNKNOWN_COMMAND             = 11101
    MISSING_COMMAND             = 11102

    # --- option errors (1111x) ---
    UNKNOWN_OPTION              = 11111
    OPTION_VALUE_REQUIRED       = 11112
    FLAG_ASSIGNMENT             = 11113

    # --- positional errors (1112x) ---
    UNEXPECTED_ARGUMENT         = 11121
    MISSING_ARGUMENT            = 11122

    # --- action errors (113xx) ---
    UNDEFINED_ACTION            = 11301
    SPAWN_FAILURE               = 11302
    COMMAND_FAILED              = 11303

    # --- warnings (121xx) ---
    ACTION_OVERRIDE             = 12101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _styler(options, styles):
    def styler(style):
        return styles[style] if options.get("colorful", True) else ""
    return styler


class CommandException(Exception):
    """
    base type for every zet error.

    carries a message and read-only options (prog, colorful, shell, command,
    plus any context the reporter wants to keep, e.g. the offending token).
    the fault code comes from the subclass declaration:

        class UnknownOptionError(MatchError, code=FaultCode.UNKNOWN_OPTION): ...
    """
    code = Unset

    def __init_subclass__(cls, /, code=Unset, **options):
        super().__init_subclass__(**options)
        if code is not Unset:
            cls.code = FaultCode(code)

    def __init__(self, message=Unset, /, **options):
        assert message is Unset or isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        styles = palette({
            "prog-name": "bold red",
            "error-message": "red",
        })
        styler = _styler(self.options, styles)
        prog = self.options.get("prog", "zet")

        line = Text.assemble((f"{prog}: ", styler("prog-name")), (str(self), styler("error-message")))

        if (command := self.options.get("command")) is None:
            return line
        return Group(line, Text(), render_usage(command, prog=prog, colorful=self.options.get("colorful", True)))

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self, soft_wrap=True)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class SignatureError(CommandException, code=FaultCode.MALFORMED_SIGNATURE): ...

class RegistrationError(CommandException): ...
class DuplicateCommandError(RegistrationError, code=FaultCode.DUPLICATE_COMMAND): ...
class DuplicateGroupError(RegistrationError, code=FaultCode.DUPLICATE_GROUP): ...
class ReservedPrefixError(RegistrationError, code=FaultCode.RESERVED_PREFIX): ...
class NameCollisionError(RegistrationError, code=FaultCode.NAME_COLLISION): ...
class FrozenRegistryError(RegistrationError, code=FaultCode.FROZEN_REGISTRY): ...

class MatchError(CommandException): ...
class UnknownCommandError(MatchError, code=FaultCode.UNKNOWN_COMMAND): ...
class MissingCommandError(MatchError, code=FaultCode.MISSING_COMMAND): ...
class UnknownOptionError(MatchError, code=FaultCode.UNKNOWN_OPTION): ...
class OptionValueRequiredError(MatchError, code=FaultCode.OPTION_VALUE_REQUIRED): ...
class FlagAssignmentError(MatchError, code=FaultCode.FLAG_ASSIGNMENT): ...
class UnexpectedArgumentError(MatchError, code=FaultCode.UNEXPECTED_ARGUMENT): ...
class MissingArgumentError(MatchError, code=FaultCode.MISSING_ARGUMENT): ...

class ActionError(CommandException): ...
class UndefinedActionError(ActionError, code=FaultCode.UNDEFINED_ACTION): ...
class SpawnError(ActionError, code=FaultCode.SPAWN_FAILURE): ...
class CommandFailedError(ActionError, code=FaultCode.COMMAND_FAILED): ...


class CommandWarning(Warning):
    """
    base type for non-fatal zet notices.

    outside shell mode the warning goes through the warnings module (so hosts
    and tests can filter or record it); in shell mode it is printed on stderr.
    """
    code = Unset

    def __init_subclass__(cls, /, code=Unset, **options):
        super().__init_subclass__(**options)
        if code is not Unset:
            cls.code = FaultCode(code)

    def __init__(self, message=Unset, /, **options):
        assert message is Unset or isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        styles = palette({
            "prog-name": "bold yellow",
            "warning-message": "yellow",
        })
        styler = _styler(self.options, styles)
        prog = self.options.get("prog", "zet")
        return Text.assemble((f"{prog}: ", styler("prog-name")), (str(self), styler("warning-message")))

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            # 1 is __trigger__, 2 is trigger(), 3 is whoever called trigger()
            return warnings.warn(self, stacklevel=self.options.get("stacklevel", 3))
        console.print(self, soft_wrap=True)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ActionOverrideWarning(CommandWarning, code=FaultCode.ACTION_OVERRIDE): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace(fault, **options).
    - in shell mode rendering happens via the rich console; otherwise
      exceptions are raised and warnings are emitted.

    typical options
    - prog, shell, colorful, command (echoes its usage line), and any other
      context the reporter may want to keep (token, name, prefix, ...).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


_PACKAGE = os.path.dirname(os.path.abspath(__file__))
_LIBRARIES = tuple({
    os.path.abspath(path)
    for key in ("stdlib", "platstdlib", "purelib", "platlib")
    if (path := sysconfig.get_paths().get(key))
})


def _attributable(filename):
    """
    tell whether a traceback frame belongs to user-authored code.

    frames from this package, the standard library, site-packages and frozen
    or synthetic modules ("<frozen ...>", "<string>") are never shown.
    """
    if filename.startswith("<"):
        return False
    filename = os.path.abspath(filename)
    return not any(
        filename == root or filename.startswith(root + os.sep)
        for root in (_PACKAGE, *_LIBRARIES)
    )


def format_traceback(exception, /, *, prog="zet", colorful=True):
    """
    render an uncaught error as "<prog>: <message>" plus the user frames.

    the message line is the exception's own message for zet faults and the
    "Type: message" form for anything else. frames that come from zet, the
    standard library or installed packages are filtered out, so users only
    see the registration/callback code they wrote.
    """
    styles = palette({
        "error-message": "red",
        "frame": "dim",
    })
    styler = _styler({"colorful": colorful}, styles)

    if isinstance(exception, CommandException):
        message = str(exception)
    else:
        message = "".join(traceback.format_exception_only(exception)).strip()

    text = Text()
    text.append(f"{prog}: {message}", styler("error-message"))

    frames = [
        frame for frame in traceback.extract_tb(exception.__traceback__)
        if _attributable(frame.filename)
    ]
    if frames:
        text.append("\n")
    for frame in frames:
        text.append("\n").append(f'  File "{frame.filename}", line {frame.lineno}, in {frame.name}', styler("frame"))
    return text


__all__ = (
    "CommandException",
    "SignatureError",
    "RegistrationError",
    "DuplicateCommandError",
    "DuplicateGroupError",
    "ReservedPrefixError",
    "NameCollisionError",
    "FrozenRegistryError",
    "MatchError",
    "UnknownCommandError",
    "MissingCommandError",
    "UnknownOptionError",
    "OptionValueRequiredError",
    "FlagAssignmentError",
    "UnexpectedArgumentError",
    "MissingArgumentError",
    "ActionError",
    "UndefinedActionError",
    "SpawnError",
    "CommandFailedError",
    "CommandWarning",
    "ActionOverrideWarning",
    "FaultCode",
    "trigger",
    "format_traceback",
)
