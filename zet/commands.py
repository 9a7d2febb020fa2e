"""
Zet commands (registry, groups, builders and actions)

Scope
- Registry: the default group plus named groups, the frozen flag and the
  state bound by the last successful dispatch (arguments, options, rest).
- Group: a namespace of commands sharing a prefix (None for the default
  group). Reserved prefixes are "cli" and "init".
- Command: a compiled Signature plus a description and an action.
- CommandBuilder: fluent handle returned by register(); it is the only way
  to set a command's description and action.
- Actions: Subprocess(parts) runs a program, Callback(callback) calls Python
  code, Unset means no action was defined.

Lifecycle
1. configuration: register(), group(), include() and builder calls.
2. dispatch: the dispatcher freezes the registry; every mutation from then
   on raises FrozenRegistryError.
3. execution: the matched state is bound once and read through argument(),
   option(), has_argument(), has_option() and rest.

Example
    registry = Registry()
    registry.register("build {target?} {--Release}").description("Build the project").command("make", rest())
    docker = registry.group("docker", "Docker helpers")
    docker.register("up ...").command("docker", "compose", "up", rest())
"""
import importlib
import importlib.util
import logging
import os.path
import re
import sys
from types import MappingProxyType

from . import signatures
from .environment import root_path
from .faults import (
    ActionOverrideWarning,
    DuplicateCommandError,
    DuplicateGroupError,
    FrozenRegistryError,
    NameCollisionError,
    ReservedPrefixError,
    trigger,
)
from .parts import normalize
from .processes import spawn
from .signatures import SpecType
from .utils import Unset, mglob, mirror

logger = logging.getLogger(__name__)

RESERVED = frozenset({"cli", "init"})


class Subprocess(metaclass=SpecType):
    """
    Action that spawns a program; parts are expanded with the bound rest
    tokens right before spawning.
    """
    __introspectable__ = ("parts",)

    def __new__(cls, parts, /):
        self = super().__new__(cls)
        self._parts = tuple(map(normalize, parts))
        return self


class Callback(metaclass=SpecType):
    """
    Action that calls a Python callable with no arguments; coroutine
    functions are awaited to completion.
    """
    __introspectable__ = ("callback",)

    def __new__(cls, callback, /):
        if not callable(callback):
            raise TypeError(f"{cls.__typename__} 'callback' must be callable")
        self = super().__new__(cls)
        self._callback = callback
        return self


class Command:
    """
    A registered command.

    signature and group are fixed at registration; descr and action are only
    changed through the CommandBuilder returned by register().
    """
    __introspectable__ = ("name", "signature", "descr", "action")

    signature = mirror("signature")
    group = mirror("group")
    descr = mirror("descr")
    action = mirror("action")

    def __init__(self, signature, group, /):
        self._signature = signature
        self._group = group
        self._descr = None
        self._action = Unset

    @property
    def name(self):
        return self._signature.name

    @property
    def label(self):
        """
        The words a user types to reach this command ("prefix name" or "name").
        """
        return self.name if self._group.prefix is None else f"{self._group.prefix} {self.name}"

    def __rich_repr__(self):
        yield "label", self.label
        for name in self.__introspectable__[1:]:
            yield name, getattr(self, name)

    def __repr__(self):
        return "command(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


class CommandBuilder:
    """
    Fluent configuration handle for one command.

    Every method returns the builder so calls can be chained:

        zet.register("test ...").description("Run the tests").command("pytest", zet.rest())

    Setting an action twice keeps the last one and emits an
    ActionOverrideWarning.
    """

    def __init__(self, command, registry, /):
        self._command = command
        self._registry = registry

    @property
    def target(self):
        return self._command

    def description(self, text, /):
        self._registry._ensure_mutable()
        if not isinstance(text, str):
            raise TypeError("command description must be a string")
        self._command._descr = text
        return self

    def command(self, *parts):
        self._registry._ensure_mutable()
        self._assign(Subprocess(parts))
        return self

    def callback(self, callback, /):
        self._registry._ensure_mutable()
        if not callable(callback):
            raise TypeError("command callback must be callable")
        self._assign(Callback(callback))
        return self

    def _assign(self, action, /):
        if self._command.action is not Unset:
            # _assign() is 3, the builder method 4, the code calling it 5
            trigger(
                ActionOverrideWarning(f"command '{self._command.label}' already has an action, replacing it"),
                shell=False,
                stacklevel=5,
            )
        self._command._action = action
        logger.debug("set %s action of %r", type(action).__typename__, self._command.label)

    def __repr__(self):
        return f"command-builder({self._command.label!r})"


class Group:
    """
    A namespace of commands.

    The default group has prefix None; named groups are created through
    Registry.group() and are reached with "zet <prefix> <command>".
    """
    __introspectable__ = ("prefix", "descr", "commands")

    prefix = mirror("prefix")
    descr = mirror("descr")
    commands = mirror("commands")

    def __init__(self, registry, prefix=None, descr=None, /):
        self._registry = registry
        self._prefix = prefix
        self._descr = descr
        self._commands = {}

    def register(self, source, /):
        """
        Compile a signature and add its command to this group.

        Raises
        - SignatureError: the signature is malformed.
        - DuplicateCommandError: the name already exists in this group.
        - NameCollisionError: (default group) the name is a group prefix.
        - FrozenRegistryError: dispatch has already started.
        """
        self._registry._ensure_mutable()
        signature = signatures.compile(source)

        if (name := signature.name) in self._commands:
            raise DuplicateCommandError(
                f"duplicate command '{name}' in group '{self._prefix or 'default'}'",
                name=name,
                prefix=self._prefix,
            )
        if self._prefix is None and name in self._registry.groups:
            raise NameCollisionError(f"command '{name}' collides with the group of the same name", name=name)

        self._commands[name] = command = Command(signature, self)
        logger.debug("registered command %r", command.label)
        return CommandBuilder(command, self._registry)

    def __rich_repr__(self):
        yield "prefix", self._prefix
        yield "descr", self._descr
        yield "commands", tuple(self._commands)

    def __repr__(self):
        return "group(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


def _module_name(path, /):
    stem = os.path.splitext(os.path.relpath(path, root_path()))[0]
    return "zet_include_" + re.sub(r"\W", "_", stem)


class Registry:
    """
    All commands of one program, plus the state of the current invocation.

    Options
    - prog: program name shown in help and errors (default "zet").

    Runtime accessors (valid after a successful dispatch)
    - argument(name) / option(name): bound value, or None when absent.
    - has_argument(name) / has_option(name): presence checks.
    - rest: tuple of rest tokens; matched: the executed Command.

    Option names may be given as "--dry-run" or "dry-run", in any case.
    """
    __introspectable__ = ("prog", "default", "groups", "frozen")

    prog = mirror("prog")
    default = mirror("default")
    groups = mirror("groups")
    frozen = mirror("frozen")
    matched = mirror("matched")
    rest = mirror("rest")

    def __init__(self, *, prog="zet"):
        if not isinstance(prog, str):
            raise TypeError("registry 'prog' must be a string")
        elif not (prog := prog.strip()):
            raise ValueError("registry 'prog' cannot be empty")
        self._prog = prog
        self._default = Group(self)
        self._groups = {}
        self._frozen = False
        self._matched = None
        self._arguments = {}
        self._options = {}
        self._rest = ()

    def _ensure_mutable(self):
        if self._frozen:
            raise FrozenRegistryError("commands cannot be changed once dispatch has started")

    def freeze(self):
        self._frozen = True

    # --- configuration ---

    def register(self, source, /):
        """
        Register a command in the default group (see Group.register).
        """
        return self._default.register(source)

    def group(self, prefix, /, descr=None):
        """
        Create a named group of commands.

        Raises
        - TypeError / ValueError: prefix is not a string, is blank, or is not
          a single word; descr is neither a string nor None.
        - ReservedPrefixError: prefix is "cli" or "init".
        - DuplicateGroupError: a group with this prefix exists.
        - NameCollisionError: a default-group command uses the same word.
        - FrozenRegistryError: dispatch has already started.
        """
        self._ensure_mutable()
        if not isinstance(prefix, str):
            raise TypeError("group prefix must be a string")
        elif not (prefix := prefix.strip()):
            raise ValueError("group prefix cannot be empty")
        elif any(char.isspace() for char in prefix):
            raise ValueError(f"group prefix must be a single word, got {prefix!r}")
        if not isinstance(descr, str | None):
            raise TypeError("group description must be a string")

        if prefix in RESERVED:
            raise ReservedPrefixError(f"the group prefix '{prefix}' is reserved", prefix=prefix)
        if prefix in self._groups:
            raise DuplicateGroupError(f"group '{prefix}' already exists", prefix=prefix)
        if prefix in self._default.commands:
            raise NameCollisionError(f"group '{prefix}' collides with the command of the same name", prefix=prefix)

        self._groups[prefix] = group = Group(self, prefix, descr)
        logger.debug("created group %r", prefix)
        return group

    def include(self, source, /):
        """
        Load configuration split over several files or modules.

        - "tasks/docker.py" (a .py suffix or a path separator): a file relative
          to the project root, executed once per process.
        - "project.commands.*": a module glob (see utils.mglob) imported with
          importlib; "**" spans several package levels.

        Returns the list of loaded modules.

        Raises
        - ImportError: the file does not exist, or a module cannot be imported.
        """
        if not isinstance(source, str):
            raise TypeError("include() argument must be a string")
        elif not (source := source.strip()):
            raise ValueError("include() argument cannot be empty")

        if not (source.endswith(".py") or "/" in source or os.sep in source):
            modules = [importlib.import_module(name) for name in mglob(source)]
            logger.debug("included %d module(s) for %r", len(modules), source)
            return modules

        if not os.path.isfile(path := root_path(source)):
            raise ImportError(f"cannot include '{source}': no such file under {root_path()}", path=path)
        if (name := _module_name(path)) in sys.modules:
            return [sys.modules[name]]

        spec = importlib.util.spec_from_file_location(name, path)
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            del sys.modules[name]
            raise
        logger.debug("included file %r", path)
        return [module]

    # --- invocation state ---

    def bind(self, command, result, /):
        """
        Store the outcome of a successful match; called by the dispatcher.
        """
        if not result.ok:
            raise ValueError("only successful match results can be bound")
        self._matched = command
        self._arguments = dict(result.arguments)
        self._options = dict(result.options)
        self._rest = tuple(result.rest)

    def argument(self, name, /):
        return self._arguments.get(name)

    def has_argument(self, name, /):
        return name in self._arguments

    def option(self, name, /):
        return self._options.get(_long(name))

    def has_option(self, name, /):
        return _long(name) in self._options

    @property
    def arguments(self):
        return MappingProxyType(self._arguments)

    @property
    def options(self):
        return MappingProxyType(self._options)

    # --- execution ---

    async def command(self, *parts):
        """
        Run a program with inherited streams; Rest expands to the bound rest.
        """
        return await spawn(parts, rest=self._rest)

    async def silent_command(self, *parts):
        """
        Run a program with captured streams (see CommandOutput).
        """
        return await spawn(parts, rest=self._rest, capture=True)

    def run(self, argv=None, /, *, colorful=True):
        """
        Dispatch argv (default: sys.argv[1:]) in shell mode and exit with the
        resulting code.
        """
        from .dispatch import Dispatcher

        dispatcher = Dispatcher(self, shell=True, colorful=colorful)
        sys.exit(dispatcher.dispatch(sys.argv[1:] if argv is None else argv))

    def __rich_repr__(self):
        yield "prog", self._prog
        yield "groups", tuple(self._groups)
        yield "commands", tuple(self._default.commands)
        yield "frozen", self._frozen

    def __repr__(self):
        return "registry(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


def _long(name, /):
    if not isinstance(name, str):
        raise TypeError("option name must be a string")
    return "--" + name.removeprefix("--").lower()


__all__ = (
    "Subprocess",
    "Callback",
    "Command",
    "CommandBuilder",
    "Group",
    "Registry",
    "RESERVED",
)
