"""
Zet signatures (declarative command grammar and its compiled schema)

Scope
- Compile a one-line signature string into an immutable, structurally
  comparable Signature made of ArgumentSpec and OptionSpec entries.
- Keep every grammar rule in one place so the matcher and the help renderer
  can trust the schema they receive.

Grammar
    signature := name (ws (brace-arg | brace-opt | "..."))*
    brace-arg := "{" name ["?"] [ws] [descr] "}"
    brace-opt := "{" "--" name ["="] [ws] [descr] "}"

- name: a single bare word; braced tokens and "..." are not valid names.
- inside braces a name ends at the first character it cannot contain
  (argument names are word characters, option names also allow "-"), and
  whatever follows becomes the description: "{--out:dir}" is "--out".
- brace-arg: positional argument, required unless followed by "?". A required
  argument may never follow an optional one.
- brace-opt: named option. A trailing "=" means the option takes a value,
  otherwise it is a boolean flag. Long names are stored lowercased; the
  short alias is derived from the uppercase initials of hyphen-separated
  segments of the declared name ("--Dry-Run" -> "-DR").
- "...": the command accepts rest tokens (extra positionals, unknown options).

Examples
    >>> signature = compile("build {target? the build target} {--Output= where to write} ...")
    >>> signature.arguments[0].required
    False
    >>> signature.options[0].name, signature.options[0].short, signature.options[0].value
    ('--output', '-O', True)
"""
import functools
import logging
import operator
import re

from .faults import SignatureError
from .utils import mirror, rename

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"\{[^}]+\}|\.\.\.|[^\s{}]+")
_OPTION = re.compile(r"--(?P<name>[A-Za-z][A-Za-z0-9_-]*)(?P<value>=)?\s*(?P<descr>.*)", re.DOTALL)
_ARGUMENT = re.compile(r"(?P<name>[A-Za-z]\w*)(?P<optional>\?)?\s*(?P<descr>.*)", re.DOTALL)


class SpecType(type):
    """
    Metaclass for compiled schema types.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      backed by "_<name>" (see utils.mirror).
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.
    - Provide structural equality and hashing over the introspectable fields,
      so two compilations of the same source compare equal.

    Conventions
    - __typename__ is derived from the class name (camel-case split with
      hyphens) and used in messages, e.g. "option-spec".
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
            **options,
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        @rename("__eq__")
        def __eq__(self, other):
            if type(self) is not type(other):
                return NotImplemented
            return tuple(self.__rich_repr__()) == tuple(other.__rich_repr__())
        self.__eq__ = __eq__

        @rename("__hash__")
        def __hash__(self):
            return hash((type(self), *self.__rich_repr__()))
        self.__hash__ = __hash__

        return self


class ArgumentSpec(metaclass=SpecType):
    """
    A positional argument: name, required flag and description.
    """
    __introspectable__ = ("name", "required", "descr")

    def __new__(cls, name, /, required=True, descr=""):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not re.fullmatch(r"[A-Za-z]\w*", name):
            raise ValueError(f"{cls.__typename__} 'name' must be an identifier, got {name!r}")
        if not isinstance(required, bool):
            raise TypeError(f"{cls.__typename__} 'required' must be a boolean")
        if not isinstance(descr, str):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")

        self = super().__new__(cls)
        self._name = name
        self._required = required
        self._descr = descr
        return self


class OptionSpec(metaclass=SpecType):
    """
    A named option.

    - name: long form, always "--" followed by the lowercased declared name.
    - short: derived "-XY" alias or None.
    - value: True when the option takes a value, False for boolean flags.
    - descr: description, possibly empty.
    """
    __introspectable__ = ("name", "short", "value", "descr")

    def __new__(cls, name, /, short=None, value=False, descr=""):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not re.fullmatch(r"--[a-z][a-z0-9_-]*", name):
            raise ValueError(f"{cls.__typename__} 'name' must be a lowercase long option, got {name!r}")
        if not isinstance(short, str | None):
            raise TypeError(f"{cls.__typename__} 'short' must be a string or None")
        elif isinstance(short, str) and not re.fullmatch(r"-[A-Z]+", short):
            raise ValueError(f"{cls.__typename__} 'short' must be uppercase initials, got {short!r}")
        if not isinstance(value, bool):
            raise TypeError(f"{cls.__typename__} 'value' must be a boolean")
        if not isinstance(descr, str):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")

        self = super().__new__(cls)
        self._name = name
        self._short = short
        self._value = value
        self._descr = descr
        return self


class Signature(metaclass=SpecType):
    """
    Compiled signature: command name, ordered arguments, ordered options and
    whether rest tokens are accepted.

    Lookup helpers
    - option(name): long-name lookup (exact, names are stored lowercased).
    - short(flag): case-sensitive short-alias lookup; when several options
      derive the same alias, the last declared one answers it.
    """
    __introspectable__ = ("name", "arguments", "options", "rest")

    def __new__(cls, name, /, arguments=(), options=(), rest=False):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not name or any(char.isspace() for char in name):
            raise ValueError(f"{cls.__typename__} 'name' must be a single word, got {name!r}")
        arguments = tuple(arguments)
        if not all(isinstance(argument, ArgumentSpec) for argument in arguments):
            raise TypeError(f"{cls.__typename__} 'arguments' must contain argument-spec objects")
        options = tuple(options)
        if not all(isinstance(option, OptionSpec) for option in options):
            raise TypeError(f"{cls.__typename__} 'options' must contain option-spec objects")
        if not isinstance(rest, bool):
            raise TypeError(f"{cls.__typename__} 'rest' must be a boolean")

        self = super().__new__(cls)
        self._name = name
        self._arguments = arguments
        self._options = options
        self._rest = rest
        return self

    def option(self, name, /):
        return next((option for option in self._options if option.name == name), None)

    def short(self, flag, /):
        return next((option for option in reversed(self._options) if option.short == flag), None)


def _compile_option(token, content, /):
    """
    Compile the trimmed content of a "{--...}" token into an OptionSpec.
    """
    if not (match := _OPTION.fullmatch(content)):
        raise SignatureError(f"invalid option syntax {token!r}", token=token)

    declared = match["name"]
    initials = []
    for segment in declared.split("-"):
        for position, char in enumerate(segment):
            if char.isupper() and position:
                raise SignatureError(
                    f"invalid option '--{declared}': uppercase letters are only allowed at start of segment",
                    token=token,
                )
        if segment[:1].isupper():
            initials.append(segment[0])

    return OptionSpec(
        "--" + declared.lower(),
        short="-" + "".join(initials) if initials else None,
        value=match["value"] is not None,
        descr=match["descr"].strip(),
    )


def _compile_argument(token, content, /):
    """
    Compile the trimmed content of a "{...}" token into an ArgumentSpec.
    """
    if not (match := _ARGUMENT.fullmatch(content)):
        raise SignatureError(f"invalid argument syntax {token!r}", token=token)
    return ArgumentSpec(
        match["name"],
        required=match["optional"] is None,
        descr=match["descr"].strip(),
    )


def _ensure_unique(kind, names, /):
    seen = set()
    for name in names:
        if name in seen:
            raise SignatureError(f"duplicate {kind} {name!r}", name=name)
        seen.add(name)


def compile(source, /):
    """
    Compile a signature string into a Signature.

    Behavior
    - Tokens are read left to right; the first one is the command name.
    - Braced tokens starting with "--" become options, other braced tokens
      become arguments, "..." enables rest tokens.
    - Names, ordering and uniqueness are validated; the first violation
      raises SignatureError with a readable message.

    Raises
    - TypeError: source is not a string.
    - SignatureError: the signature is malformed.
    """
    if not isinstance(source, str):
        raise TypeError("compile() argument must be a string")

    if not (tokens := _TOKEN.findall(source)):
        raise SignatureError("signature cannot be empty", source=source)

    name, *tokens = tokens
    if name.startswith("{") or name == "...":
        raise SignatureError(f"signature {source.strip()!r} must start with a command name", source=source)

    arguments, options, rest = [], [], False
    for token in tokens:
        if token == "...":
            rest = True
        elif not token.startswith("{"):
            raise SignatureError(
                f"unexpected token {token!r} in signature {source.strip()!r}, command names must be a single word",
                source=source,
            )
        elif (content := token[1:-1].strip()).startswith("--"):
            options.append(_compile_option(token, content))
        else:
            argument = _compile_argument(token, content)
            if argument.required and arguments and not arguments[-1].required:
                raise SignatureError(
                    f"required argument {argument.name!r} cannot follow an optional argument",
                    source=source,
                )
            arguments.append(argument)

    _ensure_unique("argument name", (argument.name for argument in arguments))
    _ensure_unique("option name", (option.name for option in options))

    logger.debug("compiled signature %r", source)
    return Signature(name, arguments, options, rest)


__all__ = (
    "SpecType",
    "ArgumentSpec",
    "OptionSpec",
    "Signature",
    "compile",
)
