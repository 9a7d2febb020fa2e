"""
Zet parts (argv building blocks for subprocess actions)

A subprocess action is declared as a sequence of parts, expanded into a flat
argv right before spawning:

- Literal(value): a single argv entry.
- Template(parts): the result of a template() function call.
- Rest: placeholder for the rest tokens of the current invocation.
- Nested(parts): any list/tuple given by the user, flattened in place.

Expansion is depth-first and order-preserving:

    >>> expand(["docker", ["compose", rest()], "--ansi=never"], rest=["up", "-d"])
    ['docker', 'compose', 'up', '-d', '--ansi=never']
"""
import functools
import inspect
from typing import final

from .signatures import SpecType


class Literal(metaclass=SpecType):
    __introspectable__ = ("value",)

    def __new__(cls, value, /):
        if not isinstance(value, str):
            raise TypeError(f"{cls.__typename__} 'value' must be a string")
        self = super().__new__(cls)
        self._value = value
        return self


class Template(metaclass=SpecType):
    """
    Parts produced by a template function; expanded in place.
    """
    __introspectable__ = ("parts",)

    def __new__(cls, parts, /):
        if not isinstance(parts, list | tuple):
            raise TypeError(f"{cls.__typename__} 'parts' must be a list or tuple")
        self = super().__new__(cls)
        self._parts = tuple(map(normalize, parts))
        return self


class Nested(metaclass=SpecType):
    __introspectable__ = ("parts",)

    def __new__(cls, parts, /):
        if not isinstance(parts, list | tuple):
            raise TypeError(f"{cls.__typename__} 'parts' must be a list or tuple")
        self = super().__new__(cls)
        self._parts = tuple(map(normalize, parts))
        return self


@final
class RestType:
    """
    Placeholder type for the rest tokens of the current invocation.

    Singleton per process, see Rest and rest().
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __repr__(self):
        return "Rest"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("type 'RestType' is not an acceptable base type")


Rest = RestType()


def normalize(part, /):
    """
    Map a user-supplied value to a part.

    - parts (Literal, Template, Nested, Rest) pass through;
    - str becomes Literal, list/tuple becomes Nested;
    - anything else becomes Literal(str(part)), e.g. numbers and paths.
    """
    match part:
        case Literal() | Template() | Nested() | RestType():
            return part
        case str():
            return Literal(part)
        case list() | tuple():
            return Nested(part)
        case _:
            return Literal(str(part))


def expand(parts, /, rest=()):
    """
    Flatten parts into a list of argv strings, substituting Rest with the
    given rest tokens.
    """
    rest = tuple(rest)
    result = []
    for part in map(normalize, parts):
        match part:
            case Literal():
                result.append(part.value)
            case Template() | Nested():
                result.extend(expand(part.parts, rest))
            case RestType():
                result.extend(rest)
    return result


def rest():
    """
    Return the rest placeholder, expanded to the invocation's rest tokens.
    """
    return Rest


def template(function, /):
    """
    Turn a function returning a list of parts into a reusable template.

    Calling the template checks that every required positional parameter of
    the function was supplied, calls it, and wraps its list/tuple result in a
    Template part.

        >>> compose = template(lambda service, *args: ["docker", "compose", "exec", service, *args])
        >>> expand([compose("web", "bash")])
        ['docker', 'compose', 'exec', 'web', 'bash']

    Raises (at call time)
    - TypeError: too few arguments, or the function did not return a list/tuple.
    """
    if not callable(function):
        raise TypeError("template() argument must be callable")

    required = [
        parameter.name
        for parameter in inspect.signature(function).parameters.values()
        if parameter.kind in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD)
        and parameter.default is parameter.empty
    ]

    @functools.wraps(function)
    def wrapper(*args, **kwargs):
        given = len(args) + sum(name in kwargs for name in required[len(args):])
        if given < len(required):
            raise TypeError(f"template expects {len(required)} arguments, got {given}")
        if not isinstance(result := function(*args, **kwargs), list | tuple):
            raise TypeError(f"template function must return a list or tuple, not {type(result).__name__}")
        return Template(result)

    return wrapper


__all__ = (
    "Literal",
    "Template",
    "Nested",
    "RestType",
    "Rest",
    "normalize",
    "expand",
    "rest",
    "template",
)
