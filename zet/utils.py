"""
Zet utilities

- Unset: sentinel for "no value given" where None is a legitimate value
  (an action that was never set, a fault without a code).
- rename("name"): decorator giving generated callables a stable name.
- mirror("attr"): read-only property over "self._attr"; containers come back
  as tuple / MappingProxyType / frozenset views.
- palette(defaults): style lookup shared by the renderers, overridable by a
  __styles__ mapping in __main__.
- mglob(pattern): expands "pkg.**.commands" style module globs for include().
"""
import fnmatch
import functools
import importlib
import pkgutil
import re
from collections import defaultdict
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel: falsey, prints as "Unset", survives copies
    and cannot be subclassed.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def rename(name, /):
    """
    Decorator setting __name__ and __qualname__, so closures built at class
    creation show up as "__repr__" rather than "SpecType.__new__.<locals>...".
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        if not callable(function):
            raise TypeError("rename() must be applied to a callable")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _freeze(object):
    """
    Shallow, read-only view of a container value.

    - Sequence (non-string) → tuple
    - Mapping               → MappingProxyType
    - Set                   → frozenset
    - anything else         → returned as-is
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads "_{name}" on the instance and returns a
    read-only view for container types, so public state cannot be mutated
    through the API (only through the owner's explicit setters).
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


def palette(defaults, /):
    """
    Build a style lookup from renderer defaults and host overrides.

    The host application may define a __styles__ mapping in __main__ to
    override any entry. Missing keys resolve to "" so renderers never fail
    on an unknown style name.
    """
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _matches(pattern, name, /):
    """
    tell whether dotted name segments match pattern segments.

    each segment is compared with fnmatch ('*', '?', '[...]', '[!...]'),
    which never crosses a dot since names are split beforehand. a '**'
    segment absorbs zero or more whole segments.
    """
    match pattern, name:
        case (), ():
            return True
        case ("**", *tail), _:
            return any(_matches(tuple(tail), name[index:]) for index in range(len(name) + 1))
        case (head, *tail), (segment, *rest):
            return fnmatch.fnmatchcase(segment, head) and _matches(tuple(tail), tuple(rest))
        case _:
            return False


def mglob(source, /):
    """
    expand a dot-separated module glob into fully-qualified module names.

    patterns
    - segments are separated by '.'
    - inside a segment: '*', '?', '[...]' and '[!...]'
    - segment '**' means zero or more whole segments (may span dots)

    rules
    - must start with at least one concrete segment (no wildcard-only prefix).
    - matches are case-sensitive and returned in sorted order.
    - without wildcards, the source itself is returned as the only candidate.

    examples
    - "deploy.commands.*"  → direct children of deploy.commands
    - "deploy.**.tasks"    → any tasks module under deploy
    """
    if not isinstance(source, str):
        raise TypeError("mglob() argument must be a string")
    elif not (source := source.strip()):
        raise ValueError("mglob() argument must be a non-empty string")

    if re.fullmatch(r"(?!\d)\w+(\.(?!\d)\w+)*", source):
        return [source]

    pattern = tuple(source.split("."))
    prefixes = []
    for segment in pattern:
        if not re.fullmatch(r"(?!\d)\w+", segment):
            break
        prefixes.append(segment)

    if not prefixes:
        raise ValueError("mglob() pattern must start with a concrete package segment")

    try:
        package = importlib.import_module(prefix := ".".join(prefixes))
    except ImportError:
        return []

    matches = set()
    if _matches(pattern, tuple(prefixes)):
        matches.add(prefix)
    if hasattr(package, "__path__"):
        for metadata in pkgutil.walk_packages(package.__path__, prefix + "."):
            if _matches(pattern, tuple(metadata.name.split("."))):
                matches.add(metadata.name)

    return sorted(matches)


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Notes
- Singleton: there is only one Unset instance.
- Falsey, but not equivalent to None or 0.
"""


__all__ = (
    # Functions
    "rename",
    "mirror",
    "palette",
    "mglob",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
