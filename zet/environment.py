"""
Zet environment (configuration read from the process environment)

Variables
- ZET_ROOT_DIR: project root, i.e. the directory holding zet_config.py. The
  bootstrap exports it; root_path() and file includes resolve against it
  and fall back to the working directory when it is unset.
- ZET_DEBUG: any non-empty value other than "0" turns on debug logging.
- NO_COLOR: honoured by rich's Console (no handling needed here).
"""
import os
import os.path

ROOT_VARIABLE = "ZET_ROOT_DIR"
DEBUG_VARIABLE = "ZET_DEBUG"
CONFIG_NAME = "zet_config.py"


def _resolve(base, subpath, /):
    if subpath is None:
        return base
    if not isinstance(subpath, str | os.PathLike):
        raise TypeError("path helpers expect a string subpath")
    if (subpath := os.fspath(subpath)) == "/":
        return base + "/"
    # subpaths are always relative to the base, even with a leading slash
    return os.path.normpath(os.path.join(base, subpath.lstrip("/" + os.sep)))


def user_path(subpath=None, /):
    """
    Resolve a path against the directory the user invoked zet from.

    - user_path()          -> the working directory
    - user_path("/")       -> the working directory with a trailing "/"
    - user_path("a/b.txt") -> <cwd>/a/b.txt
    """
    return _resolve(os.getcwd(), subpath)


def root_path(subpath=None, /):
    """
    Resolve a path against the project root (ZET_ROOT_DIR), with the same
    forms as user_path().
    """
    return _resolve(os.environ.get(ROOT_VARIABLE) or os.getcwd(), subpath)


def debug_enabled():
    return os.environ.get(DEBUG_VARIABLE, "").strip() not in ("", "0")


def find_config(start=None, /):
    """
    Walk up from start (default: the working directory) and return the path
    of the first zet_config.py found, or None when no ancestor holds one.
    """
    directory = os.path.abspath(start if start is not None else os.getcwd())
    while True:
        if os.path.isfile(candidate := os.path.join(directory, CONFIG_NAME)):
            return candidate
        if (parent := os.path.dirname(directory)) == directory:
            return None
        directory = parent


__all__ = (
    "user_path",
    "root_path",
    "debug_enabled",
    "find_config",
    "ROOT_VARIABLE",
    "DEBUG_VARIABLE",
    "CONFIG_NAME",
)
