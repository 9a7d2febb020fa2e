__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'zet'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .signatures import *
from .matching import *
from .rendering import *
from .parts import *
from .processes import *
from .commands import *
from .dispatch import *
from .console import *
from .environment import *
from .faults import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

# The process-wide registry used by zet_config.py files and the bootstrap.
registry = Registry()

register = registry.register
group = registry.group
include = registry.include
argument = registry.argument
option = registry.option
has_argument = registry.has_argument
has_option = registry.has_option
command = registry.command
silent_command = registry.silent_command
run = registry.run

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info",
    "registry",
    "register",
    "group",
    "include",
    "argument",
    "option",
    "has_argument",
    "has_option",
    "command",
    "silent_command",
    "run",
)

# Load the exposed API of the signatures
__all__ += signatures.__all__  # type: ignore[attr-defined]
# Load the exposed API of the matcher
__all__ += matching.__all__  # type: ignore[attr-defined]
# Load the exposed API of the renderers
__all__ += rendering.__all__  # type: ignore[attr-defined]
# Load the exposed API of the parts
__all__ += parts.__all__  # type: ignore[attr-defined]
# Load the exposed API of the processes
__all__ += processes.__all__  # type: ignore[attr-defined]
# Load the exposed API of the commands
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the dispatcher
__all__ += dispatch.__all__  # type: ignore[attr-defined]
# Load the exposed API of the console
__all__ += console.__all__  # type: ignore[attr-defined]
# Load the exposed API of the environment
__all__ += environment.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
