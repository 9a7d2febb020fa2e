"""
Zet bootstrap: `zet <command> ...` or `python -m zet <command> ...`

1. find zet_config.py in the working directory or its closest ancestor;
2. export that directory as ZET_ROOT_DIR and make it importable;
3. execute the config, which registers commands on zet.registry;
4. dispatch the command line in shell mode.

ZET_DEBUG turns on debug logging for the whole run. A config may define
__styles__ / __codes__ to customize rendering, as a __main__ module would.
"""
import os
import runpy
import sys

from rich.text import Text

import zet
from zet.console import configure_logging, stderr
from zet.dispatch import Dispatcher
from zet.environment import CONFIG_NAME, ROOT_VARIABLE, debug_enabled, find_config
from zet.faults import format_traceback


def main(argv=None):
    argv = sys.argv[1:] if argv is None else list(argv)

    if debug_enabled():
        configure_logging()

    if (config := find_config()) is None:
        stderr.print(
            Text(f"zet: cannot find {CONFIG_NAME} in the current or any parent directory", "red"),
            soft_wrap=True,
        )
        return 1

    root = os.path.dirname(config)
    os.environ[ROOT_VARIABLE] = root
    if root not in sys.path:
        sys.path.insert(0, root)

    try:
        namespace = runpy.run_path(config, run_name="zet_config")
    except Exception as exception:
        stderr.print(format_traceback(exception, prog=zet.registry.prog), soft_wrap=True)
        return 1

    # make config-level customizations visible where renderers look them up
    main_module = sys.modules["__main__"]
    for name in ("__styles__", "__codes__"):
        if name in namespace:
            setattr(main_module, name, namespace[name])

    return Dispatcher(zet.registry, shell=True).dispatch(argv)


if __name__ == "__main__":
    sys.exit(main())
