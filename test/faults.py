# python
"""
Fault behavioral tests.

Scope
- FaultCode: stable numeric identifiers and host overrides via __codes__.
- trigger(): raising outside shell mode, printing and exiting inside it.
- Rendering: "<prog>: <message>" lines, echoed usage, colorless output.
- Warnings: routed through the warnings module outside shell mode.
- format_traceback(): only user frames are shown.

Conventions
- Test method names follow CamelCase per project convention.
- Rendered output is checked through Text.plain or a recording rich Console.
"""

from __future__ import annotations

import io
import sys
import unittest
from contextlib import redirect_stderr
from unittest import TestCase, mock

from rich.console import Console

from zet import (
    ActionOverrideWarning,
    CommandException,
    FaultCode,
    MatchError,
    MissingArgumentError,
    Registry,
    SpawnError,
    UnknownCommandError,
    format_traceback,
    trigger,
)


def _plain(renderable):
    console = Console(file=io.StringIO(), color_system=None, width=200)
    console.print(renderable, soft_wrap=True)
    return console.file.getvalue()


class TestFaultCodes(TestCase):
    """Class-level codes."""

    def testCodesComeFromDeclaration(self):
        self.assertIs(UnknownCommandError.code, FaultCode.UNKNOWN_COMMAND)
        self.assertIs(SpawnError.code, FaultCode.SPAWN_FAILURE)
        self.assertIs(ActionOverrideWarning.code, FaultCode.ACTION_OVERRIDE)

    def testFamilies(self):
        self.assertTrue(issubclass(MissingArgumentError, MatchError))
        self.assertTrue(issubclass(MatchError, CommandException))

    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "11111")

    def testNormalizeUsesHostCodes(self):
        main = sys.modules["__main__"]
        with mock.patch.object(main, "__codes__", {FaultCode.UNKNOWN_OPTION: "E-OPT"}, create=True):
            self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "E-OPT")


class TestTrigger(TestCase):
    """Surfacing faults."""

    def testRaisesOutsideShell(self):
        with self.assertRaises(UnknownCommandError) as context:
            trigger(UnknownCommandError("unknown command 'x'"), prog="tool")
        self.assertEqual(context.exception.options["prog"], "tool")
        self.assertEqual(str(context.exception), "unknown command 'x'")

    def testOptionsAreMerged(self):
        fault = UnknownCommandError("unknown command 'x'", name="x")
        with self.assertRaises(UnknownCommandError) as context:
            trigger(fault, shell=False)
        self.assertEqual(dict(context.exception.options), {"name": "x", "shell": False})
        self.assertEqual(dict(fault.options), {"name": "x"})

    def testShellPrintsAndExits(self):
        stderr = io.StringIO()
        with redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            trigger(UnknownCommandError("unknown command 'x'"), shell=True, colorful=False)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("zet: unknown command 'x'", stderr.getvalue())

    def testRequiresProtocol(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))

    def testWarningOutsideShell(self):
        with self.assertWarns(ActionOverrideWarning) as context:
            trigger(ActionOverrideWarning("replacing"), shell=False)
        self.assertEqual(str(context.warning), "replacing")

    def testWarningInShellDoesNotExit(self):
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            trigger(ActionOverrideWarning("replacing"), shell=True, colorful=False)
        self.assertIn("zet: replacing", stderr.getvalue())


class TestRendering(TestCase):
    """Rich rendering of faults."""

    def testMessageLine(self):
        fault = UnknownCommandError("unknown command 'x'", prog="tool")
        self.assertEqual(_plain(fault), "tool: unknown command 'x'\n")

    def testUsageIsEchoed(self):
        registry = Registry()
        registry.register("greet {name}")
        command = registry.default.commands["greet"]
        fault = MissingArgumentError("missing required argument 'name'", command=command, colorful=False)
        self.assertEqual(
            _plain(fault),
            "zet: missing required argument 'name'\n\nUsage: zet greet <name>\n",
        )

    def testColorlessHasNoStyles(self):
        text = UnknownCommandError("x", colorful=False).__rich__()
        self.assertFalse([span for span in text.spans if span.style])


class TestFormatTraceback(TestCase):
    """Uncaught error rendering."""

    def raised(self, exception):
        try:
            raise exception
        except Exception as caught:
            return caught

    def testForeignException(self):
        text = format_traceback(self.raised(ValueError("boom")), colorful=False)
        lines = text.plain.splitlines()
        self.assertEqual(lines[0], "zet: ValueError: boom")
        self.assertEqual(lines[1], "")
        self.assertIn(__file__, lines[2])
        self.assertTrue(lines[2].endswith("in raised"))

    def testZetFaultUsesMessage(self):
        text = format_traceback(self.raised(SpawnError("cannot spawn 'x'")), prog="tool", colorful=False)
        self.assertEqual(text.plain.splitlines()[0], "tool: cannot spawn 'x'")

    def testLibraryFramesAreHidden(self):
        try:
            Registry().group(3)
        except TypeError as exception:
            plain = format_traceback(exception, colorful=False).plain
        self.assertIn(__file__, plain)
        self.assertNotIn("commands.py", plain)

    def testWithoutTraceback(self):
        self.assertEqual(format_traceback(KeyError("k"), colorful=False).plain, "zet: KeyError: 'k'")


if __name__ == "__main__":
    unittest.main()
