# python
"""
Utility and console helper behavioral tests.

Scope
- Unset: singleton, falsey, non-subclassable.
- rename(): stable names for generated callables.
- mirror(): read-only properties returning frozen container views.
- palette(): defaults merged with host __styles__.
- mglob(): module glob expansion.
- console helpers: info/line on stdout, error/warning on stderr, verbatim text.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import io
import sys
import unittest
from contextlib import redirect_stderr, redirect_stdout
from types import MappingProxyType
from unittest import TestCase, mock

from zet import error, info, line, warning
from zet.utils import Unset, UnsetType, mglob, mirror, palette, rename


class TestUnset(TestCase):
    """The "not provided" sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testFalseyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})


class TestRename(TestCase):
    """Stable names for generated callables."""

    def testDecorator(self):
        @rename("decorated")
        def function():
            pass

        self.assertEqual(function.__name__, "decorated")

    def testRejectsBadInput(self):
        with self.assertRaises(TypeError):
            rename(3)
        with self.assertRaises(TypeError):
            rename("name")("not callable")


class TestMirror(TestCase):
    """Read-only properties."""

    class Holder:
        items = mirror("items")
        table = mirror("table")
        tags = mirror("tags")
        name = mirror("name")

        def __init__(self):
            self._items = ["a"]
            self._table = {"k": 1}
            self._tags = {"x"}
            self._name = "holder"

    def testFrozenViews(self):
        holder = self.Holder()
        self.assertEqual(holder.items, ("a",))
        self.assertIsInstance(holder.table, MappingProxyType)
        self.assertEqual(holder.tags, frozenset({"x"}))
        self.assertEqual(holder.name, "holder")

    def testMappingViewIsLive(self):
        holder = self.Holder()
        table = holder.table
        holder._table["j"] = 2
        self.assertEqual(table["j"], 2)

    def testReadOnly(self):
        holder = self.Holder()
        with self.assertRaises(AttributeError):
            holder.name = "other"
        with self.assertRaises(TypeError):
            holder.table["k"] = 2


class TestPalette(TestCase):
    """Style lookup."""

    def testDefaultsAndMissingKeys(self):
        styles = palette({"title": "bold"})
        self.assertEqual(styles["title"], "bold")
        self.assertEqual(styles["unknown"], "")

    def testHostOverrides(self):
        main = sys.modules["__main__"]
        with mock.patch.object(main, "__styles__", {"title": "italic"}, create=True):
            self.assertEqual(palette({"title": "bold"})["title"], "italic")


class TestModuleGlob(TestCase):
    """Module name expansion."""

    def testConcreteName(self):
        self.assertEqual(mglob("zet.commands"), ["zet.commands"])

    def testWildcard(self):
        self.assertEqual(mglob("zet.[cd]*"), ["zet.commands", "zet.console", "zet.dispatch"])

    def testSingleCharacter(self):
        self.assertEqual(mglob("zet.pa?ts"), ["zet.parts"])

    def testMissingPackage(self):
        self.assertEqual(mglob("zet_no_such_package.*"), [])

    def testInvalidPatterns(self):
        with self.assertRaises(ValueError):
            mglob("   ")
        with self.assertRaises(ValueError):
            mglob("*.commands")
        with self.assertRaises(TypeError):
            mglob(None)


class TestConsoleHelpers(TestCase):
    """Plain user-facing output."""

    def capture(self, function, message):
        stdout, stderr = io.StringIO(), io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            function(message)
        return stdout.getvalue(), stderr.getvalue()

    def testStreams(self):
        self.assertIn("done", self.capture(info, "done")[0])
        self.assertIn("plain", self.capture(line, "plain")[0])
        self.assertIn("broken", self.capture(error, "broken")[1])
        self.assertIn("careful", self.capture(warning, "careful")[1])

    def testMessagesAreVerbatim(self):
        stdout, _ = self.capture(line, "[bold]not markup[/bold] :smile:")
        self.assertIn("[bold]not markup[/bold] :smile:", stdout)


if __name__ == "__main__":
    unittest.main()
