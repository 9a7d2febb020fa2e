# python
"""
Dispatcher behavioral tests.

Scope
- Resolution: global help, default-group and grouped commands, failures.
- Matching: command help, echoed usage line on errors.
- Execution: callbacks (sync/async/raising/exiting), subprocesses (exit codes,
  rest tokens, spawn failures, signals) and undefined actions.
- Fault surfacing in shell and non-shell mode.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured with contextlib redirection; colorful=False keeps it plain.
- Subprocesses run sys.executable so the suite is portable.
"""

from __future__ import annotations

import asyncio
import io
import os
import sys
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import TestCase

from zet import (
    Dispatcher,
    FrozenRegistryError,
    MissingArgumentError,
    MissingCommandError,
    Registry,
    Rest,
    SpawnError,
    UndefinedActionError,
    UnknownCommandError,
    exit,
)


def _run(registry, *tokens, shell=False):
    """Dispatch tokens and return (code, stdout, stderr)."""
    stdout, stderr = io.StringIO(), io.StringIO()
    with redirect_stdout(stdout), redirect_stderr(stderr):
        code = Dispatcher(registry, shell=shell, colorful=False).dispatch(tokens)
    return code, stdout.getvalue(), stderr.getvalue()


class TestResolution(TestCase):
    """From leading tokens to a command."""

    def setUp(self):
        self.calls = []
        self.registry = Registry()
        self.registry.register("hello").callback(lambda: self.calls.append("hello"))
        docker = self.registry.group("docker", "Docker helpers")
        docker.register("up").callback(lambda: self.calls.append("docker up"))

    def testNoTokensShowsGlobalHelp(self):
        code, stdout, _ = _run(self.registry)
        self.assertEqual(code, 0)
        self.assertIn("Usage: zet <command> [options]", stdout)
        self.assertIn("docker up", stdout)
        self.assertEqual(self.calls, [])

    def testHelpFlagShowsGlobalHelp(self):
        for token in ("--help", "-h"):
            with self.subTest(token=token):
                code, stdout, _ = _run(self.registry, token, "hello")
                self.assertEqual(code, 0)
                self.assertIn('Run "zet <command> --help" for more information.', stdout)

    def testDefaultGroupCommand(self):
        self.assertEqual(_run(self.registry, "hello")[0], 0)
        self.assertEqual(self.calls, ["hello"])

    def testGroupedCommand(self):
        self.assertEqual(_run(self.registry, "docker", "up")[0], 0)
        self.assertEqual(self.calls, ["docker up"])

    def testGroupHelpShowsGlobalHelp(self):
        code, stdout, _ = _run(self.registry, "docker", "--help")
        self.assertEqual(code, 0)
        self.assertIn("Docker helpers:", stdout)

    def testUnknownCommandRaises(self):
        with self.assertRaises(UnknownCommandError) as context:
            _run(self.registry, "nope")
        self.assertEqual(str(context.exception), "unknown command 'nope'")

    def testUnknownGroupedCommandRaises(self):
        with self.assertRaises(UnknownCommandError) as context:
            _run(self.registry, "docker", "nope")
        self.assertEqual(str(context.exception), "unknown command 'docker nope'")

    def testMissingGroupCommandRaises(self):
        with self.assertRaises(MissingCommandError) as context:
            _run(self.registry, "docker")
        self.assertEqual(str(context.exception), "missing command for group 'docker'")

    def testGroupedCommandIsNotInDefaultGroup(self):
        with self.assertRaises(UnknownCommandError):
            _run(self.registry, "up")

    def testShellModePrintsAndExits(self):
        stderr = io.StringIO()
        with redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            Dispatcher(self.registry, shell=True, colorful=False).dispatch(["nope"])
        self.assertEqual(context.exception.code, 1)
        self.assertIn("zet: unknown command 'nope'", stderr.getvalue())

    def testRegistryIsFrozenAfterDispatch(self):
        _run(self.registry, "hello")
        self.assertTrue(self.registry.frozen)
        with self.assertRaises(FrozenRegistryError):
            self.registry.register("late")


class TestMatching(TestCase):
    """Command help and matching errors."""

    def setUp(self):
        self.registry = Registry()
        self.registry.register("greet {name} {--Loud}").description("Say hello").callback(lambda: None)

    def testCommandHelp(self):
        code, stdout, _ = _run(self.registry, "greet", "--help")
        self.assertEqual(code, 0)
        self.assertIn("Usage: zet greet <name> [options]", stdout)
        self.assertIn("Say hello", stdout)
        self.assertIn("--loud, -L", stdout)

    def testMatchErrorRaisesWithCommand(self):
        with self.assertRaises(MissingArgumentError) as context:
            _run(self.registry, "greet")
        self.assertEqual(context.exception.options["command"].name, "greet")

    def testMatchErrorEchoesUsageInShellMode(self):
        stderr = io.StringIO()
        with redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            Dispatcher(self.registry, shell=True, colorful=False).dispatch(["greet"])
        self.assertEqual(context.exception.code, 1)
        output = stderr.getvalue()
        self.assertIn("zet: missing required argument 'name'", output)
        self.assertIn("Usage: zet greet <name> [options]", output)


class TestCallbacks(TestCase):
    """Callback actions."""

    def testAccessorsInsideCallback(self):
        seen = {}
        registry = Registry()

        def handler():
            seen["name"] = registry.argument("name")
            seen["loud"] = registry.option("--loud")
            seen["rest"] = registry.rest

        registry.register("greet {name} {--Loud} ...").callback(handler)
        self.assertEqual(_run(registry, "greet", "ada", "-L", "x")[0], 0)
        self.assertEqual(seen, {"name": "ada", "loud": True, "rest": ("x",)})

    def testAsyncCallbackIsAwaited(self):
        seen = []

        async def handler():
            await asyncio.sleep(0)
            seen.append("done")

        registry = Registry()
        registry.register("wait").callback(handler)
        self.assertEqual(_run(registry, "wait")[0], 0)
        self.assertEqual(seen, ["done"])

    def testRaisingCallbackReturnsOne(self):
        def handler():
            raise ValueError("boom")

        registry = Registry()
        registry.register("fail").callback(handler)
        code, _, stderr = _run(registry, "fail")
        self.assertEqual(code, 1)
        self.assertIn("zet: ValueError: boom", stderr)
        self.assertIn(os.path.basename(__file__), stderr)
        self.assertNotIn(os.path.join("zet", "dispatch.py"), stderr)

    def testExitPropagates(self):
        registry = Registry()
        registry.register("quit").callback(lambda: exit(3))
        with self.assertRaises(SystemExit) as context:
            _run(registry, "quit")
        self.assertEqual(context.exception.code, 3)

    def testUndefinedActionRaises(self):
        registry = Registry()
        registry.register("idle")
        with self.assertRaises(UndefinedActionError) as context:
            _run(registry, "idle")
        self.assertEqual(str(context.exception), "command 'idle' has no action defined")


class TestSubprocesses(TestCase):
    """Subprocess actions."""

    def testExitCodePropagates(self):
        registry = Registry()
        registry.register("child").command(sys.executable, "-c", "import sys; sys.exit(3)")
        self.assertEqual(_run(registry, "child")[0], 3)

    def testRestTokensAreForwarded(self):
        registry = Registry()
        registry.register("child ...").command(
            sys.executable, "-c", "import sys; sys.exit(0 if sys.argv[1:] == ['a', '--b'] else 5)", Rest,
        )
        self.assertEqual(_run(registry, "child", "a", "--b")[0], 0)

    def testSpawnFailureRaises(self):
        registry = Registry()
        registry.register("missing").command("zet-test-no-such-binary")
        with self.assertRaises(SpawnError):
            _run(registry, "missing")

    def testEmptyCommandRaises(self):
        registry = Registry()
        registry.register("empty ...").command(Rest)
        with self.assertRaises(SpawnError):
            _run(registry, "empty")

    @unittest.skipIf(sys.platform == "win32", "POSIX signals only")
    def testSignalTerminationReportsOne(self):
        registry = Registry()
        registry.register("killed").command(
            sys.executable, "-c", "import os, signal; os.kill(os.getpid(), signal.SIGTERM)",
        )
        self.assertEqual(_run(registry, "killed")[0], 1)


if __name__ == "__main__":
    unittest.main()
