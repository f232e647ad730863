"""
Environment resolver tests (cli > env > default precedence).

Conventions
- Test method names follow CamelCase per project convention.
- Every test passes an explicit environ mapping; os.environ is never read.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from scl import Option, Flag
from scl.environment import Resolution, lookup, resolve
from scl.faults import UncastableValueError
from scl.utils import Unset


def user():
    return Option("--user", "--username", "-u", default="", envvars=("USER", "USERNAME"))


class TestLookup(TestCase):

    def testLookupFirstSetVariableWins(self):
        self.assertEqual(lookup(user(), {"USER": "alice", "USERNAME": "bob"}), ("USER", "alice"))

    def testLookupSkipsEmptyVariables(self):
        self.assertEqual(lookup(user(), {"USER": "", "USERNAME": "bob"}), ("USERNAME", "bob"))

    def testLookupWithoutCandidates(self):
        self.assertEqual(lookup(user(), {}), (None, None))
        self.assertEqual(lookup(Option("--name"), {"NAME": "x"}), (None, None))


class TestResolve(TestCase):

    def testExplicitValueBeatsEnvironment(self):
        resolution = resolve(user(), "carol", {"USER": "alice"})
        self.assertEqual(resolution, Resolution("carol", "cli", None))

    def testEnvironmentBeatsDefault(self):
        resolution = resolve(user(), Unset, {"USERNAME": "bob"})
        self.assertEqual(resolution, Resolution("bob", "env", "USERNAME"))

    def testDefaultWhenNothingElse(self):
        self.assertEqual(resolve(user(), Unset, {}), Resolution("", "default", None))

    def testResolutionIsPureForSameInputs(self):
        environ = {"USER": "alice"}
        self.assertEqual(resolve(user(), Unset, environ), resolve(user(), Unset, environ))

    def testListValuesSplitOnCommas(self):
        services = Option("--services", nargs="+", envvars=("SERVICES",))
        resolution = resolve(services, Unset, {"SERVICES": "a, b,,c"})
        self.assertEqual(resolution.value, ("a", "b", "c"))

    def testTypedEnvironmentValue(self):
        port = Option("--port", type=int, default=80, envvars=("PORT",))
        self.assertEqual(resolve(port, Unset, {"PORT": "8080"}).value, 8080)

    def testFlagFromEnvironment(self):
        debug = Flag("--debug", envvars=("DEBUG",))
        self.assertIs(resolve(debug, Unset, {"DEBUG": "yes"}).value, True)
        self.assertIs(resolve(debug, Unset, {}).value, False)

    def testBadEnvironmentValueRaises(self):
        port = Option("--port", type=int, envvars=("PORT",))
        with self.assertRaises(UncastableValueError) as context:
            resolve(port, Unset, {"PORT": "http"})
        self.assertIn("(from $PORT)", str(context.exception))


if __name__ == "__main__":
    unittest.main()
