"""
Command node and tree construction tests.

Scope
- Validate the shape of the scl tree (names, aliases, handlers, globals).
- Validate build-time invariants: unique names/aliases/switches/dests,
  handler-or-children, dead leaves, sealed trees.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import inspect
import unittest
from unittest import TestCase

from scl import Command, Cardinal, Option, Flag, handlers, tree
from scl.faults import DefinitionError


def leaf(config):
    return 0


class TestTreeShape(TestCase):
    """The fixed scl command tree."""

    def setUp(self):
        self.root = tree.build()

    def testRootMetadata(self):
        self.assertEqual(self.root.name, "scl")
        self.assertEqual(self.root.descr, "System.CommandLine Sample App")
        self.assertIsNone(self.root.parent)
        self.assertTrue(self.root.sealed)

    def testTopLevelCommands(self):
        self.assertEqual(
            list(self.root.children),
            ["add", "bootstrap", "build", "check", "config", "init", "logs", "remove", "set", "sync"],
        )

    def testAliasesRouteToTheSameNode(self):
        bootstrap = self.root.lookup("bootstrap")
        self.assertIs(self.root.lookup("bs"), bootstrap)
        self.assertIs(bootstrap.lookup("rm"), bootstrap.lookup("remove"))
        self.assertEqual(bootstrap.routes, ("add", "remove", "rm"))

    def testUnknownTokenDoesNotRoute(self):
        self.assertIsNone(self.root.lookup("deploy"))

    def testGroupsAreNotInvokable(self):
        self.assertFalse(self.root.invokable)
        self.assertFalse(self.root.lookup("bs").invokable)
        self.assertIsNone(self.root.lookup("bs").handler)

    def testEveryLeafHasHandler(self):
        for command in self.root.walk():
            if command.invokable:
                self.assertTrue(callable(command.handler), command.route)

    def testRoutesAreUniqueAcrossTheTree(self):
        routes = [command.route for command in self.root.walk()]
        self.assertEqual(len(routes), len(set(routes)))
        self.assertIn("scl bootstrap remove", routes)

    def testGlobalsAreInheritedByEveryNode(self):
        dests = [flag.dest for flag in self.root.globals]
        self.assertEqual(dests, ["help", "version", "dry_run", "verbose"])
        self.assertEqual(self.root.lookup("bs").lookup("add").globals, self.root.globals)

    def testPathAndRoute(self):
        add = self.root.lookup("bs").lookup("add")
        self.assertEqual([command.name for command in add.path], ["scl", "bootstrap", "add"])
        self.assertEqual(add.route, "scl bootstrap add")
        self.assertIs(add.root, self.root)

    def testAddUserOptionIsEnvBacked(self):
        user = self.root.lookup("add").switches["--username"]
        self.assertEqual(user.names, ("--user", "--username", "-u"))
        self.assertEqual(user.envvars, ("USER", "USERNAME"))
        self.assertEqual(user.default, "")

    def testSetArguments(self):
        cardinals = self.root.lookup("set").cardinals
        self.assertEqual(list(cardinals), ["key", "value"])
        self.assertEqual(cardinals["value"].nargs, "+")

    def testSealedTreeRejectsMutation(self):
        with self.assertRaises(DefinitionError):
            self.root.add_global(Flag("--quiet", "-q"))
        with self.assertRaises(DefinitionError):
            self.root.lookup("check").add_option(Flag("--fast"))
        with self.assertRaises(DefinitionError):
            Command("deploy", self.root)

    def testBuildReturnsIndependentTrees(self):
        self.assertIsNot(tree.build(), self.root)

    def testHandlerSummariesMatchDescriptions(self):
        for name in handlers.__all__:
            node = self.root
            for part in name.split("_"):
                node = node.lookup(part)
            summary = inspect.getdoc(getattr(handlers, name))
            self.assertIsNotNone(summary, name)
            self.assertEqual(summary.lower(), node.descr.lower(), name)


class TestDefinitionErrors(TestCase):
    """Build-time invariants of command nodes."""

    def setUp(self):
        self.root = Command("tool")

    def testRootCarriesHelpAndVersion(self):
        self.assertEqual([flag.dest for flag in self.root.globals], ["help", "version"])

    def testDuplicateChildNameRejected(self):
        Command("run", self.root)
        with self.assertRaises(DefinitionError):
            Command("run", self.root)

    def testAliasCollidingWithSiblingNameRejected(self):
        Command("remove", self.root)
        with self.assertRaises(DefinitionError):
            Command("delete", self.root, aliases=("remove",))

    def testAliasRepeatingOwnNameRejected(self):
        with self.assertRaises(DefinitionError):
            Command("run", self.root, aliases=("run",))

    def testInvalidCommandNameRejected(self):
        with self.assertRaises(DefinitionError):
            Command("--run", self.root)

    def testDuplicateSwitchAliasRejected(self):
        child = Command("run", self.root)
        child.add_option(Option("--name", "-n"))
        with self.assertRaises(DefinitionError):
            child.add_option(Flag("--dry", "-n"))

    def testDuplicateDestRejected(self):
        child = Command("run", self.root)
        child.add_option(Option("--name"))
        with self.assertRaises(DefinitionError):
            child.add_argument(Cardinal("name"))

    def testSwitchShadowingGlobalRejected(self):
        self.root.add_global(Flag("--verbose", "-v"))
        child = Command("run", self.root)
        with self.assertRaises(DefinitionError):
            child.add_option(Flag("--loud", "-v"))

    def testGlobalClashingWithExistingSwitchRejected(self):
        child = Command("run", self.root)
        child.add_option(Flag("--quiet", "-q"))
        with self.assertRaises(DefinitionError):
            self.root.add_global(Flag("--silent", "-q"))

    def testGlobalsOnlyOnRoot(self):
        child = Command("run", self.root)
        with self.assertRaises(DefinitionError):
            child.add_global(Flag("--debug"))

    def testHandlerNodeCannotOwnChildren(self):
        run = self.root.command("run")(leaf)
        with self.assertRaises(DefinitionError):
            Command("fast", run)

    def testGroupNodeCannotHaveHandler(self):
        group = Command("group", self.root)
        Command("child", group)
        with self.assertRaises(DefinitionError):
            group.bind(leaf)

    def testListArgumentMustBeLast(self):
        run = self.root.command("run")(leaf)
        run.add_argument(Cardinal("values", nargs="+"))
        with self.assertRaises(DefinitionError):
            run.add_argument(Cardinal("extra"))

    def testDeadLeafRejectedOnSeal(self):
        Command("orphan", self.root)
        with self.assertRaises(DefinitionError):
            self.root.seal()

    def testSealOnlyOnRoot(self):
        child = self.root.command("run")(leaf)
        with self.assertRaises(DefinitionError):
            child.seal()

    def testCommandDecoratorUsesDocstringSummary(self):
        def run(config):
            """Run the thing.

            More details here.
            """
            return 0

        self.assertEqual(self.root.command("run")(run).descr, "Run the thing.")

    def testValidatorsMustBeCallable(self):
        with self.assertRaises(TypeError):
            self.root.add_validator("nope")

    def testAddValidatorReturnsValidator(self):
        def rule(result):
            return None

        self.assertIs(self.root.add_validator(rule), rule)
        self.assertEqual(self.root.validators, (rule,))


if __name__ == "__main__":
    unittest.main()
