"""
Arguments module behavioral tests (construction, coercion, per-value checks).

Scope
- Validate public specs (Cardinal, Option, Flag): construction, normalization, dest derivation.
- Validate bind(): str/int/bool/enum coercion and the faults raised on bad input.
- Validate check(): per-value validators, list elements, raising validators.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import enum
import unittest
from unittest import TestCase

from scl import Cardinal, Option, Flag
from scl.faults import DefinitionError, FaultCode, InvalidChoiceError, UncastableValueError
from scl.utils import Unset


class Color(enum.Enum):
    Red = 1
    Blue = 2


class TestCardinal(TestCase):
    """Behavioral tests for Cardinal (positional) specifications."""

    def testCardinalDefaults(self):
        key = Cardinal("key")
        self.assertEqual(key.name, "key")
        self.assertEqual(key.dest, "key")
        self.assertEqual(key.metavar, "<key>")
        self.assertIs(key.type, str)
        self.assertIs(key.nargs, Unset)
        self.assertIsNone(key.descr)
        self.assertEqual(key.validators, ())

    def testCardinalRequiredness(self):
        self.assertTrue(Cardinal("key").required)
        self.assertTrue(Cardinal("value", nargs="+").required)
        self.assertFalse(Cardinal("value", nargs="*").required)
        self.assertFalse(Cardinal("value", nargs="?").required)
        self.assertFalse(Cardinal("key", default="x").required)

    def testCardinalNameMustBeIdentifierLike(self):
        with self.assertRaises(DefinitionError):
            Cardinal("--key")
        with self.assertRaises(DefinitionError):
            Cardinal("")

    def testCardinalDashedNameMapsToUnderscoredDest(self):
        self.assertEqual(Cardinal("app-name").dest, "app_name")

    def testCardinalEmptyDescrRejected(self):
        with self.assertRaises(DefinitionError):
            Cardinal("key", descr="   ")

    def testCardinalListMustCarryStrings(self):
        with self.assertRaises(DefinitionError):
            Cardinal("ports", type=int, nargs="+")

    def testCardinalListInitialIsEmptyTuple(self):
        self.assertEqual(Cardinal("value", nargs="*").initial, ())


class TestOption(TestCase):
    """Behavioral tests for Option (named, value-bearing) specifications."""

    def testOptionRequiresAtLeastOneName(self):
        with self.assertRaises(DefinitionError):
            Option()

    def testOptionDestFromFirstLongName(self):
        self.assertEqual(Option("-b", "--build-type").dest, "build_type")
        self.assertEqual(Option("--user", "--username", "-u").dest, "user")
        self.assertEqual(Option("-x").dest, "x")

    def testOptionExplicitDest(self):
        self.assertEqual(Option("--user", dest="login").dest, "login")

    def testOptionNamesRejectUnderscore(self):
        with self.assertRaises(DefinitionError):
            Option("--bad_name")

    def testOptionDuplicateNamesRejected(self):
        with self.assertRaises(DefinitionError):
            Option("--user", "--user")

    def testOptionOptionalArityRejected(self):
        with self.assertRaises(DefinitionError):
            Option("--level", nargs="?")

    def testOptionEnvvarsMustBeIterableOfStrings(self):
        with self.assertRaises(DefinitionError):
            Option("--user", envvars="USER")
        with self.assertRaises(DefinitionError):
            Option("--user", envvars=("USER", ""))

    def testOptionEnumMetavarListsMembers(self):
        self.assertEqual(Option("--color", type=Color).metavar, "{Red,Blue}")
        self.assertEqual(Option("--user").metavar, "<user>")

    def testOptionReprUsesTypename(self):
        self.assertTrue(repr(Option("--user")).startswith("option("))

    def testOptionSpecsAreReadOnly(self):
        option = Option("--user", envvars=["USER"])
        self.assertEqual(option.envvars, ("USER",))
        with self.assertRaises(AttributeError):
            option.names = ("--other",)


class TestFlag(TestCase):
    """Behavioral tests for Flag (presence-only) specifications."""

    def testFlagNamesValidation(self):
        with self.assertRaises(DefinitionError):
            Flag("verbose")

    def testFlagHelpAliasAccepted(self):
        self.assertEqual(Flag("--help", "-h", "-?").names, ("--help", "-h", "-?"))

    def testFlagInitialIsFalse(self):
        self.assertIs(Flag("--all", "-a").initial, False)


class TestBinding(TestCase):
    """Coercion of raw tokens through bind()."""

    def testBindString(self):
        self.assertEqual(Option("--user").bind("alice"), "alice")

    def testBindInteger(self):
        self.assertEqual(Option("--port", type=int).bind("8080"), 8080)

    def testBindIntegerFailureCarriesContext(self):
        option = Option("--port", type=int)
        with self.assertRaises(UncastableValueError) as context:
            option.bind("eighty")
        fault = context.exception
        self.assertIs(fault.options["code"], FaultCode.UNCASTABLE_VALUE)
        self.assertIs(fault.options["argument"], option)
        self.assertIn("'eighty'", str(fault))
        self.assertIn("'--port'", str(fault))

    def testBindEnumIsCaseInsensitive(self):
        option = Option("--color", type=Color)
        self.assertIs(option.bind("red"), Color.Red)
        self.assertIs(option.bind("BLUE"), Color.Blue)

    def testBindEnumRejectsUnknownMember(self):
        with self.assertRaises(InvalidChoiceError) as context:
            Option("--color", type=Color).bind("green")
        self.assertEqual(context.exception.options["choices"], ["Red", "Blue"])

    def testBindBooleanSpellings(self):
        flag = Flag("--all")
        for raw in ("1", "true", "Yes", "on"):
            self.assertIs(flag.bind(raw), True)
        for raw in ("0", "false", "NO", "off"):
            self.assertIs(flag.bind(raw), False)

    def testBindBooleanRejectsGarbage(self):
        with self.assertRaises(UncastableValueError):
            Flag("--all").bind("maybe")

    def testBindMentionsEnvironmentOrigin(self):
        with self.assertRaises(UncastableValueError) as context:
            Option("--port", type=int).bind("x", origin="PORT")
        self.assertIn("(from $PORT)", str(context.exception))
        self.assertEqual(context.exception.options["origin"], "PORT")


class TestCheck(TestCase):
    """Per-value validators run through check()."""

    def testCheckReturnsEmptyTupleWhenValid(self):
        cardinal = Cardinal("key", validators=(lambda value: None,))
        self.assertEqual(cardinal.check("x"), ())

    def testCheckCollectsStrippedMessages(self):
        cardinal = Cardinal("key", validators=(lambda value: "bad key\n",))
        self.assertEqual(cardinal.check("x"), ("bad key",))

    def testCheckVisitsEveryListElement(self):
        cardinal = Cardinal("value", nargs="+", validators=(lambda value: f"{value} rejected" if value == "b" else None,))
        self.assertEqual(cardinal.check(("a", "b", "c", "b")), ("b rejected", "b rejected"))

    def testCheckReportsRaisingValidator(self):
        def strict(value):
            raise ValueError("unsupported")

        self.assertEqual(Cardinal("key", validators=(strict,)).check("x"), ("strict failed: unsupported",))

    def testValidatorsMustBeCallable(self):
        with self.assertRaises(DefinitionError):
            Cardinal("key", validators=("not callable",))


if __name__ == "__main__":
    unittest.main()
