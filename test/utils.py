"""
Utility tests (Unset sentinel, coalesce, rename, identifier, ordinal).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import unittest
from unittest import TestCase

from scl.utils import Unset, UnsetType, coalesce, identifier, ordinal, rename


class TestUnset(TestCase):

    def testUnsetIsSingletonAndFalsy(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnsetSurvivesCopies(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy([Unset])[0], Unset)

    def testUnsetCannotBeSubclassed(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})


class TestHelpers(TestCase):

    def testCoalesceKeepsFalseyValues(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)

    def testRenameForms(self):
        def handler():
            pass

        self.assertEqual(rename(handler, "renamed").__name__, "renamed")
        self.assertEqual(rename("decorated")(handler).__qualname__, "decorated")
        with self.assertRaises(TypeError):
            rename()

    def testIdentifier(self):
        self.assertEqual(identifier("--dry-run"), "dry_run")
        self.assertEqual(identifier("-u"), "u")
        self.assertEqual(identifier("key"), "key")

    def testOrdinal(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(103), "103rd")
        self.assertEqual(ordinal(112), "112th")


if __name__ == "__main__":
    unittest.main()
