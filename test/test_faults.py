"""
Faults module tests: codes, rendering and triggering.
"""
import io
import unittest
from unittest import TestCase
from unittest.mock import patch

from rich.console import Console

from argosy.faults import *


def render(renderable):
    console = Console(record=True, width=100, color_system=None)
    console.print(renderable)
    return console.export_text()


class FaultCodeTest(TestCase):
    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.UNKNOWN_COMMAND.normalize(), "11101")

    def testNormalizeUsesHostLabels(self):
        main = __import__("__main__")
        with patch.object(main, "__codes__", {FaultCode.UNKNOWN_COMMAND: "E-CMD"}, create=True):
            self.assertEqual(FaultCode.UNKNOWN_COMMAND.normalize(), "E-CMD")

    def testGetdoc(self):
        self.assertIsNone(getdoc(FaultCode.INVALID_INPUT))
        with self.assertRaises(TypeError):
            getdoc(11122)


class CommandExceptionTest(TestCase):
    def testDefaults(self):
        fault = UnknownCommandError("unknown command 'x'")
        self.assertEqual(fault.options["code"], FaultCode.UNKNOWN_COMMAND)
        self.assertEqual(fault.options["title"], "unknown command")
        self.assertFalse(fault.options["shell"])
        self.assertEqual(str(fault), "unknown command 'x'")

    def testSuggestionsBecomeHint(self):
        fault = UnknownCommandError("unknown command 'biuld'", suggestions=("build",))
        self.assertEqual(fault.options["hint"], "did you mean 'build'?")

    def testReplaceKeepsMessage(self):
        fault = InputValidationError("platform must not be empty", input="platform")
        replaced = fault.__replace__(shell=True)
        self.assertIsInstance(replaced, InputValidationError)
        self.assertEqual(replaced.message, fault.message)
        self.assertTrue(replaced.options["shell"])
        self.assertEqual(replaced.options["input"], "platform")

    def testRenderPlain(self):
        fault = UnknownCommandError("unknown command 'biuld'", suggestions=("build",), colorful=False, prog="app")
        output = render(fault)
        self.assertIn("app", output)
        self.assertIn("11101", output)
        self.assertIn("Unknown Command", output)
        self.assertIn("did you mean 'build'?", output)

    def testRenderFancy(self):
        fault = InputValidationError("port must be numeric", fancy=True, colorful=False)
        self.assertIn("port must be numeric", render(fault))


class TriggerTest(TestCase):
    def testRaisesOutsideShell(self):
        with self.assertRaises(UnknownCommandError):
            trigger(UnknownCommandError("unknown command 'x'"))

    def testExitsInShell(self):
        with patch("argosy.faults.console", Console(file=io.StringIO())):
            with self.assertRaises(SystemExit) as context:
                trigger(UnknownCommandError("unknown command 'x'"), shell=True)
        self.assertEqual(context.exception.code, 1)

    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))


if __name__ == "__main__":
    unittest.main()
