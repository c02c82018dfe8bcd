"""
Fault tests: codes, copying with context, rich rendering and trigger().
"""
import contextlib
import copy
import io
import unittest
from unittest import TestCase

from rich.console import Console

from mcfp import (
    ConfigException,
    UnknownOptionError,
    MissingArgumentForOptionError,
    FaultCode,
    trigger,
    getdoc,
)


def fault(**options):
    return UnknownOptionError(
        "unknown option '--nope' at second position",
        title="unknown option",
        code=FaultCode.UNKNOWN_OPTION,
        name="nope",
        hint="check the spelling",
        **options,
    )


def render(renderable):
    console = Console(record=True, width=100, color_system=None)
    console.print(renderable)
    return console.export_text()


class TestFaultCode(TestCase):

    def testStableValues(self):
        self.assertEqual(FaultCode.UNKNOWN_OPTION, 11112)
        self.assertEqual(FaultCode.OPTION_DOES_NOT_ACCEPT_ARGUMENT, 11113)
        self.assertEqual(FaultCode.MISSING_ARGUMENT_FOR_OPTION, 11117)
        self.assertEqual(FaultCode.INVALID_CONFIG_FILE, 11151)
        self.assertEqual(FaultCode.CONFIG_FILE_NOT_FOUND, 11152)
        self.assertEqual(FaultCode.OPTION_NOT_SPECIFIED, 11161)
        self.assertEqual(FaultCode.WRONG_TYPE_CAST, 11162)
        self.assertEqual(FaultCode.INVALID_ARGUMENT, 11171)
        self.assertEqual(FaultCode.RESULT_OUT_OF_RANGE, 11172)

    def testNormalize(self):
        self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "11112")

    def testGetdoc(self):
        self.assertIsNone(getdoc(FaultCode.UNKNOWN_OPTION))
        with self.assertRaises(TypeError):
            getdoc(11112)


class TestConfigException(TestCase):

    def testTaxonomy(self):
        self.assertTrue(issubclass(UnknownOptionError, ConfigException))
        self.assertTrue(issubclass(ConfigException, Exception))

    def testMessageAndOptions(self):
        error = fault()
        self.assertEqual(str(error), "unknown option '--nope' at second position")
        self.assertEqual(error.code, FaultCode.UNKNOWN_OPTION)
        self.assertEqual(error.options["name"], "nope")
        with self.assertRaises(TypeError):
            error.options["name"] = "other"

    def testMessageMustBeString(self):
        with self.assertRaises(TypeError):
            ConfigException(42)

    def testReplace(self):
        error = fault()
        changed = copy.replace(error, message="another message", index=2)
        self.assertIsInstance(changed, UnknownOptionError)
        self.assertEqual(changed.message, "another message")
        self.assertEqual(changed.options["index"], 2)
        self.assertEqual(changed.options["name"], "nope")
        self.assertNotIn("index", error.options)

    def testRender(self):
        text = render(fault(prog="tool"))
        self.assertIn("tool", text)
        self.assertIn("11112", text)
        self.assertIn("Unknown Option", text)
        self.assertIn("at second position", text)
        self.assertIn("check the spelling", text)

    def testRenderFancy(self):
        text = render(fault(prog="tool", fancy=True))
        self.assertIn("11112", text)
        self.assertIn("at second position", text)

    def testRenderWithoutHint(self):
        error = MissingArgumentForOptionError("missing argument", code=FaultCode.MISSING_ARGUMENT_FOR_OPTION)
        self.assertNotIn("→", render(error))


class TestTrigger(TestCase):

    def testRaises(self):
        with self.assertRaises(UnknownOptionError) as context:
            trigger(fault(), prog="tool")
        self.assertEqual(context.exception.options["prog"], "tool")

    def testShellExits(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            trigger(fault(), shell=True, colorful=False)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("at second position", stderr.getvalue())

    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))


if __name__ == "__main__":
    unittest.main()
