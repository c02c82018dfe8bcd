"""
Config-file reader tests (parse_config, parse_config_path, locate_config).
"""
import io
import os
import tempfile
import unittest
from unittest import TestCase

from mcfp import (
    Registry,
    make_option,
    parse_arguments,
    parse_config,
    parse_config_path,
    locate_config,
    UnknownOptionError,
    OptionDoesNotAcceptArgumentError,
    MissingArgumentForOptionError,
    InvalidConfigFileError,
    InvalidArgumentError,
    ConfigFileNotFoundError,
)


def registry(*argv, ignore_unknown=False):
    result = Registry(
        make_option("verbose,v"),
        make_option("param_int", int),
        make_option("level", default=1),
        make_option("name", str),
        make_option("file,f", list[str]),
        make_option("x", int),
        make_option("config", str),
        ignore_unknown=ignore_unknown,
    )
    assert parse_arguments(result, ["prog", *argv]) is None
    return result


def parse(text, *argv, ignore_unknown=False):
    r = registry(*argv, ignore_unknown=ignore_unknown)
    return r, parse_config(r, io.StringIO(text))


class TestSyntax(TestCase):

    def testAssignments(self):
        r, fault = parse(
            "# comment\n"
            "\n"
            "verbose\n"
            "param_int = 42\n"
            "name=aap noot, mies\n"
            "   file =   first\n"
        )
        self.assertIsNone(fault)
        self.assertEqual(r.count("verbose"), 1)
        self.assertEqual(r.get("param_int", int), 42)
        self.assertEqual(r.get("name"), "aap noot, mies")
        self.assertEqual(r.get("file"), ["first"])

    def testNoTrailingNewline(self):
        r, fault = parse("param_int=7")
        self.assertIsNone(fault)
        self.assertEqual(r.get("param_int"), 7)

    def testBareFlagWithoutNewline(self):
        r, fault = parse("verbose")
        self.assertIsNone(fault)
        self.assertEqual(r.count("verbose"), 1)

    def testBareValuedOptionWithoutNewline(self):
        _, fault = parse("param_int")
        self.assertIsInstance(fault, MissingArgumentForOptionError)

    def testBareUnknownWithoutNewline(self):
        _, fault = parse("verbose\nbogus")
        self.assertIsInstance(fault, UnknownOptionError)
        self.assertEqual(fault.options["line"], 2)
        self.assertIsNone(parse("bogus", ignore_unknown=True)[1])

    def testHorizontalBlanksOnly(self):
        r, fault = parse("\tparam_int \t= 8\n")
        self.assertIsNone(fault)
        self.assertEqual(r.get("param_int"), 8)
        for text in ("\x0bverbose\n", "verbose\x0c= 1\n", "param_int =\x0c1\n"):
            with self.subTest(text=text):
                fault = parse(text)[1]
                self.assertIsInstance(fault, (InvalidConfigFileError, InvalidArgumentError))

    def testAsciiNamesOnly(self):
        _, fault = parse("v\u00e9rbose\n")
        self.assertIsInstance(fault, InvalidConfigFileError)

    def testByteStream(self):
        r = registry()
        stream = io.BytesIO(b"param_int = 3\nname = caf\xc3\xa9\r\nverbose")
        self.assertIsNone(parse_config(r, stream))
        self.assertEqual(r.get("param_int"), 3)
        self.assertEqual(r.get("name"), "caf\u00e9")
        self.assertEqual(r.count("verbose"), 1)
        self.assertFalse(stream.closed)

    def testUndecodableByteStream(self):
        fault = parse_config(registry(), io.BytesIO(b"verbose\nname = \xff\n"))
        self.assertIsInstance(fault, InvalidConfigFileError)

    def testEndsInCommentOrBlanks(self):
        self.assertIsNone(parse("verbose\n# trailing comment")[1])
        self.assertIsNone(parse("verbose\n   \t")[1])
        self.assertIsNone(parse("")[1])

    def testCarriageReturns(self):
        r, fault = parse("verbose\r\nparam_int=4\r\n")
        self.assertIsNone(fault)
        self.assertEqual(r.count("verbose"), 1)
        self.assertEqual(r.get("param_int"), 4)

    def testSpaceBeforeAssign(self):
        r, _ = parse("param_int   =3")
        self.assertEqual(r.get("param_int"), 3)

    def testFlagWithEmptyValue(self):
        r, fault = parse("verbose =\n")
        self.assertIsNone(fault)
        self.assertEqual(r.count("verbose"), 1)

    def testShortOnlyOptionByCharacter(self):
        r, _ = parse("x = 5")
        self.assertEqual(r.get("x"), 5)

    def testInvalidCharacterAfterName(self):
        _, fault = parse("verbose\naap !\n")
        self.assertIsInstance(fault, InvalidConfigFileError)
        self.assertEqual(fault.options["line"], 2)
        self.assertIn("line 2", fault.message)

    def testInvalidCharacterAtLineStart(self):
        _, fault = parse("!verbose\n")
        self.assertIsInstance(fault, InvalidConfigFileError)

    def testCommentOnlyAtLineStart(self):
        _, fault = parse("verbose # not a comment\n")
        self.assertIsInstance(fault, InvalidConfigFileError)


class TestResolution(TestCase):

    def testMissingValue(self):
        _, fault = parse("param_int\n")
        self.assertIsInstance(fault, MissingArgumentForOptionError)

    def testMissingValueAfterAssign(self):
        _, fault = parse("param_int =   \n")
        self.assertIsInstance(fault, MissingArgumentForOptionError)

    def testFlagWithValue(self):
        _, fault = parse("verbose=1\n")
        self.assertIsInstance(fault, OptionDoesNotAcceptArgumentError)

    def testUnknown(self):
        _, fault = parse("verbose\n\nnope=1\n")
        self.assertIsInstance(fault, UnknownOptionError)
        self.assertEqual(fault.options["line"], 3)

    def testUnknownIgnored(self):
        r, fault = parse("nope=1\nverbose\n", ignore_unknown=True)
        self.assertIsNone(fault)
        self.assertEqual(r.count("verbose"), 1)

    def testConversionFault(self):
        _, fault = parse("\nparam_int = abc\n")
        self.assertIsInstance(fault, InvalidArgumentError)
        self.assertIn("line 2", fault.message)

    def testCommandLineWins(self):
        r, fault = parse("param_int = 2\n", "--param_int=1")
        self.assertIsNone(fault)
        self.assertEqual(r.get("param_int"), 1)
        self.assertEqual(r.count("param_int"), 1)

    def testFirstConfigEntryWins(self):
        r, _ = parse("param_int = 2\nparam_int = 3\n")
        self.assertEqual(r.get("param_int"), 2)

    def testConfigOverridesDefault(self):
        r, _ = parse("level = 2\n")
        self.assertEqual(r.get("level"), 2)

    def testMultiAccumulates(self):
        r, fault = parse("file = noot\nfile = mies\n", "-faap")
        self.assertIsNone(fault)
        self.assertEqual(r.get("file"), ["aap", "noot", "mies"])
        self.assertEqual(r.count("file"), 3)

    def testFailFast(self):
        r, fault = parse("verbose\nnope\nparam_int=1\n")
        self.assertIsInstance(fault, UnknownOptionError)
        self.assertEqual(r.count("verbose"), 1)
        self.assertFalse(r.has("param_int"))


class TestFiles(TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def write(self, *parts, text):
        path = os.path.join(self.tmp.name, *parts)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as stream:
            stream.write(text)
        return path

    def testParsePath(self):
        path = self.write("tool.conf", text="param_int = 9\n")
        r = registry()
        self.assertIsNone(parse_config_path(r, path))
        self.assertEqual(r.get("param_int"), 9)

    def testParsePathMissing(self):
        fault = parse_config_path(registry(), os.path.join(self.tmp.name, "missing.conf"))
        self.assertIsInstance(fault, ConfigFileNotFoundError)

    def testParsePathReportsParseFault(self):
        path = self.write("tool.conf", text="nope\n")
        self.assertIsInstance(parse_config_path(registry(), path), UnknownOptionError)

    def testLocateFirstDirectoryWins(self):
        first = os.path.dirname(self.write("a", "tool.conf", text="param_int = 1\n"))
        second = os.path.dirname(self.write("b", "tool.conf", text="param_int = 2\n"))
        r = registry()
        self.assertIsNone(locate_config(r, "config", "tool.conf", [first, second]))
        self.assertEqual(r.get("param_int"), 1)

    def testLocateSkipsMissingDirectories(self):
        second = os.path.dirname(self.write("b", "tool.conf", text="param_int = 2\n"))
        r = registry()
        self.assertIsNone(locate_config(r, "config", "tool.conf", [os.path.join(self.tmp.name, "a"), second]))
        self.assertEqual(r.get("param_int"), 2)

    def testLocateMissingDefaultIsSilent(self):
        r = registry()
        self.assertIsNone(locate_config(r, "config", "tool.conf", [self.tmp.name]))
        self.assertFalse(r.has("param_int"))

    def testLocateUsesOptionValue(self):
        self.write("tool.conf", text="param_int = 1\n")
        self.write("custom.conf", text="param_int = 3\n")
        r = registry("--config=custom.conf")
        self.assertIsNone(locate_config(r, "config", "tool.conf", [self.tmp.name]))
        self.assertEqual(r.get("param_int"), 3)

    def testLocateExplicitMissingIsFault(self):
        self.write("tool.conf", text="param_int = 1\n")
        r = registry("--config=custom.conf")
        fault = locate_config(r, "config", "tool.conf", [self.tmp.name])
        self.assertIsInstance(fault, ConfigFileNotFoundError)
        self.assertFalse(r.has("param_int"))


if __name__ == "__main__":
    unittest.main()
