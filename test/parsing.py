"""
Parser behavioral tests (orchestration, merging, required options, invoke).

Scope
- Flag, enumerated and callback options end to end.
- Repeat merging and overwrite warnings.
- Required bookkeeping, including present-but-invalid required options.
- Short-option bundles and the end-of-options terminator through invoke().
- Completion suggestions produced during a parse.
- Fault surfacing through report() and invoke().

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (schema, Option, Parser, invoke, Completion).
"""

from __future__ import annotations

import io
import unittest
import warnings
from types import SimpleNamespace
from unittest import TestCase

from rich.console import Console

from helmsman import (
    schema,
    describe,
    Option,
    OptionTable,
    Parser,
    Completion,
    Occurrence,
    PathElement,
    invoke,
    OptionExit,
    InvalidDescriptorError,
    MissingArgumentError,
    InvalidChoiceError,
    RejectedArgumentError,
    MissingRequiredError,
    OverwrittenOptionWarning,
)


def _words(accepted, token):
    return token is not None and not token.startswith("-")


def _table(**declarations):
    table = OptionTable()
    for property, fields in declarations.items():
        descriptor = table.describe(property)
        for name, value in fields.items():
            setattr(descriptor, name, value)
    return table


class TestPolicies(TestCase):
    """Values written on the target for each argument policy."""

    def testFlagSetsTrue(self):
        target = SimpleNamespace()
        parser = Parser(_table(verbose={"long": "--verbose"}))
        self.assertTrue(parser.parse(target, ["--verbose"]))
        self.assertIs(target.verbose, True)

    def testEnumeratedSuccess(self):
        target = SimpleNamespace()
        parser = Parser(_table(mode={"long": "--mode", "args": ["fast", "slow"]}))
        self.assertTrue(parser.parse(target, ["--mode", "fast"]))
        self.assertEqual(target.mode, "fast")

    def testEnumeratedInvalidValueLeavesPropertyUnset(self):
        target = SimpleNamespace()
        parser = Parser(_table(mode={"long": "--mode", "args": ["fast", "slow"]}))
        self.assertFalse(parser.parse(target, ["--mode", "bogus"]))
        self.assertFalse(hasattr(target, "mode"))
        self.assertEqual([type(fault) for fault in parser.faults], [InvalidChoiceError])

    def testEnumeratedMissingValue(self):
        target = SimpleNamespace()
        parser = Parser(_table(mode={"long": "--mode", "args": ["fast", "slow"]}))
        self.assertFalse(parser.parse(target, ["--mode"]))
        self.assertEqual([type(fault) for fault in parser.faults], [MissingArgumentError])

    def testCallbackYieldsListForNonRepeatable(self):
        target = SimpleNamespace()
        parser = Parser(_table(files={"long": "--files", "args": _words}))
        self.assertTrue(parser.parse(target, ["--files", "a", "b"]))
        self.assertEqual(target.files, ["a", "b"])

    def testCallbackErrorsDoNotStopScanning(self):
        def numbers(accepted, token):
            if token is None or token.startswith("-"):
                return False
            return True if token.isdigit() else ValueError("not a number")

        target = SimpleNamespace()
        parser = Parser(_table(
            numbers={"long": "--num", "args": numbers},
            verbose={"short": "-v"},
        ))
        self.assertFalse(parser.parse(target, ["--num", "1", "x", "-v"]))
        self.assertFalse(hasattr(target, "numbers"))
        self.assertIs(target.verbose, True)
        self.assertEqual([type(fault) for fault in parser.faults], [RejectedArgumentError])

    def testExtractionFailureKeepsScanning(self):
        target = SimpleNamespace()
        parser = Parser(_table(
            mode={"long": "--mode", "args": ["fast", "slow"]},
            verbose={"long": "--verbose"},
        ))
        self.assertFalse(parser.parse(target, ["--mode", "bogus", "--verbose"]))
        self.assertIs(target.verbose, True)

    def testMappingTarget(self):
        target = {}
        parser = Parser(_table(
            verbose={"short": "-v"},
            tags={"short": "-t", "repeat": True, "args": ["a", "b"]},
        ))
        self.assertTrue(parser.parse(target, ["-v", "-t", "a", "-t", "b"]))
        self.assertEqual(target, {"verbose": True, "tags": ["a", "b"]})

    def testPlainMappingAsTableSource(self):
        source = _table(
            verbose={"short": "-v", "long": "--verbose"},
            mode={"long": "--mode", "args": ["fast", "slow"]},
        )
        descriptors = dict(source)
        parser = Parser(descriptors)
        descriptors.clear()

        target = SimpleNamespace()
        self.assertTrue(parser.parse(target, ["-v", "--mode", "slow"]))
        self.assertIs(target.verbose, True)
        self.assertEqual(target.mode, "slow")
        self.assertEqual(list(parser.table), ["verbose", "mode"])
        self.assertTrue(source["verbose"].frozen)
        with self.assertRaises(TypeError):
            parser.table["quiet"] = source["verbose"]

    def testPlainMappingIsVerified(self):
        with self.assertRaises(OptionExit) as context:
            Parser({"verbose": object()})
        self.assertEqual(
            [type(exception) for exception in context.exception.exceptions],
            [InvalidDescriptorError],
        )

    def testPlainMappingRendersListing(self):
        parser = Parser(dict(_table(mode={"long": "--mode", "args": ["fast", "slow"]})))
        buffer = io.StringIO()
        Console(file=buffer, width=120, color_system=None).print(parser)
        self.assertIn("--mode", buffer.getvalue())
        self.assertIn("{fast|slow}", buffer.getvalue())

    def testSchemaClassAsTableSource(self):
        @schema
        class Config:
            verbose = Option("-v", "--verbose")
            mode = Option("--mode", args=["fast", "slow"], default="slow")

        config = Config()
        parser = Parser(Config)
        self.assertTrue(parser.parse(config, ["--mode", "fast"]))
        self.assertEqual(config.mode, "fast")
        self.assertIsNone(config.verbose)
        with self.assertRaises(AttributeError):
            describe(Config, "quiet")


class TestMerging(TestCase):
    """Repeat merging and overwrites."""

    def testRepeatAccumulates(self):
        target = SimpleNamespace()
        parser = Parser(_table(x={"short": "-x", "repeat": True, "args": ["a", "b"]}))
        self.assertTrue(parser.parse(target, ["-x", "a", "-x", "b"]))
        self.assertEqual(target.x, ["a", "b"])

    def testRepeatFlattensCallbackLists(self):
        target = SimpleNamespace()
        parser = Parser(_table(tags={"short": "-t", "repeat": True, "args": _words}))
        self.assertTrue(parser.parse(target, ["-t", "a", "b", "-t", "c"]))
        self.assertEqual(target.tags, ["a", "b", "c"])

    def testRepeatAppendsToExistingListInPlace(self):
        initial = ["z"]
        target = SimpleNamespace(x=initial)
        parser = Parser(_table(x={"short": "-x", "repeat": True, "args": ["a", "b"]}))
        self.assertTrue(parser.parse(target, ["-x", "a", "-x", "b"]))
        self.assertIs(target.x, initial)
        self.assertEqual(initial, ["z", "a", "b"])

    def testRepeatAppendsToMappingListInPlace(self):
        initial = []
        target = {"x": initial}
        parser = Parser(_table(x={"short": "-x", "repeat": True, "args": ["a", "b"]}))
        self.assertTrue(parser.parse(target, ["-x", "b"]))
        self.assertIs(target["x"], initial)
        self.assertEqual(initial, ["b"])

    def testRepeatReplacesNonListValue(self):
        target = SimpleNamespace(x=None)
        parser = Parser(_table(x={"short": "-x", "repeat": True, "args": ["a", "b"]}))
        self.assertTrue(parser.parse(target, ["-x", "b"]))
        self.assertEqual(target.x, ["b"])

    def testOverwriteWarnsAndLastWins(self):
        target = SimpleNamespace()
        parser = Parser(_table(mode={"long": "--mode", "args": ["fast", "slow"]}))
        self.assertTrue(parser.parse(target, ["--mode", "fast", "--mode", "slow"]))
        self.assertEqual(target.mode, "slow")
        self.assertEqual([type(fault) for fault in parser.faults], [OverwrittenOptionWarning])


class TestRequired(TestCase):
    """Required-option bookkeeping."""

    def setUp(self):
        self.parser = Parser(_table(name={"long": "--name", "required": True}))

    def testMissingRequired(self):
        self.assertFalse(self.parser.parse(SimpleNamespace(), []))
        self.assertEqual([type(fault) for fault in self.parser.faults], [MissingRequiredError])
        self.assertEqual(self.parser.faults[0].options["property"], "name")

    def testFlagCountsAsProvided(self):
        target = SimpleNamespace()
        self.assertTrue(self.parser.parse(target, ["--name"]))
        self.assertIs(target.name, True)
        self.assertEqual(self.parser.faults, [])

    def testPresentButInvalidIsNotReportedMissing(self):
        parser = Parser(_table(mode={"long": "--mode", "args": ["fast", "slow"], "required": True}))
        self.assertFalse(parser.parse(SimpleNamespace(), ["--mode", "bogus"]))
        self.assertEqual([type(fault) for fault in parser.faults], [InvalidChoiceError])

    def testPresentWithoutArgumentIsNotReportedMissing(self):
        parser = Parser(_table(mode={"long": "--mode", "args": ["fast", "slow"], "required": True}))
        self.assertFalse(parser.parse(SimpleNamespace(), ["--mode"]))
        self.assertEqual([type(fault) for fault in parser.faults], [MissingArgumentError])

    def testFaultsAreResetBetweenParses(self):
        self.assertFalse(self.parser.parse(SimpleNamespace(), []))
        self.assertTrue(self.parser.parse(SimpleNamespace(), ["--name"]))
        self.assertEqual(self.parser.faults, [])


class TestStream(TestCase):
    """Effects of a parse on the token list."""

    def testLeftoverTokensStayInPlace(self):
        parser = Parser(_table(
            verbose={"short": "-v"},
            mode={"long": "--mode", "args": ["fast", "slow"]},
        ))
        path = PathElement("build")
        tokens = [path, "file", "-v", "--mode", "fast", "other"]
        self.assertTrue(parser.parse(SimpleNamespace(), tokens))
        self.assertIs(tokens[0], path)
        self.assertEqual(tokens[1], "file")
        self.assertIsInstance(tokens[2], Occurrence)
        self.assertEqual(tokens[3].value, "fast")
        self.assertEqual(tokens[4:], ["other"])

    def testTerminatorStopsScan(self):
        target = SimpleNamespace()
        parser = Parser(_table(x={"short": "-x"}), "--")
        tokens = ["--", "-x"]
        self.assertTrue(parser.parse(target, tokens))
        self.assertEqual(tokens, ["--", "-x"])
        self.assertFalse(hasattr(target, "x"))

    def testParseRequiresList(self):
        parser = Parser(_table(x={"short": "-x"}))
        with self.assertRaises(TypeError):
            parser.parse(SimpleNamespace(), ("-x",))


class TestCompletionDuringParse(TestCase):
    """Suggestions gathered while parsing."""

    def setUp(self):
        self.parser = Parser(_table(
            verbose={"short": "-v", "long": "--verbose"},
            mode={"long": "--mode", "args": ["fast", "slow"]},
            tags={"short": "-t", "repeat": True, "args": _words},
        ))

    def testPartialKeywordIsSuggested(self):
        completion = Completion(completing=True, editing=True)
        self.parser.parse(SimpleNamespace(), ["--ver"], completion)
        self.assertIn("--verbose", completion.response)

    def testRemainingOptionsAreSuggested(self):
        completion = Completion(completing=True, editing=False)
        self.assertTrue(self.parser.parse(SimpleNamespace(), ["--verbose"], completion))
        self.assertEqual(completion.response, ["--mode", "-t"])

    def testMissingArgumentFallsBackToRemainingOptions(self):
        parser = Parser(_table(
            mode={"long": "--mode", "args": ["fast", "slow"]},
            verbose={"long": "--verbose"},
        ))
        completion = Completion(completing=True, editing=False)
        self.assertFalse(parser.parse(SimpleNamespace(), ["--mode"], completion))
        self.assertEqual(completion.response, ["--mode", "--verbose"])

    def testResolvedContextSkipsRemainingOptions(self):
        completion = Completion(completing=True, editing=True)
        self.parser.parse(SimpleNamespace(), ["--mode", "f"], completion)
        self.assertEqual(completion.response, ["fast"])

    def testInactiveContextCollectsNothing(self):
        completion = Completion()
        self.parser.parse(SimpleNamespace(), ["--ver"], completion)
        self.assertEqual(completion.response, [])


class TestReport(TestCase):
    """Surfacing collected faults."""

    def testWarningsAreWarned(self):
        parser = Parser(_table(mode={"long": "--mode", "args": ["fast", "slow"]}))
        parser.parse(SimpleNamespace(), ["--mode", "fast", "--mode", "slow"])
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            parser.report()
        self.assertEqual([warning.category for warning in caught], [OverwrittenOptionWarning])

    def testErrorsRaiseGroupedExit(self):
        parser = Parser(_table(
            mode={"long": "--mode", "args": ["fast", "slow"]},
            name={"long": "--name", "required": True},
        ))
        parser.parse(SimpleNamespace(), ["--mode", "bogus"])
        with self.assertRaises(OptionExit) as context:
            parser.report()
        self.assertEqual(
            [type(exception) for exception in context.exception.exceptions],
            [InvalidChoiceError, MissingRequiredError],
        )

    def testCleanParseReportsNothing(self):
        parser = Parser(_table(x={"short": "-x"}))
        parser.parse(SimpleNamespace(), ["-x"])
        self.assertIsNone(parser.report())


class TestInvoke(TestCase):
    """The convenience runner."""

    def setUp(self):
        self.parser = Parser(_table(
            a={"short": "-a"},
            b={"short": "-b"},
            c={"short": "-c"},
            x={"short": "-x"},
        ), "--")

    def testBundledShortsAreUnfolded(self):
        target = SimpleNamespace()
        remaining = invoke(self.parser, target, ["-abc"])
        self.assertTrue(target.a and target.b and target.c)
        self.assertEqual([occurrence.keyword for occurrence in remaining], ["-a", "-b", "-c"])

    def testStringPromptIsSplit(self):
        target = SimpleNamespace()
        remaining = invoke(self.parser, target, "-a 'some file'")
        self.assertIs(target.a, True)
        self.assertEqual(remaining[1:], ["some file"])

    def testIterablePromptIsStripped(self):
        target = SimpleNamespace()
        remaining = invoke(self.parser, target, iter([" -a ", "", "rest"]))
        self.assertIs(target.a, True)
        self.assertEqual(remaining[1:], ["rest"])

    def testTerminatorLeavesTokensUntouched(self):
        target = SimpleNamespace()
        remaining = invoke(self.parser, target, ["--", "-x", "-ab"])
        self.assertEqual(remaining, ["--", "-x", "-ab"])
        self.assertFalse(hasattr(target, "x"))

    def testFailureRaises(self):
        parser = Parser(_table(name={"long": "--name", "required": True}))
        with self.assertRaises(OptionExit):
            invoke(parser, SimpleNamespace(), [])

    def testCompletionModeDoesNotRaise(self):
        parser = Parser(_table(name={"long": "--name", "required": True}))
        completion = Completion(completing=True, editing=True)
        invoke(parser, SimpleNamespace(), ["--na"], completion=completion)
        self.assertEqual(completion.response, ["--name"])
        self.assertEqual([type(fault) for fault in parser.faults], [MissingRequiredError])

    def testInvalidPromptRejected(self):
        with self.assertRaises(TypeError):
            invoke(self.parser, SimpleNamespace(), 42)
        with self.assertRaises(TypeError):
            invoke(self.parser, SimpleNamespace(), ["-a", 1])

    def testInvokeRequiresParser(self):
        with self.assertRaises(TypeError):
            invoke(object(), SimpleNamespace(), [])


if __name__ == "__main__":
    unittest.main()
