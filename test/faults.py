"""
Fault, logging and invocation behavioral tests.

Scope
- Validate error kind descriptions and labels.
- Validate fault options, copy.replace merging, rendering and trigger().
- Validate the default logging sink and the per-schema threshold/handler.
- Validate invoke() with argv-like, shell-like and iterable prompts.

Conventions
- Test method names follow CamelCase per project convention.
- Console output is redirected to in-memory rich consoles.
"""
import copy
import io
import sys
import unittest
from unittest import TestCase, mock

from rich.console import Console

from clasp import (
    ErrorKind,
    InvalidOptionError,
    LogLevel,
    ParseFault,
    Positional,
    ResourceExhaustedError,
    Schema,
    TooFewArgumentsError,
    describe,
    emit,
    invoke,
    log,
    trigger,
)
from clasp import faults, logs


def buffered():
    return Console(file=io.StringIO(), width=200, color_system=None)


class TestErrorKinds(TestCase):
    """Descriptions and labels."""

    def testDescriptions(self):
        self.assertEqual(describe(ErrorKind.OK), "no error")
        self.assertEqual(describe(ErrorKind.INVALID_CONFIG), "configuration is invalid")
        self.assertEqual(describe(ErrorKind.TOO_FEW_ARGUMENTS), "required positional arguments missing")
        self.assertEqual(describe(3), "unrecognized option or flag syntax")
        self.assertEqual(describe(42), "unknown error")

    def testNormalizedLabels(self):
        self.assertEqual(ErrorKind.TOO_MANY_ARGUMENTS.normalize(), "too-many-arguments")

    def testFaultKinds(self):
        self.assertIs(InvalidOptionError("x").kind, ErrorKind.INVALID_OPTION)
        self.assertIs(TooFewArgumentsError("x").kind, ErrorKind.TOO_FEW_ARGUMENTS)
        self.assertTrue(issubclass(ResourceExhaustedError, MemoryError))
        self.assertFalse(issubclass(ResourceExhaustedError, ParseFault))


class TestParseFault(TestCase):
    """Options, replacement, rendering and triggering."""

    def testOptionsAreReadOnly(self):
        fault = InvalidOptionError("Unknown short flag '-z'!", token="-z")
        self.assertEqual(str(fault), "Unknown short flag '-z'!")
        self.assertEqual(fault.options["token"], "-z")
        with self.assertRaises(TypeError):
            fault.options["token"] = "-y"

    def testReplaceMergesOptions(self):
        fault = InvalidOptionError("message", token="-z", index=2)
        replaced = copy.replace(fault, index=3, shell=False)
        self.assertIsInstance(replaced, InvalidOptionError)
        self.assertEqual(replaced.message, "message")
        self.assertEqual(dict(replaced.options), {"token": "-z", "index": 3, "shell": False})
        self.assertEqual(fault.options["index"], 2)

    def testRendering(self):
        schema = Schema()
        schema.parse(["tool"])
        console = buffered()
        console.print(InvalidOptionError("Unknown short flag '-z'!", schema=schema, title="unknown flag", hint="drop it"))
        output = console.file.getvalue()
        self.assertIn("invalid-option", output)
        self.assertIn("Unknown Flag", output)
        self.assertIn("Unknown short flag '-z'!", output)
        self.assertIn("drop it", output)

    def testFancyRendering(self):
        console = buffered()
        console.print(TooFewArgumentsError("Missing required arguments (0/1): <a>!", fancy=True, colorful=False))
        output = console.file.getvalue()
        self.assertIn("too-few-arguments", output)
        self.assertIn("<a>", output)

    def testTriggerRaisesOutsideShell(self):
        with self.assertRaises(InvalidOptionError) as context:
            trigger(InvalidOptionError("boom"), hint="retry")
        self.assertEqual(context.exception.options["hint"], "retry")

    def testTriggerExitsInShell(self):
        console = buffered()
        with mock.patch.object(faults, "console", console):
            with self.assertRaises(SystemExit) as context:
                trigger(InvalidOptionError("boom"), shell=True)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("boom", console.file.getvalue())

    def testTriggerRejectsForeignObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("x"))


class TestLogging(TestCase):
    """Default sink, thresholds and handlers."""

    def setUp(self):
        self.stdout, self.stderr = buffered(), buffered()
        patches = (mock.patch.object(logs, "stdout", self.stdout), mock.patch.object(logs, "stderr", self.stderr))
        for patch in patches:
            patch.start()
            self.addCleanup(patch.stop)

    def testTags(self):
        self.assertEqual(LogLevel.INFO.tag, "[INFO]")
        self.assertEqual(LogLevel.CONFIG_ERROR.tag, "[CONFIG_ERROR]")

    def testInfoGoesToStdout(self):
        emit(LogLevel.INFO, "hello")
        self.assertEqual(self.stdout.file.getvalue(), "[INFO] hello\n")
        self.assertEqual(self.stderr.file.getvalue(), "")

    def testOtherLevelsGoToStderr(self):
        emit(LogLevel.ERROR, "bad")
        emit(LogLevel.CONFIG_WARNING, "odd")
        self.assertEqual(self.stderr.file.getvalue(), "[ERROR] bad\n[CONFIG_WARNING] odd\n")

    def testNoLogsIsSilent(self):
        emit(LogLevel.NO_LOGS, "never")
        self.assertEqual(self.stdout.file.getvalue() + self.stderr.file.getvalue(), "")

    def testSchemaThreshold(self):
        schema = Schema(log_level=LogLevel.ERROR)
        log(schema, LogLevel.WARNING, "dropped")
        log(schema, LogLevel.ERROR, "kept")
        schema.log(LogLevel.CONFIG_ERROR, "also kept")
        self.assertEqual(self.stderr.file.getvalue(), "[ERROR] kept\n[CONFIG_ERROR] also kept\n")

    def testSchemaHandlerReplacesSink(self):
        records = []
        schema = Schema(log_handler=lambda level, message: records.append((level, message)))
        schema.log(LogLevel.INFO, "captured")
        self.assertEqual(records, [(LogLevel.INFO, "captured")])
        self.assertEqual(self.stdout.file.getvalue(), "")

    def testWithoutSchema(self):
        log(None, LogLevel.WARNING, "loose")
        self.assertEqual(self.stderr.file.getvalue(), "[WARNING] loose\n")

    def testParseFailureIsLogged(self):
        Schema(Positional("a")).parse(["prog"])
        self.assertEqual(self.stderr.file.getvalue(), "[ERROR] Missing required arguments (0/1): <a>!\n")


class TestInvoke(TestCase):
    """Command-line front end."""

    def setUp(self):
        self.first, self.second = Positional("first"), Positional("second", optional=True)
        self.schema = Schema(self.first, self.second, log_handler=lambda level, message: None)

    def testIterablePrompt(self):
        self.assertIsNone(invoke(self.schema, ["a", "b"], program="tool"))
        self.assertEqual(self.schema.name, "tool")
        self.assertEqual((self.first.value, self.second.value), ("a", "b"))

    def testShellLikePrompt(self):
        self.assertIsNone(invoke(self.schema, "'a b' c", program="tool"))
        self.assertEqual((self.first.value, self.second.value), ("a b", "c"))

    def testArgvPrompt(self):
        with mock.patch.object(sys, "argv", ["/usr/bin/tool", "x"]):
            self.assertIsNone(invoke(self.schema))
        self.assertEqual(self.schema.name, "tool")
        self.assertEqual(self.first.value, "x")

    def testFailureRaises(self):
        with self.assertRaises(TooFewArgumentsError) as context:
            invoke(self.schema, [], program="tool")
        self.assertIs(context.exception.options["schema"], self.schema)

    def testFailureExitsInShell(self):
        console = buffered()
        with mock.patch.object(faults, "console", console):
            with self.assertRaises(SystemExit):
                invoke(self.schema, [], program="tool", shell=True, colorful=False)
        self.assertIn("Missing required arguments (0/1): <first>!", console.file.getvalue())

    def testRejectsForeignObjects(self):
        with self.assertRaises(TypeError):
            invoke(object())
        with self.assertRaises(TypeError):
            invoke(self.schema, [1])
        with self.assertRaises(TypeError):
            invoke(self.schema, 5)


if __name__ == "__main__":
    unittest.main()
